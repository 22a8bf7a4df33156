from fastapi import APIRouter, Depends, Query, Request

from app.config import settings
from app.schemas.location import AddressOut, AnalyzeOut, AnalyzePayload
from app.services import metrics
from app.services.geo_analyzer import analyze
from app.services.geocode import ReverseGeocoder, default_geocoder
from app.services.location import watermark_label
from app.services.security import AuthUser, require_user

router = APIRouter(prefix="/location", tags=["location"])


def get_geocoder() -> ReverseGeocoder:
    return default_geocoder


def _is_mobile(request: Request) -> bool:
    return "Mobile" in request.headers.get("user-agent", "")


@router.post("/analyze", response_model=AnalyzeOut)
async def analyze_location(
    request: Request,
    payload: AnalyzePayload,
    auth: AuthUser = Depends(require_user),
):
    """Spoofing verdict for the current fix against the client's recent history.

    ``platform_is_mobile`` falls back to the User-Agent when omitted.
    """
    mobile = payload.platform_is_mobile
    if mobile is None:
        mobile = _is_mobile(request)
    # Only the newest samples count, same as the client's rolling window
    history = payload.history[-settings.LOCATION_HISTORY_SIZE:]
    verdict = analyze(payload.current, history, mobile)
    metrics.record_spoof_verdict(verdict.confidence)
    return AnalyzeOut(verdict=verdict, label=watermark_label(payload.current))


@router.get("/reverse", response_model=AddressOut)
async def reverse_geocode(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    auth: AuthUser = Depends(require_user),
    geocoder: ReverseGeocoder = Depends(get_geocoder),
):
    """Best-effort address lookup; ``address`` is null when unavailable."""
    return AddressOut(address=await geocoder.reverse(lat, lng))
