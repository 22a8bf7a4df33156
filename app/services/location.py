"""
Per-client location tracking.

A ``LocationTracker`` belongs to one client session. It owns the rolling
window of recent fixes that the spoofing analyzer compares against.
"""

import logging
from collections import deque
from typing import Any, Mapping, Optional, Protocol

from app.config import settings
from app.schemas.location import LocationSample, SpoofingVerdict
from app.services import metrics
from app.services.geo_analyzer import CLEAN_VERDICT, analyze

log = logging.getLogger(__name__)


class GeolocationError(Exception):
    # Same codes as the browser's GeolocationPositionError
    PERMISSION_DENIED = 1
    POSITION_UNAVAILABLE = 2
    TIMEOUT = 3

    MESSAGES = {
        PERMISSION_DENIED: "Location permission denied. Please enable location access.",
        POSITION_UNAVAILABLE: "Location information unavailable.",
        TIMEOUT: "Location request timed out.",
    }

    def __init__(self, code: int, detail: str = ""):
        self.code = code
        super().__init__(detail or self.user_message)

    @property
    def user_message(self) -> str:
        return self.MESSAGES.get(self.code, "An unknown error occurred.")


class GeolocationDevice(Protocol):
    async def get_current_position(self) -> Mapping[str, Any]:
        """Raw fix with latitude/longitude/accuracy/timestamp and optional extras.

        Raises GeolocationError when no fix can be produced.
        """
        ...


class AddressLookup(Protocol):
    async def reverse(self, lat: float, lng: float) -> Optional[str]: ...


class LocationTracker:
    def __init__(
        self,
        device: GeolocationDevice,
        geocoder: Optional[AddressLookup] = None,
        history_size: Optional[int] = None,
    ):
        self.device = device
        self.geocoder = geocoder
        self.history: deque[LocationSample] = deque(maxlen=history_size or settings.LOCATION_HISTORY_SIZE)
        self.current: Optional[LocationSample] = None
        self.error: Optional[str] = None
        self.loading = False

    async def refresh(self) -> Optional[LocationSample]:
        """Take one fix from the device and record it.

        Device errors are stored on ``error`` for the UI to show; nothing is
        retried, so a permission prompt is never re-triggered behind the
        user's back.
        """
        self.loading = True
        self.error = None
        try:
            raw = await self.device.get_current_position()
        except GeolocationError as exc:
            log.info("Geolocation failed (code=%s): %s", exc.code, exc)
            self.error = exc.user_message
            self.loading = False
            return None

        sample = LocationSample.model_validate(raw)
        if self.geocoder is not None and sample.address is None:
            address = await self.geocoder.reverse(sample.latitude, sample.longitude)
            if address:
                sample = sample.model_copy(update={"address": address})

        self.current = sample
        self.history.append(sample)
        self.loading = False
        return sample

    def check_for_spoofing(self, platform_is_mobile: bool) -> SpoofingVerdict:
        if self.current is None:
            return CLEAN_VERDICT
        verdict = analyze(self.current, list(self.history), platform_is_mobile)
        metrics.record_spoof_verdict(verdict.confidence)
        return verdict


def watermark_label(sample: LocationSample) -> list[str]:
    """Text lines stamped onto a captured photo; independent of any verdict."""
    lines = [
        f"📍 {sample.latitude:.6f}, {sample.longitude:.6f}",
        f"±{round(sample.accuracy)}m",
    ]
    if sample.address:
        lines.append(sample.address)
    return lines
