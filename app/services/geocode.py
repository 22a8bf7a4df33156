# Reverse geocoding with a bounded TTL cache to reduce external lookups
import logging
import time
from collections import OrderedDict

from fastapi.concurrency import run_in_threadpool
from geopy.exc import GeopyError
from geopy.geocoders import Nominatim

from app.config import settings

log = logging.getLogger(__name__)

_TTL_SECONDS = 24 * 60 * 60
_MAX_ENTRIES = 2048


class ReverseGeocoder:
    """Best-effort address lookup. Never raises; returns None when nothing is known."""

    def __init__(self, geocoder=None, ttl_seconds: int = _TTL_SECONDS, max_entries: int = _MAX_ENTRIES):
        self._geocoder = geocoder
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        # Oldest insert first; both expiry and the size cap evict from the front
        self._cache: OrderedDict[tuple[float, float], tuple[float, str | None]] = OrderedDict()

    @property
    def cached_entries(self) -> int:
        return len(self._cache)

    async def reverse(self, lat: float, lng: float) -> str | None:
        if not self._geocoder:
            return None

        key = (round(lat, 6), round(lng, 6))
        now = time.time()
        cached = self._cache.get(key)
        if cached and (now - cached[0]) < self._ttl:
            return cached[1]

        try:
            # geopy is sync; keep it off the event loop
            loc = await run_in_threadpool(self._geocoder.reverse, (lat, lng), language="en")
        except (GeopyError, ValueError) as exc:
            # Not cached, so the next refresh tries again
            log.info("Could not fetch address for %.6f,%.6f: %s", lat, lng, exc)
            return None

        result = loc.address if loc and loc.address else None
        self._store(key, now, result)
        return result

    def _store(self, key, now: float, result: str | None) -> None:
        self._cache.pop(key, None)
        while self._cache:
            oldest_key, (stamp, _) = next(iter(self._cache.items()))
            if now - stamp < self._ttl and len(self._cache) < self._max_entries:
                break
            del self._cache[oldest_key]
        self._cache[key] = (now, result)


def build_default_geocoder() -> ReverseGeocoder:
    if settings.ENABLE_GEOCODER and settings.GEOCODER_EMAIL:
        return ReverseGeocoder(Nominatim(user_agent=f"geosnap/1 ({settings.GEOCODER_EMAIL})"))
    return ReverseGeocoder(None)


default_geocoder = build_default_geocoder()
