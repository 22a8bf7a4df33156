"""
Heuristic location-spoofing analysis.

Everything here is pure: the verdict depends only on the samples passed in.
"""

import math
from typing import Iterator, Optional, Sequence

from app.schemas.location import Confidence, LocationSample, SpoofingVerdict
from app.utils.math import decimal_places, haversine_m

MIN_PLAUSIBLE_ACCURACY_M = 5.0
MAX_PLAUSIBLE_SPEED_MPS = 1000.0
MIN_COORDINATE_DECIMALS = 4
TEST_LOCATION = (37.422, -122.084)
TEST_LOCATION_TOLERANCE_DEG = 0.001

REASON_HIGH_ACCURACY = "Unusually high accuracy reported"
REASON_MISSING_ALTITUDE = "Missing altitude data on mobile device"
REASON_IMPOSSIBLE_SPEED = "Impossible movement speed detected"
REASON_ROUND_COORDINATES = "Suspiciously round coordinates"
REASON_TEST_LOCATION = "Known test location detected"


def implied_speed_mps(earlier: LocationSample, later: LocationSample) -> Optional[float]:
    """Speed needed to travel between two fixes, or None when it is undefined.

    Two fixes at the same instant and place give None; at the same instant
    but different places the speed is infinite.
    """
    distance = haversine_m(earlier.latitude, earlier.longitude, later.latitude, later.longitude)
    seconds = (later.timestamp - earlier.timestamp) / 1000
    if seconds == 0:
        return math.inf if distance > 0 else None
    return distance / abs(seconds)


def is_test_location(latitude: float, longitude: float) -> bool:
    if latitude == 0 and longitude == 0:
        return True
    return (
        abs(latitude - TEST_LOCATION[0]) < TEST_LOCATION_TOLERANCE_DEG
        and abs(longitude - TEST_LOCATION[1]) < TEST_LOCATION_TOLERANCE_DEG
    )


def iter_reasons(
    current: LocationSample,
    history: Sequence[LocationSample],
    platform_is_mobile: bool,
) -> Iterator[str]:
    """Yield a reason for every check that fires, in a fixed order."""
    if current.accuracy < MIN_PLAUSIBLE_ACCURACY_M:
        yield REASON_HIGH_ACCURACY

    if current.altitude is None and platform_is_mobile:
        yield REASON_MISSING_ALTITUDE

    if len(history) >= 2:
        earlier, later = sorted(history, key=lambda s: s.timestamp)[-2:]
        speed = implied_speed_mps(earlier, later)
        if speed is not None and speed > MAX_PLAUSIBLE_SPEED_MPS:
            yield REASON_IMPOSSIBLE_SPEED

    if (
        decimal_places(current.latitude) < MIN_COORDINATE_DECIMALS
        or decimal_places(current.longitude) < MIN_COORDINATE_DECIMALS
    ):
        yield REASON_ROUND_COORDINATES

    if is_test_location(current.latitude, current.longitude):
        yield REASON_TEST_LOCATION


def confidence_for(reason_count: int) -> Confidence:
    if reason_count >= 3:
        return "high"
    if reason_count >= 1:
        return "medium"
    return "low"


def analyze(
    current: LocationSample,
    history: Sequence[LocationSample] = (),
    platform_is_mobile: bool = False,
) -> SpoofingVerdict:
    reasons = list(iter_reasons(current, history, platform_is_mobile))
    return SpoofingVerdict(
        is_suspicious=bool(reasons),
        reasons=reasons,
        confidence=confidence_for(len(reasons)),
    )


CLEAN_VERDICT = SpoofingVerdict(is_suspicious=False, reasons=[], confidence="low")
