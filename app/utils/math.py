# app/utils/math.py
"""Geometry and number-formatting helpers for location checks"""

import math
from decimal import Decimal

EARTH_RADIUS_M = 6_371_000.0


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters between two lat/lon points"""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)
    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    # Clamp to avoid a domain error from floating-point overshoot
    a = min(1.0, max(0.0, a))
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def decimal_places(value: float) -> int:
    """Digits after the decimal point in the shortest base-10 rendering.

    37.4220 renders as "37.422" (3 places); integral values have none.
    Magnitudes below 1e-6 or from 1e21 up render in exponent form
    ("1e-7", "1.5e-7"), where only the mantissa's fraction counts.
    """
    value = float(value)
    if not math.isfinite(value) or value == 0:
        return 0
    shortest = Decimal(repr(value)).normalize()
    magnitude = shortest.adjusted()
    if magnitude < -6 or magnitude >= 21:
        return len(shortest.as_tuple().digits) - 1
    return max(0, -shortest.as_tuple().exponent)
