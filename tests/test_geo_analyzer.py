# tests/test_geo_analyzer.py
"""Spoofing heuristics: fixed scenarios plus property-based checks"""

from hypothesis import given, strategies as st

from app.schemas.location import LocationSample
from app.services.geo_analyzer import (
    REASON_HIGH_ACCURACY,
    REASON_IMPOSSIBLE_SPEED,
    REASON_MISSING_ALTITUDE,
    REASON_ROUND_COORDINATES,
    REASON_TEST_LOCATION,
    analyze,
    confidence_for,
    implied_speed_mps,
)


def sample(lat=51.507351, lon=-0.127758, accuracy=12.5, altitude=35.0, ts=1_700_000_000_000, **extra):
    return LocationSample(latitude=lat, longitude=lon, accuracy=accuracy, altitude=altitude, timestamp=ts, **extra)


def test_plausible_fix_is_clean():
    verdict = analyze(sample(), [], platform_is_mobile=True)
    assert verdict.is_suspicious is False
    assert verdict.reasons == []
    assert verdict.confidence == "low"


def test_perfect_fix_with_round_coordinates_is_high_confidence():
    current = sample(lat=37.4, lon=-122.08, accuracy=1, altitude=None)
    verdict = analyze(current, [], platform_is_mobile=True)
    assert verdict.reasons == [REASON_HIGH_ACCURACY, REASON_MISSING_ALTITUDE, REASON_ROUND_COORDINATES]
    assert verdict.is_suspicious is True
    assert verdict.confidence == "high"


def test_missing_altitude_only_counts_on_mobile():
    current = sample(altitude=None)
    assert analyze(current, [], platform_is_mobile=False).reasons == []
    assert analyze(current, [], platform_is_mobile=True).reasons == [REASON_MISSING_ALTITUDE]


def test_accuracy_threshold_is_strict():
    assert REASON_HIGH_ACCURACY not in analyze(sample(accuracy=5)).reasons
    assert REASON_HIGH_ACCURACY in analyze(sample(accuracy=4.99)).reasons


def test_teleport_between_last_two_fixes():
    history = [sample(lat=0, lon=0, ts=0), sample(lat=10, lon=10, ts=1000)]
    speed = implied_speed_mps(*history)
    assert 1_560_000 < speed < 1_575_000
    verdict = analyze(history[-1], history)
    assert REASON_IMPOSSIBLE_SPEED in verdict.reasons


def test_speed_uses_chronological_order():
    a = sample(lat=51.5073, lon=-0.1277, ts=0)
    b = sample(lat=51.5074, lon=-0.1278, ts=60_000)
    far = sample(lat=48.8566, lon=2.3522, ts=-3_600_000)
    # "far" is oldest even though it comes last in the list
    verdict = analyze(b, [a, b, far])
    assert REASON_IMPOSSIBLE_SPEED not in verdict.reasons


def test_walking_pace_is_fine():
    history = [sample(lat=51.507351, lon=-0.127758, ts=0), sample(lat=51.507451, lon=-0.127758, ts=10_000)]
    assert REASON_IMPOSSIBLE_SPEED not in analyze(history[-1], history).reasons


def test_same_instant_different_place_is_impossible():
    history = [sample(lat=51.5073, lon=-0.1277, ts=5000), sample(lat=51.5173, lon=-0.1277, ts=5000)]
    assert implied_speed_mps(*history) == float("inf")
    assert REASON_IMPOSSIBLE_SPEED in analyze(history[-1], history).reasons


def test_same_instant_same_place_skips_speed_check():
    history = [sample(ts=5000), sample(ts=5000)]
    assert implied_speed_mps(*history) is None
    assert REASON_IMPOSSIBLE_SPEED not in analyze(history[-1], history).reasons


def test_single_history_entry_skips_speed_check():
    assert REASON_IMPOSSIBLE_SPEED not in analyze(sample(), [sample(lat=0.123456, ts=0)]).reasons


def test_round_coordinates_either_axis():
    assert REASON_ROUND_COORDINATES in analyze(sample(lat=51.507)).reasons
    assert REASON_ROUND_COORDINATES in analyze(sample(lon=-0.12)).reasons
    assert REASON_ROUND_COORDINATES not in analyze(sample(lat=51.5073, lon=-0.1277)).reasons


def test_tiny_coordinates_read_as_round():
    # 1e-7 renders as "1e-07", which has no digits after a decimal point
    verdict = analyze(sample(lat=1e-7, lon=1e-7))
    assert verdict.reasons == [REASON_ROUND_COORDINATES]


def test_null_island_is_a_test_location():
    verdict = analyze(sample(lat=0, lon=0))
    assert verdict.reasons == [REASON_ROUND_COORDINATES, REASON_TEST_LOCATION]
    assert verdict.confidence == "medium"


def test_near_reference_test_location():
    verdict = analyze(sample(lat=37.4225, lon=-122.0845))
    assert verdict.reasons == [REASON_TEST_LOCATION]
    assert verdict.confidence == "medium"
    assert REASON_TEST_LOCATION not in analyze(sample(lat=37.4235, lon=-122.0845)).reasons


def test_reference_location_written_to_four_places():
    # 37.4220 renders as 37.422, so it reads as round as well as a test location
    verdict = analyze(sample(lat=37.4220, lon=-122.0840, accuracy=50, altitude=10), [], platform_is_mobile=True)
    assert verdict.reasons == [REASON_ROUND_COORDINATES, REASON_TEST_LOCATION]


def test_first_reason_follows_check_order():
    current = sample(lat=0, lon=0, accuracy=1, altitude=None)
    history = [sample(lat=10.123456, lon=10.123456, ts=0), sample(lat=0, lon=0, ts=1000)]
    verdict = analyze(current, history, platform_is_mobile=True)
    assert verdict.reasons == [
        REASON_HIGH_ACCURACY,
        REASON_MISSING_ALTITUDE,
        REASON_IMPOSSIBLE_SPEED,
        REASON_ROUND_COORDINATES,
        REASON_TEST_LOCATION,
    ]
    assert verdict.confidence == "high"


def test_camel_case_payload_is_accepted():
    s = LocationSample.model_validate(
        {"latitude": 1.23456, "longitude": 2.34567, "accuracy": 10, "altitudeAccuracy": 3, "isMocked": False, "timestamp": 1}
    )
    assert s.altitude_accuracy == 3
    assert s.is_mocked is False


def test_confidence_levels():
    assert [confidence_for(n) for n in range(6)] == ["low", "medium", "medium", "high", "high", "high"]


samples = st.builds(
    LocationSample,
    latitude=st.floats(min_value=-90, max_value=90, allow_nan=False),
    longitude=st.floats(min_value=-180, max_value=180, allow_nan=False),
    accuracy=st.floats(min_value=0, max_value=5000, allow_nan=False),
    altitude=st.one_of(st.none(), st.floats(min_value=-500, max_value=9000, allow_nan=False)),
    timestamp=st.integers(min_value=0, max_value=2**41),
)


@given(samples, st.lists(samples, max_size=10), st.booleans())
def test_analyze_is_pure(current, history, mobile):
    first = analyze(current, history, mobile)
    second = analyze(current, list(history), mobile)
    assert first == second


@given(samples, st.lists(samples, max_size=10), st.booleans())
def test_verdict_is_consistent(current, history, mobile):
    verdict = analyze(current, history, mobile)
    assert verdict.is_suspicious == bool(verdict.reasons)
    assert verdict.confidence == confidence_for(len(verdict.reasons))
    assert len(set(verdict.reasons)) == len(verdict.reasons)
