from __future__ import annotations

import pytest

from fieldnav.core.types import Waypoint
from fieldnav.mission.route_validator import RouteValidationError, validate_route


def _errors(raw) -> list[str]:
    with pytest.raises(RouteValidationError) as info:
        validate_route(raw)
    return info.value.errors


def test_sorted_contiguous_route_is_accepted_unchanged():
    raw = [
        {"numPonto": 1, "lat": -23.5505, "lng": -46.6333},
        {"numPonto": 2, "lat": -23.5506, "lng": -46.6334},
        {"numPonto": 3, "lat": -23.5507, "lng": -46.6335},
    ]
    route = validate_route(raw)
    assert [wp.sequence_number for wp in route] == [1, 2, 3]
    assert route[0] == Waypoint(sequence_number=1, lat=-23.5505, lng=-46.6333)
    assert route[2].lng == -46.6335


def test_permuted_route_is_sorted():
    raw = [
        {"numPonto": 3, "lat": 3.0, "lng": 3.0},
        {"numPonto": 1, "lat": 1.0, "lng": 1.0},
        {"numPonto": 2, "lat": 2.0, "lng": 2.0},
    ]
    route = validate_route(raw)
    assert [wp.sequence_number for wp in route] == [1, 2, 3]
    assert [wp.lat for wp in route] == [1.0, 2.0, 3.0]


def test_duplicate_names_the_value():
    errors = _errors(
        [
            {"numPonto": 1, "lat": 0, "lng": 0},
            {"numPonto": 2, "lat": 0, "lng": 0},
            {"numPonto": 2, "lat": 1, "lng": 1},
        ]
    )
    assert errors == ["Duplicate numPonto: 2."]


def test_gap_reports_expected_and_found():
    errors = _errors([{"numPonto": 1, "lat": 0, "lng": 0}, {"numPonto": 3, "lat": 0, "lng": 0}])
    assert len(errors) == 1
    assert "Expected 2, found 3" in errors[0]


def test_sequence_must_start_at_one():
    errors = _errors([{"numPonto": 2, "lat": 0, "lng": 0}])
    assert "Expected 1, found 2" in errors[0]


def test_top_level_must_be_non_empty_list():
    assert _errors({"numPonto": 1, "lat": 0, "lng": 0}) == ["Route must be a list of points."]
    assert _errors([]) == ["Provide at least one route point."]
    assert _errors(None) == ["Route must be a list of points."]


def test_all_structural_errors_are_collected():
    errors = _errors(
        [
            {"numPonto": 0, "lat": 91, "lng": 0},
            {"numPonto": 2, "lat": 0, "lng": -181},
        ]
    )
    assert len(errors) == 3
    assert any(e.startswith("Point 1") and "greater than or equal to 1" in e for e in errors)
    assert any(e.startswith("Point 1") and "'lat'" in e and "between -90 and 90" in e for e in errors)
    assert any(e.startswith("Point 2") and "'lng'" in e and "between -180 and 180" in e for e in errors)


def test_error_string_joins_lines():
    with pytest.raises(RouteValidationError) as info:
        validate_route([{"numPonto": 1, "lat": 100, "lng": 200}])
    assert str(info.value).split("\n") == info.value.errors
    assert len(info.value.errors) == 2


def test_non_integer_sequence_numbers_are_rejected():
    for bad in ["1", 1.5, True, None]:
        errors = _errors([{"numPonto": bad, "lat": 0, "lng": 0}])
        assert len(errors) == 1
        assert "numPonto must be an integer" in errors[0]


def test_integral_float_sequence_number_is_accepted():
    route = validate_route([{"numPonto": 1.0, "lat": 0, "lng": 0}])
    assert route[0].sequence_number == 1
    assert isinstance(route[0].sequence_number, int)


def test_coordinates_must_be_numbers():
    errors = _errors([{"numPonto": 1, "lat": "10", "lng": float("nan")}])
    assert any("lat must be a number" in e for e in errors)
    assert any("lng must be between" in e for e in errors)


def test_missing_field_and_non_object_element():
    errors = _errors([{"numPonto": 1, "lng": 0}, 5])
    assert any(e.startswith("Point 1") and "'lat'" in e and "required" in e for e in errors)
    assert any(e.startswith("Point 2:") and "expected an object" in e for e in errors)


def test_sequence_number_aliases():
    route = validate_route(
        [
            {"sequenceNumber": 2, "lat": 0, "lng": 0},
            {"sequence_number": 1, "lat": 1, "lng": 1},
        ]
    )
    assert [wp.sequence_number for wp in route] == [1, 2]


def test_boundary_coordinates_are_valid():
    route = validate_route([{"numPonto": 1, "lat": -90, "lng": 180}, {"numPonto": 2, "lat": 90, "lng": -180}])
    assert route[0].lat == -90.0 and route[1].lng == -180.0
