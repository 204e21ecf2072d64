from journal.geo import calculate_distance, format_coordinates, is_location_valid
from journal.validation import (
    MAX_NAME_LEN,
    MAX_VISIT_GOAL,
    normalize_name,
    parse_visit_goal,
    validate_location_fields,
)


def test_parse_visit_goal_lenient():
    assert parse_visit_goal("3") == 3
    assert parse_visit_goal(" 4 ") == 4
    assert parse_visit_goal("2 per week") == 2
    assert parse_visit_goal("") == 0
    assert parse_visit_goal("abc") == 0
    assert parse_visit_goal(None) == 0
    assert parse_visit_goal(5) == 5


def test_validate_location_fields_truncates_and_clamps():
    sanitized, msgs = validate_location_fields(name="  " + "N" * (MAX_NAME_LEN + 5), visit_goal="-2")
    assert len(sanitized["name"]) == MAX_NAME_LEN
    assert sanitized["visit_goal"] == 0
    assert any("truncated" in m for m in msgs)
    assert any("between" in m for m in msgs)

    sanitized, msgs = validate_location_fields(name="Lyon", visit_goal=MAX_VISIT_GOAL + 1)
    assert sanitized["visit_goal"] == MAX_VISIT_GOAL


def test_validate_location_requires_name():
    _, msgs = validate_location_fields(name="   ", visit_goal=1)
    assert "Location name is required." in msgs


def test_normalize_name():
    assert normalize_name("  Café   de  FLORE ") == "café de flore"


def test_is_location_valid():
    assert is_location_valid(48.8566, 2.3522)
    assert not is_location_valid(0, 0)
    assert not is_location_valid(91, 0)
    assert not is_location_valid(10, -181)


def test_calculate_distance():
    assert calculate_distance(48.8566, 2.3522, 48.8566, 2.3522) == 0
    # Paris to Lyon is roughly 392 km
    d = calculate_distance(48.8566, 2.3522, 45.7640, 4.8357)
    assert 385_000 < d < 400_000


def test_format_coordinates():
    assert format_coordinates(48.8566, 2.3522) == "48.856600°N, 2.352200°E"
    assert format_coordinates(-33.8688, -151.2093) == "33.868800°S, 151.209300°W"
