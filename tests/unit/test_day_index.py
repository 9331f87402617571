"""Unit tests for day ordinal resolution."""
import pytest

from normalizers.day_index import day_name_for, match_weekday, resolve_day_index


@pytest.mark.priority_high
@pytest.mark.unit
class TestResolveDayIndex:
    """Numeric fields first, then weekday names, then list position."""

    def test_numeric_day_wins_over_name(self):
        record = {"day": 2, "dayName": "Friday"}
        assert resolve_day_index(record, 7) == 2, "Numeric day field should take precedence"

    def test_day_of_week_used_when_day_missing(self):
        assert resolve_day_index({"dayOfWeek": 4}, 1) == 4
        assert resolve_day_index({"day_of_week": "6"}, 1) == 6

    def test_out_of_range_day_falls_through_to_name(self):
        record = {"day": 9, "dayName": "Sunday"}
        assert resolve_day_index(record, 1) == 7

    def test_integral_float_and_digit_string_accepted(self):
        assert resolve_day_index({"day": 3.0}, 1) == 3
        assert resolve_day_index({"day": " 5 "}, 1) == 5

    def test_booleans_are_not_ordinals(self):
        assert resolve_day_index({"day": True}, 4) == 4, "True must not be read as day 1"

    def test_non_integral_float_rejected(self):
        assert resolve_day_index({"day": 2.5}, 6) == 6

    def test_weekday_name_in_day_field(self):
        assert resolve_day_index({"day": "Wednesday"}, 1) == 3

    @pytest.mark.parametrize(
        "name,expected",
        [("Mon", 1), ("tues", 2), ("THU", 4), ("Saturday", 6), ("sunday.", 7)],
    )
    def test_weekday_prefixes(self, name, expected):
        assert resolve_day_index({"dayName": name}, 1) == expected

    def test_two_letter_prefix_is_not_a_match(self):
        assert resolve_day_index({"dayName": "Mo"}, 3) == 3

    def test_fallback_position(self):
        assert resolve_day_index({"meals": []}, 5) == 5
        assert resolve_day_index("not a record", 2) == 2

    def test_fallback_wraps_past_sunday(self):
        assert resolve_day_index({}, 8) == 1
        assert resolve_day_index({}, 14) == 7


@pytest.mark.priority_medium
@pytest.mark.unit
class TestWeekdayHelpers:
    """Weekday name lookup and matching."""

    def test_day_name_for(self):
        assert day_name_for(1) == "Monday"
        assert day_name_for(7) == "Sunday"

    def test_match_weekday_rejects_non_strings(self):
        assert match_weekday(None) is None
        assert match_weekday(3) is None

    def test_match_weekday_unknown_name(self):
        assert match_weekday("Someday") is None


@pytest.mark.priority_high
@pytest.mark.robustness
class TestMalformedOrdinals:
    """Digit-like values that int() cannot read fall back to list position."""

    @pytest.mark.parametrize("value", ["²", "①", "9" * 5000, 10**400, -10**400, float("inf")])
    def test_unreadable_day_uses_position(self, value):
        assert resolve_day_index({"day": value}, 3) == 3

    def test_oversized_day_of_week_falls_through_to_name(self):
        record = {"dayOfWeek": "1" * 4301, "dayName": "Thursday"}
        assert resolve_day_index(record, 1) == 4
