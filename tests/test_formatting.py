import pytest

from shipping_sla.formatting import format_time_remaining, format_compact_duration, NO_DEADLINE
from shipping_sla.utils import round_half_up


@pytest.mark.parametrize("hours,expected", [
    (0, "0 phút"),
    (0.25, "15 phút"),
    (1.99, "119 phút"),
    (119 / 60, "119 phút"),
    (2.0, "2h"),
    (2.5, "2h 30p"),
    (47.0, "47h"),
    (3.999, "4h"),
])
def test_format_time_remaining_vi(hours, expected):
    assert format_time_remaining(hours) == expected


def test_two_hour_boundary_is_strict():
    assert format_time_remaining(1.9833) == "119 phút"
    assert format_time_remaining(2.0) == "2h"


def test_format_time_remaining_en():
    assert format_time_remaining(1.5, locale="en") == "90 minutes"
    assert format_time_remaining(5.25, locale="en") == "5h 15m"


def test_no_deadline():
    assert format_time_remaining(None) == NO_DEADLINE
    assert format_compact_duration(None) == NO_DEADLINE


@pytest.mark.parametrize("hours,expected", [
    (0.5, "30p"),
    (3.46, "3.5h"),
    (50.4, "2.1d"),
])
def test_format_compact_duration(hours, expected):
    assert format_compact_duration(hours) == expected


def test_minutes_rounding_to_sixty_carry_into_hour():
    # 0.995h of minutes rounds to 60 and becomes the next whole hour
    assert format_time_remaining(2.995) == "3h"
    assert format_time_remaining(2.995, locale="en") == "3h"
    assert format_time_remaining(5.9999) == "6h"


@pytest.mark.parametrize("value,expected", [
    (0.5, 1),
    (2.5, 3),
    (22.5, 23),
    (30.5, 31),
    (30.49, 30),
])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected
