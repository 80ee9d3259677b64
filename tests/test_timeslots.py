import pytest
from lupon_client.timeslots import (
    SESSION_SLOTS,
    minutes_between,
    normalize_time,
    same_slot,
    time_to_minutes,
    to_12_hour,
    to_24_hour,
)


def test_session_slots_skip_lunch_hour():
    assert len(SESSION_SLOTS) == 10
    assert "12:00" not in SESSION_SLOTS
    assert SESSION_SLOTS[0] == "08:00"
    assert SESSION_SLOTS[-1] == "18:00"


@pytest.mark.parametrize(
    ("time24", "expected"),
    [
        ("08:00", "8:00 AM"),
        ("11:00", "11:00 AM"),
        ("12:00", "12:00 PM"),
        ("13:00", "1:00 PM"),
        ("18:00", "6:00 PM"),
        ("00:30", "12:30 AM"),
        ("09:00:00", "9:00 AM"),
    ],
)
def test_to_12_hour(time24, expected):
    assert to_12_hour(time24) == expected


def test_to_24_hour_handles_noon_and_midnight():
    assert to_24_hour("12:00 PM") == "12:00"
    assert to_24_hour("12:15 AM") == "00:15"
    assert to_24_hour("1:00 pm") == "13:00"


def test_normalize_time_accepts_seconds_and_single_digit_hours():
    assert normalize_time("9:00") == "09:00"
    assert normalize_time("14:00:00") == "14:00"
    assert normalize_time(" 3:30 PM ") == "15:30"


@pytest.mark.parametrize("bad", ["", "   ", "noon", "25:00", "10:75"])
def test_normalize_time_rejects_garbage(bad):
    with pytest.raises(ValueError):
        normalize_time(bad)


def test_time_to_minutes_and_distance():
    assert time_to_minutes("13:30") == 810
    assert time_to_minutes("1:30 PM") == 810
    assert minutes_between("09:00", "10:30 AM") == 90


def test_same_slot_across_representations():
    assert same_slot("14:00", "2:00 PM")
    assert same_slot("14:00:00", "14:00")
    assert not same_slot("14:00", "2:00 AM")
    assert not same_slot("14:00", "")
