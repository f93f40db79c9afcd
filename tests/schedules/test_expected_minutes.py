from datetime import date

import pytest

from src.ops_portal.ops_portal.schedules.model import FULL_TIME_44, PART_TIME_24, WorkSchedule
from src.ops_portal.ops_portal.schedules.resolver import expected_minutes_for_date


def test_saturday_and_sunday_under_default_schedule():
    assert expected_minutes_for_date(date(2026, 1, 10)) == 240
    assert expected_minutes_for_date(date(2026, 1, 11)) == 0


@pytest.mark.parametrize("day", [date(2026, 1, 4), date(2026, 3, 1), date(2027, 8, 1)])
def test_sunday_is_always_zero_by_default(day):
    assert day.weekday() == 6
    assert expected_minutes_for_date(day) == 0


def test_weekday_is_eight_hours():
    assert expected_minutes_for_date(date(2026, 1, 7)) == 480
    assert expected_minutes_for_date(date(2026, 1, 7), FULL_TIME_44) == 480


def test_same_input_same_output():
    day = date(2026, 2, 14)
    assert {expected_minutes_for_date(day, PART_TIME_24) for _ in range(5)} == {240}


def test_missing_days_fall_back_to_full_time():
    partial = WorkSchedule(schedule_id="x", name="Sólo lunes", weekly_minutes=300, days={"mon": 300})

    assert expected_minutes_for_date(date(2026, 1, 5), partial) == 300
    assert expected_minutes_for_date(date(2026, 1, 6), partial) == 480


def test_presets_weekly_totals_match_days():
    for preset in (FULL_TIME_44, PART_TIME_24):
        assert sum(preset.days.values()) == preset.weekly_minutes
