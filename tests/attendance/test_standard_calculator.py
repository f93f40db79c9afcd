from datetime import date, datetime

from src.ops_portal.ops_portal.attendance.calculator.standard_calculator import StandardWorkedMinutesCalculator
from src.ops_portal.ops_portal.attendance.model import AttendanceRecord, Break


def _record(*breaks):
    return AttendanceRecord(
        record_id="u1_2026-01-05",
        user_id="u1",
        work_date=date(2026, 1, 5),
        check_in_at=datetime(2026, 1, 5, 9, 0),
        breaks=tuple(breaks),
    )


def test_standard_calculator_subtracts_closed_breaks():
    record = _record(Break(datetime(2026, 1, 5, 13, 0), datetime(2026, 1, 5, 13, 30)))

    calc = StandardWorkedMinutesCalculator()
    assert calc.break_minutes(record) == 30
    assert calc.worked_minutes(record, datetime(2026, 1, 5, 18, 0)) == 510


def test_open_break_is_ignored():
    record = _record(Break(datetime(2026, 1, 5, 13, 0)))

    assert StandardWorkedMinutesCalculator().break_minutes(record) == 0


def test_rounds_half_minute_up():
    record = _record()

    assert StandardWorkedMinutesCalculator().worked_minutes(record, datetime(2026, 1, 5, 9, 10, 30)) == 11


def test_never_negative():
    record = _record(Break(datetime(2026, 1, 5, 9, 0), datetime(2026, 1, 5, 11, 0)))

    assert StandardWorkedMinutesCalculator().worked_minutes(record, datetime(2026, 1, 5, 10, 0)) == 0
