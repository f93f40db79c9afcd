from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceState, RecordStatus


@dataclass(frozen=True)
class Break:
    start_at: datetime
    end_at: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.end_at is None


@dataclass(frozen=True)
class AttendanceRecord:
    """One attendance day of one user.

    The record id is ``"{user_id}_{YYYY-MM-DD}"`` so there is at most one
    record per (user, day). ``total_minutes`` stays 0 until check-out.
    """

    record_id: str
    user_id: str
    work_date: date
    check_in_at: Optional[datetime]
    check_out_at: Optional[datetime] = None
    breaks: tuple[Break, ...] = ()
    notes: Optional[str] = None
    total_minutes: int = 0

    @property
    def status(self) -> RecordStatus:
        return RecordStatus.CLOSED if self.check_out_at is not None else RecordStatus.OPEN

    @property
    def open_break(self) -> Optional[Break]:
        for item in reversed(self.breaks):
            if item.is_open:
                return item
        return None


def make_record_id(user_id: str, work_date: date) -> str:
    return f"{user_id}_{work_date.isoformat()}"


def attendance_state(record: Optional[AttendanceRecord]) -> AttendanceState:
    """Project the current state from the stored fields; it is never persisted."""
    if record is None:
        return AttendanceState.OFF
    if record.check_out_at is not None:
        return AttendanceState.CLOSED
    if record.open_break is not None:
        return AttendanceState.ON_BREAK
    return AttendanceState.IN_SHIFT
