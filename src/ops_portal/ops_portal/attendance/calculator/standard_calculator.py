from __future__ import annotations

from datetime import datetime

from ...common.datetime_utils import round_minutes
from ..model import AttendanceRecord
from .base import WorkedMinutesCalculator


class StandardWorkedMinutesCalculator(WorkedMinutesCalculator):
    """Standard rule: round(out - in) - closed breaks, not below 0."""

    def break_minutes(self, record: AttendanceRecord) -> int:
        total = 0
        for item in record.breaks:
            if item.end_at is None:
                continue
            total += max(0, round_minutes(item.end_at - item.start_at))
        return total

    def worked_minutes(self, record: AttendanceRecord, check_out_at: datetime) -> int:
        if record.check_in_at is None:
            return 0
        minutes = round_minutes(check_out_at - record.check_in_at)
        minutes -= self.break_minutes(record)
        return max(minutes, 0)
