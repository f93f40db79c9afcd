from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional


@dataclass(frozen=True)
class WorkSchedule:
    """Weekly working target: total minutes and expected minutes per weekday (mon..sun)."""

    schedule_id: str
    name: str
    weekly_minutes: int
    days: Mapping[str, int] = field(default_factory=dict)

    def minutes_for(self, key: str) -> Optional[int]:
        value = self.days.get(key)
        return int(value) if value is not None else None


DEFAULT_WORK_SCHEDULE_ID = "full_time_44"

FULL_TIME_44 = WorkSchedule(
    schedule_id="full_time_44",
    name="Full time",
    weekly_minutes=2640,
    days={"mon": 480, "tue": 480, "wed": 480, "thu": 480, "fri": 480, "sat": 240, "sun": 0},
)

PART_TIME_24 = WorkSchedule(
    schedule_id="part_time_24",
    name="Part time",
    weekly_minutes=1440,
    days={"mon": 240, "tue": 240, "wed": 240, "thu": 240, "fri": 240, "sat": 240, "sun": 0},
)

DEFAULT_WORK_SCHEDULES: tuple[WorkSchedule, ...] = (FULL_TIME_44, PART_TIME_24)
