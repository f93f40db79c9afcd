from __future__ import annotations

from datetime import date
from typing import Optional

from ..common.datetime_utils import weekday_key
from ..users.repository import UserRepository
from .model import DEFAULT_WORK_SCHEDULE_ID, DEFAULT_WORK_SCHEDULES, FULL_TIME_44, WorkSchedule
from .repository import WorkScheduleRepository


def expected_minutes_for_date(day: date, schedule: Optional[WorkSchedule] = None) -> int:
    """Expected minutes for ``day``; days missing from ``schedule`` use the full-time default."""
    key = weekday_key(day)
    if schedule is not None:
        value = schedule.minutes_for(key)
        if value is not None:
            return value
    return FULL_TIME_44.minutes_for(key) or 0


class ScheduleResolver:
    """Resolve which weekly schedule applies to a user."""

    def __init__(self, schedules: WorkScheduleRepository, users: UserRepository):
        self._schedules = schedules
        self._users = users

    def get_schedule(self, schedule_id: Optional[str]) -> Optional[WorkSchedule]:
        if not schedule_id:
            return None
        stored = self._schedules.get_by_id(schedule_id)
        if stored:
            return stored
        for preset in DEFAULT_WORK_SCHEDULES:
            if preset.schedule_id == schedule_id:
                return preset
        return None

    def schedule_for_user(self, user_id: str) -> WorkSchedule:
        user = self._users.get_by_id(user_id)
        schedule = self.get_schedule(user.work_schedule_id if user else None)
        return schedule or self.get_schedule(DEFAULT_WORK_SCHEDULE_ID) or FULL_TIME_44

    def expected_minutes(self, user_id: str, day: date) -> int:
        return expected_minutes_for_date(day, self.schedule_for_user(user_id))
