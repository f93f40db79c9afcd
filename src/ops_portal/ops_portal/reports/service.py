from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import minutes_to_hhmm, week_dates, week_start_monday
from ..core.enums import RecordStatus, Role
from ..schedules.resolver import ScheduleResolver, expected_minutes_for_date
from ..users.repository import UserRepository


@dataclass(frozen=True)
class WeeklySummary:
    user_id: str
    week_start: date
    worked_minutes: int
    expected_minutes: int
    balance_minutes: int
    completed_days: int


@dataclass(frozen=True)
class ReportData:
    week_start: date
    rows: list[dict]


class HoursReportService:
    """Weekly and lifetime hour balances, recomputed from stored records on every call."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        resolver: ScheduleResolver,
    ):
        self._attendance = attendance
        self._users = users
        self._resolver = resolver

    def weekly_summary(self, user_id: str, any_day: date) -> WeeklySummary:
        start = week_start_monday(any_day)
        records = self._attendance.list_for_user_between(user_id, start, start + timedelta(days=7))
        schedule = self._resolver.schedule_for_user(user_id)

        worked = sum(r.total_minutes for r in records)
        expected = sum(expected_minutes_for_date(d, schedule) for d in week_dates(start))
        # Sundays never count as completed days.
        completed = sum(1 for r in records if r.status == RecordStatus.CLOSED and r.work_date.weekday() != 6)

        return WeeklySummary(
            user_id=user_id,
            week_start=start,
            worked_minutes=worked,
            expected_minutes=expected,
            balance_minutes=worked - expected,
            completed_days=completed,
        )

    def lifetime_balance(self, user_id: str) -> int:
        schedule = self._resolver.schedule_for_user(user_id)
        return sum(
            r.total_minutes - expected_minutes_for_date(r.work_date, schedule)
            for r in self._attendance.list_for_user(user_id)
        )

    def team_week_report(self, week_day: date, *, user_id: Optional[str] = None) -> ReportData:
        start = week_start_monday(week_day)
        users = [u for u in self._users.list_all() if u.role != Role.ADMIN and u.enabled]
        if user_id:
            users = [u for u in users if u.uid == user_id]

        rows: list[dict] = []
        for u in users:
            s = self.weekly_summary(u.uid, start)
            schedule = self._resolver.schedule_for_user(u.uid)
            rows.append(
                {
                    "user_id": u.uid,
                    "display_name": u.display_name or u.email,
                    "schedule": schedule.name,
                    "worked_hours": minutes_to_hhmm(s.worked_minutes),
                    "expected_hours": minutes_to_hhmm(s.expected_minutes),
                    "balance": minutes_to_hhmm(s.balance_minutes, signed=True),
                    "balance_minutes": s.balance_minutes,
                    "completed_days": s.completed_days,
                    "status": "Pendiente" if s.balance_minutes < 0 else "Al día",
                }
            )

        rows.sort(key=lambda x: x["display_name"].lower())
        return ReportData(week_start=start, rows=rows)
