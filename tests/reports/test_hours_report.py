from __future__ import annotations

from datetime import date, datetime

import pytest

from src.ops_portal.ops_portal.attendance.model import AttendanceRecord
from src.ops_portal.ops_portal.core.enums import Role
from src.ops_portal.ops_portal.users.model import UserProfile


def closed_day(user_id: str, day: date, minutes: int) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=f"{user_id}_{day.isoformat()}",
        user_id=user_id,
        work_date=day,
        check_in_at=datetime(day.year, day.month, day.day, 9, 0),
        check_out_at=datetime(day.year, day.month, day.day, 18, 0),
        total_minutes=minutes,
    )


@pytest.fixture
def seeded(container):
    users = container.users_repo
    users.upsert(UserProfile(uid="admin-1", email="admin@demo.com", display_name="Carlos", role=Role.ADMIN))
    users.upsert(UserProfile(uid="collab-1", email="a@demo.com", display_name="Alondra", role=Role.COLLAB))
    users.upsert(
        UserProfile(
            uid="collab-2",
            email="d@demo.com",
            display_name="Diego",
            role=Role.COLLAB,
            work_schedule_id="part_time_24",
        )
    )
    users.upsert(UserProfile(uid="gone", email="g@demo.com", display_name="Gone", role=Role.COLLAB, active=False))

    repo = container.attendance_repo
    repo.upsert(closed_day("collab-1", date(2026, 1, 5), 450))
    repo.upsert(closed_day("collab-1", date(2026, 1, 6), 420))
    repo.upsert(closed_day("collab-1", date(2026, 1, 11), 60))
    repo.upsert(closed_day("collab-2", date(2026, 1, 5), 300))
    # Next week, must not leak into the first one.
    repo.upsert(closed_day("collab-1", date(2026, 1, 12), 480))
    return container


def test_weekly_summary(seeded):
    summary = seeded.hours_report_service.weekly_summary("collab-1", date(2026, 1, 8))

    assert summary.week_start == date(2026, 1, 5)
    assert summary.worked_minutes == 930
    assert summary.expected_minutes == 2640
    assert summary.balance_minutes == 930 - 2640
    # Sunday is not a completed day.
    assert summary.completed_days == 2


def test_weekly_summary_uses_assigned_schedule(seeded):
    summary = seeded.hours_report_service.weekly_summary("collab-2", date(2026, 1, 5))

    assert summary.expected_minutes == 1440
    assert summary.balance_minutes == 300 - 1440


def test_lifetime_balance_sums_per_record(seeded):
    # 450-480 + 420-480 + 60-0 + 480-480
    assert seeded.hours_report_service.lifetime_balance("collab-1") == -30


def test_team_report_lists_enabled_collaborators_only(seeded):
    report = seeded.hours_report_service.team_week_report(date(2026, 1, 7))

    assert report.week_start == date(2026, 1, 5)
    assert [r["user_id"] for r in report.rows] == ["collab-1", "collab-2"]
    first = report.rows[0]
    assert first["worked_hours"] == "15:30"
    assert first["expected_hours"] == "44:00"
    assert first["balance"] == "-28:30"
    assert first["status"] == "Pendiente"


def test_team_report_filtered_by_user(seeded):
    report = seeded.hours_report_service.team_week_report(date(2026, 1, 7), user_id="collab-2")

    assert [r["schedule"] for r in report.rows] == ["Part time"]
