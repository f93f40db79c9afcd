from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..common.datetime_utils import format_timestamp, parse_iso_date, parse_timestamp
from ..core.enums import Collection
from ..storage.store import RecordStore, entry_id, parse_entries
from .model import AttendanceRecord, Break


class AttendanceRepository(Protocol):
    def get_for_user_and_date(self, user_id: str, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def upsert(self, record: AttendanceRecord) -> AttendanceRecord:
        raise NotImplementedError

    def list_for_user(self, user_id: str) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_user_between(self, user_id: str, start: date, end: date) -> Sequence[AttendanceRecord]:
        """Records with ``start <= work_date < end``."""
        raise NotImplementedError

    def list_between(self, start: date, end: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError


def record_from_dict(data: dict) -> AttendanceRecord:
    breaks = tuple(
        Break(start_at=parse_timestamp(b["startAt"]), end_at=parse_timestamp(b.get("endAt")))
        for b in data.get("breaks") or []
        if b.get("startAt")
    )
    return AttendanceRecord(
        record_id=str(data["id"]),
        user_id=str(data["userId"]),
        work_date=parse_iso_date(data["date"]),
        check_in_at=parse_timestamp(data.get("checkInAt")),
        check_out_at=parse_timestamp(data.get("checkOutAt")),
        breaks=breaks,
        notes=data.get("notes"),
        total_minutes=max(int(data.get("totalMinutes") or 0), 0),
    )


def record_to_dict(record: AttendanceRecord) -> dict:
    return {
        "id": record.record_id,
        "userId": record.user_id,
        "date": record.work_date.isoformat(),
        "checkInAt": format_timestamp(record.check_in_at),
        "checkOutAt": format_timestamp(record.check_out_at),
        "breaks": [
            {"startAt": format_timestamp(b.start_at), "endAt": format_timestamp(b.end_at)}
            for b in record.breaks
        ],
        "notes": record.notes,
        "totalMinutes": record.total_minutes,
        # Written for readers of the raw collection; recomputed on load.
        "status": record.status.value,
    }


class StoreAttendanceRepository(AttendanceRepository):
    """Attendance records kept in the ``attendance_records`` collection."""

    def __init__(self, store: RecordStore):
        self._store = store

    def _load(self) -> list[dict]:
        return self._store.get(Collection.ATTENDANCE_RECORDS.value, [])

    def _all(self) -> list[AttendanceRecord]:
        rows = parse_entries(Collection.ATTENDANCE_RECORDS.value, self._load(), record_from_dict)
        return [r for r in rows if r.record_id]

    def get_for_user_and_date(self, user_id: str, work_date: date) -> Optional[AttendanceRecord]:
        for r in self._all():
            if r.user_id == user_id and r.work_date == work_date:
                return r
        return None

    def upsert(self, record: AttendanceRecord) -> AttendanceRecord:
        items = [item for item in self._load() if entry_id(item) != record.record_id]
        items.append(record_to_dict(record))
        self._store.set(Collection.ATTENDANCE_RECORDS.value, items)
        return record

    def list_for_user(self, user_id: str) -> Sequence[AttendanceRecord]:
        rows = [r for r in self._all() if r.user_id == user_id]
        rows.sort(key=lambda r: r.work_date)
        return rows

    def list_for_user_between(self, user_id: str, start: date, end: date) -> Sequence[AttendanceRecord]:
        return [r for r in self.list_for_user(user_id) if start <= r.work_date < end]

    def list_between(self, start: date, end: date) -> Sequence[AttendanceRecord]:
        rows = [r for r in self._all() if start <= r.work_date < end]
        rows.sort(key=lambda r: (r.work_date, r.user_id))
        return rows
