from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Collection
from ..storage.store import RecordStore
from .model import WorkSchedule


class WorkScheduleRepository(Protocol):
    def list_all(self) -> Sequence[WorkSchedule]:
        raise NotImplementedError

    def get_by_id(self, schedule_id: str) -> Optional[WorkSchedule]:
        raise NotImplementedError

    def upsert(self, schedule: WorkSchedule) -> WorkSchedule:
        raise NotImplementedError


def schedule_from_dict(data: dict) -> WorkSchedule:
    return WorkSchedule(
        schedule_id=str(data["id"]),
        name=str(data.get("name") or "Jornada"),
        weekly_minutes=int(data.get("weeklyMinutes") or 0),
        days={str(k): int(v) for k, v in (data.get("days") or {}).items() if v is not None},
    )


def schedule_to_dict(schedule: WorkSchedule) -> dict:
    return {
        "id": schedule.schedule_id,
        "name": schedule.name,
        "weeklyMinutes": schedule.weekly_minutes,
        "days": dict(schedule.days),
    }


class StoreWorkScheduleRepository(WorkScheduleRepository):
    def __init__(self, store: RecordStore):
        self._store = store

    def _load(self) -> list[dict]:
        return self._store.get(Collection.WORK_SCHEDULES.value, [])

    def list_all(self) -> Sequence[WorkSchedule]:
        return [schedule_from_dict(item) for item in self._load() if item.get("id")]

    def get_by_id(self, schedule_id: str) -> Optional[WorkSchedule]:
        for item in self.list_all():
            if item.schedule_id == schedule_id:
                return item
        return None

    def upsert(self, schedule: WorkSchedule) -> WorkSchedule:
        items = [item for item in self._load() if item.get("id") != schedule.schedule_id]
        items.append(schedule_to_dict(schedule))
        self._store.set(Collection.WORK_SCHEDULES.value, items)
        return schedule
