from __future__ import annotations

from typing import Callable, Optional, Protocol, Sequence

from ..common.datetime_utils import format_timestamp, parse_iso_date, parse_timestamp
from ..core.enums import Collection, ExtraActivityType, RequestKind, RequestStatus, RequestType
from ..storage.store import RecordStore, entry_id, parse_entries
from .model import CorrectionRequest, ExtraActivity, Request, RequestItem


class RequestRepository(Protocol):
    def list_items(
        self,
        kind: RequestKind,
        *,
        user_id: Optional[str] = None,
        status: Optional[RequestStatus] = None,
    ) -> Sequence[RequestItem]:
        """Items newest first (storage order)."""
        raise NotImplementedError

    def get(self, kind: RequestKind, item_id: str) -> Optional[RequestItem]:
        raise NotImplementedError

    def prepend(self, kind: RequestKind, item: RequestItem) -> RequestItem:
        raise NotImplementedError

    def replace(self, kind: RequestKind, item: RequestItem) -> bool:
        raise NotImplementedError


def _status(value) -> RequestStatus:
    try:
        return RequestStatus(str(value).upper())
    except ValueError:
        return RequestStatus.PENDING


def _optional_date(value):
    return parse_iso_date(value) if value else None


def extra_from_dict(data: dict) -> ExtraActivity:
    try:
        activity_type = ExtraActivityType(data.get("type"))
    except ValueError:
        activity_type = ExtraActivityType.OTRO
    return ExtraActivity(
        activity_id=str(data["id"]),
        user_id=str(data["userId"]),
        work_date=parse_iso_date(data["date"]),
        minutes=int(data.get("minutes") or 0),
        activity_type=activity_type,
        status=_status(data.get("status")),
        created_at=parse_timestamp(data["createdAt"]),
        project=data.get("project"),
        note=data.get("note"),
        reviewed_by=data.get("reviewedBy"),
        reviewed_at=parse_timestamp(data.get("reviewedAt")),
    )


def extra_to_dict(item: ExtraActivity) -> dict:
    return {
        "id": item.activity_id,
        "userId": item.user_id,
        "date": item.work_date.isoformat(),
        "minutes": item.minutes,
        "type": item.activity_type.value,
        "project": item.project,
        "note": item.note,
        "status": item.status.value,
        "createdAt": format_timestamp(item.created_at),
        "reviewedBy": item.reviewed_by,
        "reviewedAt": format_timestamp(item.reviewed_at),
    }


def request_from_dict(data: dict) -> Request:
    return Request(
        request_id=str(data["id"]),
        user_id=str(data["userId"]),
        request_type=RequestType(data["type"]),
        start_date=parse_iso_date(data["date"]),
        reason=str(data.get("reason") or ""),
        status=_status(data.get("status")),
        created_at=parse_timestamp(data["createdAt"]),
        end_date=_optional_date(data.get("endDate")),
        hours=float(data["hours"]) if data.get("hours") is not None else None,
        attachment_url=data.get("attachmentUrl"),
        reviewed_by=data.get("reviewedBy"),
        reviewed_at=parse_timestamp(data.get("reviewedAt")),
    )


def request_to_dict(item: Request) -> dict:
    return {
        "id": item.request_id,
        "userId": item.user_id,
        "type": item.request_type.value,
        "date": item.start_date.isoformat(),
        "endDate": item.end_date.isoformat() if item.end_date else None,
        "hours": item.hours,
        "reason": item.reason,
        "attachmentUrl": item.attachment_url,
        "status": item.status.value,
        "createdAt": format_timestamp(item.created_at),
        "reviewedBy": item.reviewed_by,
        "reviewedAt": format_timestamp(item.reviewed_at),
    }


def correction_from_dict(data: dict) -> CorrectionRequest:
    return CorrectionRequest(
        request_id=str(data["id"]),
        user_id=str(data["userId"]),
        work_date=parse_iso_date(data["date"]),
        attendance_id=str(data.get("attendanceId") or ""),
        proposed_changes=str(data.get("proposedChanges") or ""),
        reason=str(data.get("reason") or ""),
        status=_status(data.get("status")),
        created_at=parse_timestamp(data["createdAt"]),
        reviewed_by=data.get("reviewedBy"),
        reviewed_at=parse_timestamp(data.get("reviewedAt")),
    )


def correction_to_dict(item: CorrectionRequest) -> dict:
    return {
        "id": item.request_id,
        "userId": item.user_id,
        "date": item.work_date.isoformat(),
        "attendanceId": item.attendance_id,
        "proposedChanges": item.proposed_changes,
        "reason": item.reason,
        "status": item.status.value,
        "createdAt": format_timestamp(item.created_at),
        "reviewedBy": item.reviewed_by,
        "reviewedAt": format_timestamp(item.reviewed_at),
    }


_MAPPERS: dict[RequestKind, tuple[Collection, Callable[[dict], RequestItem], Callable[..., dict]]] = {
    RequestKind.EXTRA: (Collection.ATTENDANCE_EXTRAS, extra_from_dict, extra_to_dict),
    RequestKind.REQUEST: (Collection.ATTENDANCE_REQUESTS, request_from_dict, request_to_dict),
    RequestKind.CORRECTION: (Collection.ATTENDANCE_CORRECTIONS, correction_from_dict, correction_to_dict),
}


class StoreRequestRepository(RequestRepository):
    """Extras, requests and corrections, one collection each, newest first."""

    def __init__(self, store: RecordStore):
        self._store = store

    def _load(self, kind: RequestKind) -> list[dict]:
        collection, _, _ = _MAPPERS[kind]
        return self._store.get(collection.value, [])

    def _save(self, kind: RequestKind, items: list[dict]) -> None:
        collection, _, _ = _MAPPERS[kind]
        self._store.set(collection.value, items)

    def list_items(
        self,
        kind: RequestKind,
        *,
        user_id: Optional[str] = None,
        status: Optional[RequestStatus] = None,
    ) -> Sequence[RequestItem]:
        collection, from_dict, _ = _MAPPERS[kind]
        out = []
        for item in parse_entries(collection.value, self._load(kind), from_dict):
            if not item.item_id or item.created_at is None:
                continue
            if user_id is not None and item.user_id != user_id:
                continue
            if status is not None and item.status != status:
                continue
            out.append(item)
        return out

    def get(self, kind: RequestKind, item_id: str) -> Optional[RequestItem]:
        for item in self.list_items(kind):
            if item.item_id == item_id:
                return item
        return None

    def prepend(self, kind: RequestKind, item: RequestItem) -> RequestItem:
        _, _, to_dict = _MAPPERS[kind]
        items = self._load(kind)
        items.insert(0, to_dict(item))
        self._save(kind, items)
        return item

    def replace(self, kind: RequestKind, item: RequestItem) -> bool:
        _, _, to_dict = _MAPPERS[kind]
        items = self._load(kind)
        for idx, data in enumerate(items):
            if entry_id(data) == item.item_id:
                items[idx] = to_dict(item)
                self._save(kind, items)
                return True
        return False
