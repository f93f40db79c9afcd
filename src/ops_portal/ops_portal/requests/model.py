from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union

from ..core.enums import ExtraActivityType, RequestKind, RequestStatus, RequestType


@dataclass(frozen=True)
class ExtraActivity:
    activity_id: str
    user_id: str
    work_date: date
    minutes: int
    activity_type: ExtraActivityType
    status: RequestStatus
    created_at: datetime
    project: Optional[str] = None
    note: Optional[str] = None
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None

    @property
    def item_id(self) -> str:
        return self.activity_id


@dataclass(frozen=True)
class Request:
    """Leave or permit request. ``hours`` only applies to PERMISO_HORAS."""

    request_id: str
    user_id: str
    request_type: RequestType
    start_date: date
    reason: str
    status: RequestStatus
    created_at: datetime
    end_date: Optional[date] = None
    hours: Optional[float] = None
    attachment_url: Optional[str] = None
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None

    @property
    def item_id(self) -> str:
        return self.request_id


@dataclass(frozen=True)
class CorrectionRequest:
    """Advisory correction of an attendance record; deciding it changes nothing else."""

    request_id: str
    user_id: str
    work_date: date
    attendance_id: str
    proposed_changes: str
    reason: str
    status: RequestStatus
    created_at: datetime
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None

    @property
    def item_id(self) -> str:
        return self.request_id


RequestItem = Union[ExtraActivity, Request, CorrectionRequest]


@dataclass(frozen=True)
class UnifiedItem:
    kind: RequestKind
    item: RequestItem

    @property
    def created_at(self) -> datetime:
        return self.item.created_at
