from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import now_local
from ..common.validators import optional_text, require_non_empty, require_positive
from ..core.constants import DEFAULT_RECENT_LIMIT
from ..core.enums import ExtraActivityType, RequestKind, RequestStatus, RequestType, Role
from ..core.exceptions import AuthorizationError, ValidationError
from .model import CorrectionRequest, ExtraActivity, Request, RequestItem, UnifiedItem
from .repository import RequestRepository

logger = logging.getLogger(__name__)


class RequestService:
    """Extras, leave/permit requests and attendance corrections.

    Collaborators create items in PENDING; admins approve or reject them once.
    """

    def __init__(self, requests: RequestRepository):
        self._requests = requests

    def _new_id(self, kind: RequestKind, user_id: str, now: datetime) -> str:
        stamp = int(now.timestamp() * 1000)
        item_id = f"{user_id}_{stamp}"
        while self._requests.get(kind, item_id):
            stamp += 1
            item_id = f"{user_id}_{stamp}"
        return item_id

    def create_extra_activity(
        self,
        *,
        user_id: str,
        work_date: date,
        minutes: int,
        activity_type: str,
        project: Optional[str] = None,
        note: Optional[str] = None,
        now: datetime | None = None,
    ) -> ExtraActivity:
        now = now or now_local()
        user_id = require_non_empty(user_id, "Usuario")
        minutes_value = require_positive(minutes, "Minutos")
        try:
            kind = ExtraActivityType(activity_type)
        except ValueError:
            raise ValidationError("Tipo de actividad no válido")

        item = ExtraActivity(
            activity_id=self._new_id(RequestKind.EXTRA, user_id, now),
            user_id=user_id,
            work_date=work_date,
            minutes=int(round(minutes_value)),
            activity_type=kind,
            status=RequestStatus.PENDING,
            created_at=now,
            project=optional_text(project),
            note=optional_text(note),
        )
        return self._requests.prepend(RequestKind.EXTRA, item)

    def create_request(
        self,
        *,
        user_id: str,
        request_type: str,
        start_date: date,
        reason: str,
        end_date: Optional[date] = None,
        hours: Optional[float] = None,
        attachment_url: Optional[str] = None,
        now: datetime | None = None,
    ) -> Request:
        now = now or now_local()
        user_id = require_non_empty(user_id, "Usuario")
        try:
            rtype = RequestType(request_type)
        except ValueError:
            raise ValidationError("Tipo de solicitud no válido")

        if end_date is not None and end_date < start_date:
            raise ValidationError("La fecha fin debe ser posterior a la fecha inicio")

        if rtype == RequestType.PERMISO_HORAS:
            hours = require_positive(hours, "Horas")
        else:
            hours = None

        item = Request(
            request_id=self._new_id(RequestKind.REQUEST, user_id, now),
            user_id=user_id,
            request_type=rtype,
            start_date=start_date,
            reason=require_non_empty(reason, "Motivo"),
            status=RequestStatus.PENDING,
            created_at=now,
            end_date=end_date,
            hours=hours,
            attachment_url=optional_text(attachment_url),
        )
        return self._requests.prepend(RequestKind.REQUEST, item)

    def create_correction(
        self,
        *,
        user_id: str,
        work_date: date,
        attendance_id: str,
        proposed_changes: str,
        reason: str,
        now: datetime | None = None,
    ) -> CorrectionRequest:
        now = now or now_local()
        user_id = require_non_empty(user_id, "Usuario")
        item = CorrectionRequest(
            request_id=self._new_id(RequestKind.CORRECTION, user_id, now),
            user_id=user_id,
            work_date=work_date,
            attendance_id=require_non_empty(attendance_id, "Registro"),
            proposed_changes=require_non_empty(proposed_changes, "Cambios propuestos"),
            reason=require_non_empty(reason, "Motivo"),
            status=RequestStatus.PENDING,
            created_at=now,
        )
        return self._requests.prepend(RequestKind.CORRECTION, item)

    def _decide(
        self,
        kind: RequestKind,
        *,
        current_role: Role,
        reviewer_id: str,
        item_id: str,
        status: RequestStatus,
        now: datetime | None = None,
    ) -> RequestItem:
        if current_role != Role.ADMIN:
            raise AuthorizationError("No tienes permisos.")

        item = self._requests.get(kind, item_id)
        if not item:
            raise ValidationError("Solicitud no encontrada.")
        if item.status != RequestStatus.PENDING:
            raise ValidationError("La solicitud ya fue revisada.")

        decided = replace(item, status=status, reviewed_by=reviewer_id, reviewed_at=now or now_local())
        if not self._requests.replace(kind, decided):
            raise ValidationError("No se pudo actualizar la solicitud.")
        logger.info("%s %s -> %s by %s", kind.value, item_id, status.value, reviewer_id)
        return decided

    def approve_request(self, *, current_role: Role, reviewer_id: str, request_id: str, now: datetime | None = None):
        return self._decide(
            RequestKind.REQUEST,
            current_role=current_role,
            reviewer_id=reviewer_id,
            item_id=request_id,
            status=RequestStatus.APPROVED,
            now=now,
        )

    def reject_request(self, *, current_role: Role, reviewer_id: str, request_id: str, now: datetime | None = None):
        return self._decide(
            RequestKind.REQUEST,
            current_role=current_role,
            reviewer_id=reviewer_id,
            item_id=request_id,
            status=RequestStatus.REJECTED,
            now=now,
        )

    def approve_extra(self, *, current_role: Role, reviewer_id: str, activity_id: str, now: datetime | None = None):
        return self._decide(
            RequestKind.EXTRA,
            current_role=current_role,
            reviewer_id=reviewer_id,
            item_id=activity_id,
            status=RequestStatus.APPROVED,
            now=now,
        )

    def reject_extra(self, *, current_role: Role, reviewer_id: str, activity_id: str, now: datetime | None = None):
        return self._decide(
            RequestKind.EXTRA,
            current_role=current_role,
            reviewer_id=reviewer_id,
            item_id=activity_id,
            status=RequestStatus.REJECTED,
            now=now,
        )

    def approve_correction(
        self, *, current_role: Role, reviewer_id: str, request_id: str, now: datetime | None = None
    ):
        # Approval is advisory: the attendance record is not touched.
        return self._decide(
            RequestKind.CORRECTION,
            current_role=current_role,
            reviewer_id=reviewer_id,
            item_id=request_id,
            status=RequestStatus.APPROVED,
            now=now,
        )

    def reject_correction(
        self, *, current_role: Role, reviewer_id: str, request_id: str, now: datetime | None = None
    ):
        return self._decide(
            RequestKind.CORRECTION,
            current_role=current_role,
            reviewer_id=reviewer_id,
            item_id=request_id,
            status=RequestStatus.REJECTED,
            now=now,
        )

    def decide(
        self,
        *,
        current_role: Role,
        reviewer_id: str,
        kind: RequestKind,
        item_id: str,
        approve: bool,
        now: datetime | None = None,
    ) -> RequestItem:
        return self._decide(
            kind,
            current_role=current_role,
            reviewer_id=reviewer_id,
            item_id=item_id,
            status=RequestStatus.APPROVED if approve else RequestStatus.REJECTED,
            now=now,
        )

    def list_recent_extras(self, user_id: str, limit: int = DEFAULT_RECENT_LIMIT) -> list[ExtraActivity]:
        return list(self._requests.list_items(RequestKind.EXTRA, user_id=user_id))[:limit]

    def list_recent_requests(self, user_id: str, limit: int = DEFAULT_RECENT_LIMIT) -> list[Request]:
        return list(self._requests.list_items(RequestKind.REQUEST, user_id=user_id))[:limit]

    def list_recent_corrections(self, user_id: str, limit: int = DEFAULT_RECENT_LIMIT) -> list[CorrectionRequest]:
        return list(self._requests.list_items(RequestKind.CORRECTION, user_id=user_id))[:limit]

    def list_unified_recent(self, user_id: str, limit: int = DEFAULT_RECENT_LIMIT) -> list[UnifiedItem]:
        merged = (
            [UnifiedItem(RequestKind.EXTRA, x) for x in self.list_recent_extras(user_id, limit)]
            + [UnifiedItem(RequestKind.REQUEST, x) for x in self.list_recent_requests(user_id, limit)]
            + [UnifiedItem(RequestKind.CORRECTION, x) for x in self.list_recent_corrections(user_id, limit)]
        )
        merged.sort(key=lambda x: x.created_at, reverse=True)
        return merged[:limit]

    def list_pending(self, *, current_role: Role) -> list[UnifiedItem]:
        if current_role != Role.ADMIN:
            raise AuthorizationError("No tienes permisos.")

        merged = [
            UnifiedItem(kind, item)
            for kind in RequestKind
            for item in self._requests.list_items(kind, status=RequestStatus.PENDING)
        ]
        merged.sort(key=lambda x: x.created_at, reverse=True)
        return merged
