from __future__ import annotations

from flask import Flask, g, request

from ..common.datetime_utils import now_local
from ..common.web import admin_required, date_arg, json_body, login_required, to_jsonable
from ..container import Container
from ..core.constants import DEFAULT_RECENT_LIMIT
from ..core.enums import RequestKind
from ..core.exceptions import ValidationError
from .model import UnifiedItem


def unified_json(entry: UnifiedItem) -> dict:
    data = to_jsonable(entry.item)
    data["kind"] = entry.kind.value
    return data


def _kind(value: str) -> RequestKind:
    try:
        return RequestKind(value.upper())
    except ValueError:
        raise ValidationError("Tipo de solicitud no válido")


def register(app: Flask, container: Container) -> None:
    login = login_required(container)
    admin = admin_required(container)

    @app.route("/api/requests", methods=["POST"], endpoint="create_request")
    @login
    def create_request():
        body = json_body()
        item = container.request_service.create_request(
            user_id=g.current_user.uid,
            request_type=body.get("type", ""),
            start_date=date_arg(body.get("date"), now_local().date()),
            end_date=date_arg(body.get("end_date")),
            hours=body.get("hours"),
            reason=body.get("reason", ""),
            attachment_url=body.get("attachment_url"),
        )
        return {"item": to_jsonable(item)}, 201

    @app.route("/api/extras", methods=["POST"], endpoint="create_extra")
    @login
    def create_extra():
        body = json_body()
        item = container.request_service.create_extra_activity(
            user_id=g.current_user.uid,
            work_date=date_arg(body.get("date"), now_local().date()),
            minutes=body.get("minutes"),
            activity_type=body.get("type", ""),
            project=body.get("project"),
            note=body.get("note"),
        )
        return {"item": to_jsonable(item)}, 201

    @app.route("/api/corrections", methods=["POST"], endpoint="create_correction")
    @login
    def create_correction():
        body = json_body()
        item = container.request_service.create_correction(
            user_id=g.current_user.uid,
            work_date=date_arg(body.get("date"), now_local().date()),
            attendance_id=body.get("attendance_id", ""),
            proposed_changes=body.get("proposed_changes", ""),
            reason=body.get("reason", ""),
        )
        return {"item": to_jsonable(item)}, 201

    @app.route("/api/requests/recent", endpoint="recent_requests")
    @login
    def recent_requests():
        limit = request.args.get("limit", type=int) or DEFAULT_RECENT_LIMIT
        items = container.request_service.list_unified_recent(g.current_user.uid, limit)
        return {"items": [unified_json(x) for x in items]}

    @app.route("/api/admin/requests/pending", endpoint="pending_requests")
    @admin
    def pending_requests():
        items = container.request_service.list_pending(current_role=g.current_user.role)
        return {"items": [unified_json(x) for x in items]}

    @app.route("/api/admin/requests/<kind>/<item_id>/<action>", methods=["POST"], endpoint="decide_request")
    @admin
    def decide_request(kind: str, item_id: str, action: str):
        if action not in {"approve", "reject"}:
            raise ValidationError("Acción no válida")
        item = container.request_service.decide(
            current_role=g.current_user.role,
            reviewer_id=g.current_user.uid,
            kind=_kind(kind),
            item_id=item_id,
            approve=action == "approve",
        )
        return {"item": to_jsonable(item)}
