from __future__ import annotations

from flask import Flask, g, request

from ..common.datetime_utils import now_local
from ..common.web import admin_required, date_arg, json_body, login_required, to_jsonable
from ..container import Container


def register(app: Flask, container: Container) -> None:
    login = login_required(container)
    admin = admin_required(container)

    @app.route("/api/schedules", endpoint="list_schedules")
    @login
    def list_schedules():
        return {"schedules": to_jsonable(container.schedule_service.list_schedules())}

    @app.route("/api/me/schedule", endpoint="my_schedule")
    @login
    def my_schedule():
        return {"schedule": to_jsonable(container.schedule_resolver.schedule_for_user(g.current_user.uid))}

    @app.route("/api/admin/schedules/<schedule_id>", methods=["PUT"], endpoint="save_schedule")
    @admin
    def save_schedule(schedule_id: str):
        body = json_body()
        schedule = container.schedule_service.save_schedule(
            current_role=g.current_user.role,
            schedule_id=schedule_id,
            name=body.get("name", ""),
            days=body.get("days") or {},
        )
        return {"schedule": to_jsonable(schedule)}

    @app.route("/api/admin/users/<uid>/schedule", methods=["POST"], endpoint="assign_schedule")
    @admin
    def assign_schedule(uid: str):
        container.schedule_service.assign_to_user(
            current_role=g.current_user.role,
            user_id=uid,
            schedule_id=json_body().get("schedule_id", ""),
        )
        return {"ok": True}

    @app.route("/api/admin/hours", endpoint="admin_hours")
    @admin
    def admin_hours():
        day = date_arg(request.args.get("week"), now_local().date())
        data = container.hours_report_service.team_week_report(day, user_id=request.args.get("user") or None)
        return {"week_start": data.week_start.isoformat(), "rows": data.rows}
