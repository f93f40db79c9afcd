from __future__ import annotations

from flask import Flask, g, request

from ..common.datetime_utils import minutes_to_hhmm, now_local
from ..common.web import date_arg, json_body, login_required, to_jsonable
from ..container import Container
from ..core.constants import DEFAULT_HISTORY_LIMIT
from .model import AttendanceRecord, attendance_state
from .service import TransitionResult


def record_json(record: AttendanceRecord | None) -> dict | None:
    if record is None:
        return None
    data = to_jsonable(record)
    data["status"] = record.status.value
    data["state"] = attendance_state(record).value
    return data


def transition_response(result: TransitionResult):
    body = {
        "applied": result.applied,
        "message": result.message,
        "state": result.state.value,
        "record": record_json(result.record),
    }
    return body, (200 if result.applied else 409)


def register(app: Flask, container: Container) -> None:
    login = login_required(container)

    @app.route("/api/attendance/today", endpoint="attendance_today")
    @login
    def attendance_today():
        today = now_local().date()
        record = container.attendance_service.get_today_record(g.current_user.uid, today)
        return {"date": today.isoformat(), "state": attendance_state(record).value, "record": record_json(record)}

    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="attendance_check_in")
    @login
    def attendance_check_in():
        return transition_response(container.attendance_service.check_in(g.current_user.uid))

    @app.route("/api/attendance/break/start", methods=["POST"], endpoint="attendance_break_start")
    @login
    def attendance_break_start():
        return transition_response(container.attendance_service.start_break(g.current_user.uid))

    @app.route("/api/attendance/break/end", methods=["POST"], endpoint="attendance_break_end")
    @login
    def attendance_break_end():
        return transition_response(container.attendance_service.end_break(g.current_user.uid))

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="attendance_check_out")
    @login
    def attendance_check_out():
        return transition_response(container.attendance_service.check_out(g.current_user.uid))

    @app.route("/api/attendance/note", methods=["PUT"], endpoint="attendance_note")
    @login
    def attendance_note():
        body = json_body()
        work_date = date_arg(body.get("date"), now_local().date())
        result = container.attendance_service.save_note(g.current_user.uid, work_date, body.get("note"))
        return transition_response(result)

    @app.route("/api/attendance/week", endpoint="attendance_week")
    @login
    def attendance_week():
        day = date_arg(request.args.get("date"), now_local().date())
        uid = g.current_user.uid
        summary = container.hours_report_service.weekly_summary(uid, day)
        records = container.attendance_service.list_records_for_week(uid, summary.week_start)
        return {
            "summary": to_jsonable(summary),
            "worked_hours": minutes_to_hhmm(summary.worked_minutes),
            "expected_hours": minutes_to_hhmm(summary.expected_minutes),
            "balance": minutes_to_hhmm(summary.balance_minutes, signed=True),
            "lifetime_balance_minutes": container.hours_report_service.lifetime_balance(uid),
            "records": [record_json(r) for r in records],
        }

    @app.route("/api/attendance/history", endpoint="attendance_history")
    @login
    def attendance_history():
        limit = request.args.get("limit", type=int) or DEFAULT_HISTORY_LIMIT
        return {"items": container.attendance_service.get_history_ui(g.current_user.uid, limit=limit)}
