from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from typing import Optional

from ..common.datetime_utils import minutes_to_hhmm, now_local, week_start_monday
from ..common.validators import optional_text
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceState, RecordStatus
from .calculator.base import WorkedMinutesCalculator
from .calculator.standard_calculator import StandardWorkedMinutesCalculator
from .model import AttendanceRecord, Break, attendance_state, make_record_id
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of a state-machine call. Rejections carry a message and never raise."""

    applied: bool
    record: Optional[AttendanceRecord]
    message: str
    state: AttendanceState


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        calculator: Optional[WorkedMinutesCalculator] = None,
    ):
        self._attendance = attendance
        self._calculator = calculator or StandardWorkedMinutesCalculator()

    @staticmethod
    def _rejected(record: Optional[AttendanceRecord], message: str) -> TransitionResult:
        return TransitionResult(applied=False, record=record, message=message, state=attendance_state(record))

    def _applied(self, record: AttendanceRecord, message: str) -> TransitionResult:
        saved = self._attendance.upsert(record)
        return TransitionResult(applied=True, record=saved, message=message, state=attendance_state(saved))

    def get_today_record(self, user_id: str, today: date) -> Optional[AttendanceRecord]:
        return self._attendance.get_for_user_and_date(user_id, today)

    def get_state(self, user_id: str, *, now: datetime | None = None) -> AttendanceState:
        now = now or now_local()
        return attendance_state(self.get_today_record(user_id, now.date()))

    def check_in(self, user_id: str, *, now: datetime | None = None) -> TransitionResult:
        now = now or now_local()
        today = now.date()

        existing = self._attendance.get_for_user_and_date(user_id, today)
        if existing:
            return self._rejected(existing, "Ya existe un registro abierto hoy.")

        record = AttendanceRecord(
            record_id=make_record_id(user_id, today),
            user_id=user_id,
            work_date=today,
            check_in_at=now,
        )
        logger.info("Check-in user=%s date=%s", user_id, today.isoformat())
        return self._applied(record, "Entrada registrada.")

    def start_break(self, user_id: str, *, now: datetime | None = None) -> TransitionResult:
        now = now or now_local()
        record = self._attendance.get_for_user_and_date(user_id, now.date())
        if attendance_state(record) != AttendanceState.IN_SHIFT:
            return self._rejected(record, "No puedes iniciar descanso ahora.")

        record = replace(record, breaks=record.breaks + (Break(start_at=now),))
        return self._applied(record, "Descanso iniciado.")

    def end_break(self, user_id: str, *, now: datetime | None = None) -> TransitionResult:
        now = now or now_local()
        record = self._attendance.get_for_user_and_date(user_id, now.date())
        if attendance_state(record) != AttendanceState.ON_BREAK:
            return self._rejected(record, "No hay descanso activo.")

        breaks = list(record.breaks)
        # Close the most recent open break.
        for idx in range(len(breaks) - 1, -1, -1):
            if breaks[idx].is_open:
                breaks[idx] = replace(breaks[idx], end_at=now)
                break
        return self._applied(replace(record, breaks=tuple(breaks)), "Descanso finalizado.")

    def check_out(self, user_id: str, *, now: datetime | None = None) -> TransitionResult:
        now = now or now_local()
        record = self._attendance.get_for_user_and_date(user_id, now.date())
        state = attendance_state(record)
        if state == AttendanceState.OFF:
            return self._rejected(record, "Primero marca tu entrada.")
        if state == AttendanceState.CLOSED:
            return self._rejected(record, "La jornada de hoy ya está cerrada.")
        if state == AttendanceState.ON_BREAK:
            return self._rejected(record, "Debes finalizar descanso antes de salir.")

        total = self._calculator.worked_minutes(record, now)
        logger.info("Check-out user=%s date=%s total=%s", user_id, record.work_date.isoformat(), total)
        return self._applied(replace(record, check_out_at=now, total_minutes=total), "Salida registrada.")

    def save_note(self, user_id: str, work_date: date, note: Optional[str]) -> TransitionResult:
        record = self._attendance.get_for_user_and_date(user_id, work_date)
        if record is None:
            return self._rejected(None, "Primero marca tu entrada.")
        return self._applied(replace(record, notes=optional_text(note)), "Nota guardada.")

    def list_records_for_week(self, user_id: str, week_start: date) -> list[AttendanceRecord]:
        start = week_start_monday(week_start)
        return list(self._attendance.list_for_user_between(user_id, start, start + timedelta(days=7)))

    def list_all_records(self, user_id: str) -> list[AttendanceRecord]:
        return list(self._attendance.list_for_user(user_id))

    def get_history_ui(self, user_id: str, *, limit: int = DEFAULT_HISTORY_LIMIT) -> list[dict]:
        rows = sorted(self._attendance.list_for_user(user_id), key=lambda r: r.work_date, reverse=True)
        return [self._to_ui(r) for r in rows[:limit]]

    def _to_ui(self, r: AttendanceRecord) -> dict:
        label = {
            RecordStatus.CLOSED: "Completado",
            RecordStatus.OPEN: "Pendiente",
        }[r.status]

        return {
            "id": r.record_id,
            "date": r.work_date.isoformat(),
            "check_in": r.check_in_at.strftime("%H:%M") if r.check_in_at else "--:--",
            "check_out": r.check_out_at.strftime("%H:%M") if r.check_out_at else "--:--",
            "break_minutes": self._calculator.break_minutes(r),
            "worked_hours": minutes_to_hhmm(r.total_minutes),
            "status": r.status.value,
            "status_label": label,
            "state": attendance_state(r).value,
            "notes": r.notes or "",
        }
