from __future__ import annotations

import logging
from dataclasses import replace
from typing import Mapping

from ..common.datetime_utils import WEEKDAY_KEYS
from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError
from ..users.repository import UserRepository
from .model import DEFAULT_WORK_SCHEDULES, WorkSchedule
from .repository import WorkScheduleRepository
from .resolver import ScheduleResolver

logger = logging.getLogger(__name__)


class ScheduleService:
    def __init__(self, schedules: WorkScheduleRepository, users: UserRepository, resolver: ScheduleResolver):
        self._schedules = schedules
        self._users = users
        self._resolver = resolver

    def list_schedules(self) -> list[WorkSchedule]:
        stored = list(self._schedules.list_all())
        return stored or list(DEFAULT_WORK_SCHEDULES)

    def save_schedule(
        self,
        *,
        current_role: Role,
        schedule_id: str,
        name: str,
        days: Mapping[str, int],
    ) -> WorkSchedule:
        if current_role != Role.ADMIN:
            raise AuthorizationError("No tienes permisos.")

        schedule_id = require_non_empty(schedule_id, "Id de jornada")
        name = require_non_empty(name, "Nombre")

        normalized: dict[str, int] = {}
        for key in WEEKDAY_KEYS:
            try:
                minutes = int(days.get(key, 0) or 0)
            except (TypeError, ValueError):
                raise ValidationError(f"Minutos inválidos para {key}")
            if minutes < 0:
                raise ValidationError(f"Minutos inválidos para {key}")
            normalized[key] = minutes

        schedule = WorkSchedule(
            schedule_id=schedule_id,
            name=name,
            weekly_minutes=sum(normalized.values()),
            days=normalized,
        )
        logger.info("Saved work schedule %s (%s min/week)", schedule_id, schedule.weekly_minutes)
        return self._schedules.upsert(schedule)

    def assign_to_user(self, *, current_role: Role, user_id: str, schedule_id: str) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("No tienes permisos.")

        user = self._users.get_by_id(user_id)
        if not user:
            raise ValidationError("Usuario no encontrado.")
        if not self._resolver.get_schedule(schedule_id):
            raise ValidationError("Jornada no encontrada.")

        self._users.upsert(replace(user, work_schedule_id=schedule_id))
