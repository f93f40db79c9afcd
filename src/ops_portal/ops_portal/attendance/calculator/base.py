from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from ..model import AttendanceRecord


class WorkedMinutesCalculator(ABC):
    """Calculator interface (Strategy Pattern for time accounting)."""

    @abstractmethod
    def break_minutes(self, record: AttendanceRecord) -> int:
        raise NotImplementedError

    @abstractmethod
    def worked_minutes(self, record: AttendanceRecord, check_out_at: datetime) -> int:
        raise NotImplementedError
