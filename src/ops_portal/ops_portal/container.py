from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .attendance.repository import StoreAttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_FINANCE_UNLOCK_MINUTES
from .database.connection import DBConfig, DatabaseConnection
from .database.mysql_record_store import MySQLRecordStore
from .finance.gate import FinanceAccessGate
from .finance.ledger import FinanceLedger
from .finance.repository import StoreFinanceRepository
from .reports.service import HoursReportService
from .requests.repository import StoreRequestRepository
from .requests.service import RequestService
from .schedules.repository import StoreWorkScheduleRepository
from .schedules.resolver import ScheduleResolver
from .schedules.service import ScheduleService
from .storage.store import InMemoryRecordStore, JsonFileRecordStore, RecordStore
from .users.repository import StoreUserRepository
from .users.service import AuthService, UserService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Container:
    store: RecordStore

    users_repo: StoreUserRepository
    attendance_repo: StoreAttendanceRepository
    schedules_repo: StoreWorkScheduleRepository
    requests_repo: StoreRequestRepository
    finance_repo: StoreFinanceRepository

    schedule_resolver: ScheduleResolver
    auth_service: AuthService
    user_service: UserService
    attendance_service: AttendanceService
    hours_report_service: HoursReportService
    schedule_service: ScheduleService
    request_service: RequestService
    finance_ledger: FinanceLedger
    finance_gate: FinanceAccessGate


def build_store(*, backend: str, storage_dir: str | Path = "instance/data", db_config: dict | None = None) -> RecordStore:
    backend = (backend or "file").lower()
    if backend == "memory":
        return InMemoryRecordStore()
    if backend == "file":
        return JsonFileRecordStore(Path(storage_dir))
    if backend == "mysql":
        if not db_config:
            raise ValueError("DB_CONFIG is required for the mysql storage backend")
        config = DBConfig.from_dict(db_config)
        logger.info("Using MySQL record store at %s", config.describe())
        conn = DatabaseConnection.get_instance(config)
        store = MySQLRecordStore(conn)
        store.ensure_schema()
        return store
    raise ValueError(f"Unknown storage backend: {backend!r}")


def build_container(*, store: RecordStore, finance_unlock_minutes: int = DEFAULT_FINANCE_UNLOCK_MINUTES) -> Container:
    users_repo = StoreUserRepository(store)
    attendance_repo = StoreAttendanceRepository(store)
    schedules_repo = StoreWorkScheduleRepository(store)
    requests_repo = StoreRequestRepository(store)
    finance_repo = StoreFinanceRepository(store)

    schedule_resolver = ScheduleResolver(schedules_repo, users_repo)
    auth_service = AuthService(users_repo)
    user_service = UserService(users_repo)
    attendance_service = AttendanceService(attendance_repo)
    hours_report_service = HoursReportService(attendance_repo, users_repo, schedule_resolver)
    schedule_service = ScheduleService(schedules_repo, users_repo, schedule_resolver)
    request_service = RequestService(requests_repo)
    finance_ledger = FinanceLedger(finance_repo)
    finance_gate = FinanceAccessGate(finance_repo, ttl_minutes=finance_unlock_minutes)

    return Container(
        store=store,
        users_repo=users_repo,
        attendance_repo=attendance_repo,
        schedules_repo=schedules_repo,
        requests_repo=requests_repo,
        finance_repo=finance_repo,
        schedule_resolver=schedule_resolver,
        auth_service=auth_service,
        user_service=user_service,
        attendance_service=attendance_service,
        hours_report_service=hours_report_service,
        schedule_service=schedule_service,
        request_service=request_service,
        finance_ledger=finance_ledger,
        finance_gate=finance_gate,
    )


def build_container_from_settings(settings: Any) -> Container:
    store = build_store(
        backend=getattr(settings, "STORAGE_BACKEND", "file"),
        storage_dir=getattr(settings, "STORAGE_DIR", "instance/data"),
        db_config=getattr(settings, "DB_CONFIG", None),
    )
    logger.debug("Record store backend: %s", type(store).__name__)
    return build_container(
        store=store,
        finance_unlock_minutes=int(getattr(settings, "FINANCE_UNLOCK_MINUTES", DEFAULT_FINANCE_UNLOCK_MINUTES)),
    )
