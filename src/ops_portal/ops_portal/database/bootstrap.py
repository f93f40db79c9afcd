from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import Optional

from ..attendance.model import AttendanceRecord, Break, make_record_id
from ..attendance.repository import StoreAttendanceRepository
from ..common.datetime_utils import now_local, week_start_monday
from ..core.enums import AccountId, RequestKind, RequestStatus, RequestType, Role, TransactionStatus, TransactionType
from ..finance.gate import FinanceAccessGate
from ..finance.ledger import FinanceLedger
from ..finance.model import FinanceTransaction
from ..finance.repository import StoreFinanceRepository
from ..requests.model import Request
from ..requests.repository import StoreRequestRepository
from ..storage.store import RecordStore
from ..users.model import UserProfile
from ..users.repository import StoreUserRepository

logger = logging.getLogger(__name__)

DEFAULT_FINANCE_KEY = "9021"

DEMO_USERS: tuple[UserProfile, ...] = (
    UserProfile(
        uid="collab-1",
        email="alondra@demo.com",
        display_name="Alondra Ruiz",
        role=Role.COLLAB,
        photo_url="https://images.unsplash.com/photo-1544723795-3fb6469f5b39?auto=format&fit=crop&w=120&q=80",
        position="Diseñadora UX",
        active=True,
    ),
    UserProfile(
        uid="admin-1",
        email="admin@demo.com",
        display_name="Carlos Méndez",
        role=Role.ADMIN,
        photo_url="https://images.unsplash.com/photo-1506794778202-cad84cf45f1d?auto=format&fit=crop&w=120&q=80",
        position="Head of Operations",
        active=True,
    ),
    UserProfile(
        uid="collab-2",
        email="diego@demo.com",
        display_name="Diego Rivera",
        role=Role.COLLAB,
        photo_url="https://images.unsplash.com/photo-1500648767791-00dcc994a43e?auto=format&fit=crop&w=120&q=80",
        position="Project Manager",
        active=True,
    ),
)

DEMO_REQUESTS: tuple[Request, ...] = (
    Request(
        request_id="req-1",
        user_id="collab-1",
        request_type=RequestType.DIA_LIBRE,
        start_date=date(2026, 1, 20),
        reason="Descanso familiar",
        status=RequestStatus.PENDING,
        created_at=datetime(2026, 1, 10, 9, 15),
    ),
    Request(
        request_id="req-2",
        user_id="collab-2",
        request_type=RequestType.PERMISO_HORAS,
        start_date=date(2026, 1, 22),
        hours=2,
        reason="Cita médica",
        status=RequestStatus.APPROVED,
        created_at=datetime(2026, 1, 9, 13, 30),
        reviewed_by="admin-1",
        reviewed_at=datetime(2026, 1, 10, 8, 10),
    ),
)

# (user, weekday offset, worked minutes, note)
_DEMO_WEEK = (
    ("collab-1", 0, 450, "Entrega de prototipos."),
    ("collab-1", 1, 420, None),
    ("collab-1", 2, 480, None),
    ("collab-2", 0, 480, "Planeación semanal."),
    ("collab-2", 1, 480, None),
    ("collab-2", 2, 510, None),
)


def _demo_day(user_id: str, day: date, worked: int, note: Optional[str]) -> AttendanceRecord:
    check_in = datetime.combine(day, time(9, 5))
    brk = Break(start_at=datetime.combine(day, time(13, 30)), end_at=datetime.combine(day, time(14, 0)))
    return AttendanceRecord(
        record_id=make_record_id(user_id, day),
        user_id=user_id,
        work_date=day,
        check_in_at=check_in,
        check_out_at=check_in + timedelta(minutes=worked + 30),
        breaks=(brk,),
        notes=note,
        total_minutes=worked,
    )


def _demo_transactions(created_at: datetime) -> list[FinanceTransaction]:
    def tx(tx_id, day, tx_type, category, amount, ref, *, account_from=None, account_to=None, client=None):
        return FinanceTransaction(
            transaction_id=tx_id,
            date=day,
            tx_type=tx_type,
            category=category,
            amount=amount,
            final_amount=amount,
            responsible="LUIS",
            status=TransactionStatus.PAID,
            reference_id=ref,
            month_key=f"{day.year:04d}-{day.month:02d}",
            created_at=created_at,
            client=client,
            account_from=account_from,
            account_to=account_to,
            paid_at=created_at,
        )

    return [
        tx("tx-1004", date(2026, 1, 15), TransactionType.EXPENSE, "personal", 3400.0, "REF-GAS-001",
           account_from=AccountId.LUIS),
        tx("tx-1003", date(2026, 1, 23), TransactionType.INCOME, "ventas", 1200.0, "REF-ING-003",
           account_to=AccountId.LUIS, client="Gotza"),
        tx("tx-1002", date(2026, 1, 17), TransactionType.INCOME, "marketing", 2750.0, "REF-ING-002",
           account_to=AccountId.LUIS, client="15 - OCT - 15 NOV"),
        tx("tx-1001", date(2026, 1, 17), TransactionType.INCOME, "marketing", 6000.0, "REF-ING-001",
           account_to=AccountId.LUIS, client="Belcorp"),
    ]


def seed_demo_data(
    store: RecordStore,
    *,
    today: Optional[date] = None,
    finance_key: str = DEFAULT_FINANCE_KEY,
) -> list[str]:
    """Write demo data into empty collections only. Returns what was seeded."""
    today = today or now_local().date()
    seeded: list[str] = []

    users = StoreUserRepository(store)
    if not users.list_all():
        for u in DEMO_USERS:
            users.upsert(u)
        seeded.append("users")

    requests = StoreRequestRepository(store)
    if not requests.list_items(RequestKind.REQUEST):
        for r in reversed(DEMO_REQUESTS):
            requests.prepend(RequestKind.REQUEST, r)
        seeded.append("requests")

    attendance = StoreAttendanceRepository(store)
    start = week_start_monday(today)
    if not attendance.list_between(date.min, date.max):
        for user_id, offset, worked, note in _DEMO_WEEK:
            attendance.upsert(_demo_day(user_id, start + timedelta(days=offset), worked, note))
        seeded.append("attendance")

    finance = StoreFinanceRepository(store)
    if FinanceAccessGate(finance).ensure_finance_key(finance_key):
        seeded.append("finance_key")
    ledger = FinanceLedger(finance)
    ledger.seed_defaults()
    if not finance.list_transactions():
        finance.save_transactions(_demo_transactions(datetime(2026, 1, 1, 8, 0)))
        seeded.append("transactions")

    if seeded:
        logger.info("Seeded demo data: %s", ", ".join(seeded))
    return seeded
