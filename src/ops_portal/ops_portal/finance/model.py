from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.constants import DEFAULT_CURRENCY
from ..core.enums import AccountId, CategoryScope, TransactionStatus, TransactionType


@dataclass(frozen=True)
class FinanceTransaction:
    """Ledger entry. Never edited in place; the ledger only appends or overwrites the list."""

    transaction_id: str
    date: date
    tx_type: TransactionType
    category: str
    amount: float
    final_amount: float
    responsible: str
    status: TransactionStatus
    reference_id: str
    month_key: str
    created_at: datetime
    client: Optional[str] = None
    project: Optional[str] = None
    bonus: float = 0.0
    discount: float = 0.0
    refund: float = 0.0
    account_from: Optional[AccountId] = None
    account_to: Optional[AccountId] = None
    paid_at: Optional[datetime] = None
    notes: Optional[str] = None
    receipt_url: Optional[str] = None

    @property
    def is_paid(self) -> bool:
        return self.status == TransactionStatus.PAID


@dataclass(frozen=True)
class TransactionDraft:
    """User input for a new transaction; missing derived fields are filled by the ledger."""

    date: date
    tx_type: str
    amount: float
    category: str = "general"
    responsible: str = ""
    status: str = TransactionStatus.PENDING.value
    bonus: Optional[float] = None
    discount: Optional[float] = None
    refund: Optional[float] = None
    final_amount: Optional[float] = None
    client: Optional[str] = None
    project: Optional[str] = None
    account_from: Optional[str] = None
    account_to: Optional[str] = None
    paid_at: Optional[datetime] = None
    reference_id: Optional[str] = None
    notes: Optional[str] = None
    receipt_url: Optional[str] = None
    month_key: Optional[str] = None


@dataclass(frozen=True)
class TransactionProposal:
    """A built (not yet persisted) transaction plus its possible duplicates."""

    transaction: FinanceTransaction
    duplicates: list[FinanceTransaction] = field(default_factory=list)


@dataclass(frozen=True)
class FinanceAccount:
    account_id: AccountId
    name: str
    currency: str = DEFAULT_CURRENCY
    initial_balance: float = 0.0
    active: bool = True


@dataclass(frozen=True)
class AccountBalance:
    account_id: AccountId
    name: str
    currency: str
    balance: float


@dataclass(frozen=True)
class FinanceCategory:
    category_id: str
    label: str
    scope: CategoryScope = CategoryScope.ALL


@dataclass(frozen=True)
class FinanceMonthClosure:
    month_key: str
    closed_at: datetime
    closed_by: str
    income_paid: float
    expenses_paid: float
    net_income: float
    cash_at_close: float
    notes: Optional[str] = None


@dataclass(frozen=True)
class FinanceSettings:
    finance_key: Optional[str] = None
    finance_key_hash: Optional[str] = None


@dataclass(frozen=True)
class MonthlyKpis:
    month_key: str
    income_paid: float
    income_pending: float
    expenses_paid: float
    expenses_pending: float
    net_income: float
    margin: float

    @property
    def income_projected(self) -> float:
        return self.income_paid + self.income_pending

    @property
    def expenses_projected(self) -> float:
        return self.expenses_paid + self.expenses_pending

    @property
    def projected_net(self) -> float:
        return self.income_projected - self.expenses_projected

    @property
    def projected_margin(self) -> float:
        if self.income_projected <= 0:
            return 0.0
        return self.projected_net / self.income_projected * 100


@dataclass(frozen=True)
class FinanceAlert:
    tone: str
    message: str
