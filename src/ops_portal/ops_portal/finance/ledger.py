from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import month_key as month_key_of
from ..common.datetime_utils import now_local
from ..common.validators import optional_text, require_non_negative
from ..core.constants import DEFAULT_CURRENCY, DEFAULT_MONTHLY_SERIES_LENGTH
from ..core.enums import AccountId, CategoryScope, TransactionStatus, TransactionType
from ..core.exceptions import ValidationError
from . import analytics
from .model import (
    FinanceAccount,
    FinanceCategory,
    FinanceMonthClosure,
    FinanceTransaction,
    TransactionDraft,
    TransactionProposal,
)
from .refs import epoch_ms, generate_reference_id
from .repository import FinanceRepository

logger = logging.getLogger(__name__)

DEFAULT_ACCOUNTS: tuple[FinanceAccount, ...] = (
    FinanceAccount(AccountId.LUIS, "Cuenta Luis", DEFAULT_CURRENCY, 696.0, True),
    FinanceAccount(AccountId.ALONDRA, "Cuenta Alondra", DEFAULT_CURRENCY, 0.0, True),
    FinanceAccount(AccountId.KIMCE, "Caja Kimce", DEFAULT_CURRENCY, 0.0, True),
)

DEFAULT_CATEGORIES: tuple[FinanceCategory, ...] = (
    FinanceCategory("general", "General", CategoryScope.ALL),
    FinanceCategory("ventas", "Ventas", CategoryScope.INCOME),
    FinanceCategory("membresias", "Membresías", CategoryScope.INCOME),
    FinanceCategory("marketing", "Marketing", CategoryScope.INCOME),
    FinanceCategory("operativos", "Operativos", CategoryScope.EXPENSE),
    FinanceCategory("personal", "Personal", CategoryScope.EXPENSE),
    FinanceCategory("sunat", "SUNAT", CategoryScope.EXPENSE),
)


def _parse_account(value: Optional[str], field_name: str) -> Optional[AccountId]:
    if not value:
        return None
    try:
        return AccountId(value)
    except ValueError:
        raise ValidationError(f"{field_name} no es una cuenta válida")


class FinanceLedger:
    """Transaction ledger and month closing on top of a FinanceRepository."""

    def __init__(self, finance: FinanceRepository):
        self._finance = finance

    def list_transactions(self, *, month_key: Optional[str] = None) -> list[FinanceTransaction]:
        rows = list(self._finance.list_transactions())
        if month_key:
            rows = [tx for tx in rows if tx.month_key == month_key]
        return rows

    def list_accounts(self) -> list[FinanceAccount]:
        return list(self._finance.list_accounts())

    def list_categories(self) -> list[FinanceCategory]:
        return list(self._finance.list_categories())

    def create_transaction(self, draft: TransactionDraft, *, now: datetime | None = None) -> TransactionProposal:
        """Build a transaction from ``draft`` and report soft duplicates. Nothing is persisted."""
        now = now or now_local()
        try:
            tx_type = TransactionType(draft.tx_type)
        except ValueError:
            raise ValidationError("Tipo de movimiento no válido")
        try:
            status = TransactionStatus(draft.status)
        except ValueError:
            raise ValidationError("Estado no válido")

        amount = require_non_negative(draft.amount, "Monto")
        bonus = require_non_negative(draft.bonus, "Bono")
        discount = require_non_negative(draft.discount, "Descuento")
        refund = require_non_negative(draft.refund, "Devolución")
        final_amount = draft.final_amount
        if final_amount is None:
            final_amount = amount + bonus - discount - refund

        existing = self._finance.list_transactions()
        ids = {tx.transaction_id for tx in existing}
        stamp = epoch_ms(now)
        while f"tx_{stamp}" in ids:
            stamp += 1

        reference = optional_text(draft.reference_id)
        transaction = FinanceTransaction(
            transaction_id=f"tx_{stamp}",
            date=draft.date,
            tx_type=tx_type,
            category=optional_text(draft.category) or "general",
            amount=amount,
            final_amount=round(float(final_amount), 2),
            responsible=(draft.responsible or "").strip(),
            status=status,
            reference_id=reference or generate_reference_id(now),
            month_key=draft.month_key or month_key_of(draft.date),
            created_at=now,
            client=optional_text(draft.client),
            project=optional_text(draft.project),
            bonus=bonus,
            discount=discount,
            refund=refund,
            account_from=_parse_account(draft.account_from, "Cuenta origen"),
            account_to=_parse_account(draft.account_to, "Cuenta destino"),
            paid_at=draft.paid_at or (now if status == TransactionStatus.PAID else None),
            notes=optional_text(draft.notes),
            receipt_url=optional_text(draft.receipt_url),
        )
        duplicates = analytics.find_duplicates(transaction, existing, reference_id=reference)
        return TransactionProposal(transaction=transaction, duplicates=duplicates)

    def add_transaction(self, transaction: FinanceTransaction) -> list[FinanceTransaction]:
        self._finance.prepend_transaction(transaction)
        logger.info(
            "Added %s %s %.2f (%s)",
            transaction.tx_type.value,
            transaction.reference_id,
            transaction.final_amount,
            transaction.month_key,
        )
        return list(self._finance.list_transactions())

    def set_transaction_status(
        self, transaction_id: str, status: str, *, now: datetime | None = None
    ) -> Optional[FinanceTransaction]:
        """Move a transaction between pending and paid. Returns None when it does not exist.

        Becoming paid stamps ``paid_at`` unless it already has one; going back
        to pending clears it.
        """
        try:
            new_status = TransactionStatus(status)
        except ValueError:
            raise ValidationError("Estado no válido")
        current = next((tx for tx in self._finance.list_transactions() if tx.transaction_id == transaction_id), None)
        if current is None:
            return None
        if new_status == TransactionStatus.PAID:
            paid_at = current.paid_at or now or now_local()
        else:
            paid_at = None
        updated = replace(current, status=new_status, paid_at=paid_at)
        self._finance.update_transaction_status(transaction_id, new_status, paid_at)
        logger.info("Transaction %s marked %s", transaction_id, new_status.value)
        return updated

    def delete_transaction(self, transaction_id: str) -> bool:
        deleted = self._finance.delete_transaction(transaction_id)
        if deleted:
            logger.info("Deleted transaction %s", transaction_id)
        return deleted

    def save_transactions(self, transactions: Sequence[FinanceTransaction]) -> None:
        self._finance.save_transactions(list(transactions))

    def find_duplicates(
        self, candidate: FinanceTransaction, *, reference_id: Optional[str] = None
    ) -> list[FinanceTransaction]:
        return analytics.find_duplicates(candidate, self._finance.list_transactions(), reference_id=reference_id)

    def is_month_closed(self, month_key: str) -> bool:
        return any(c.month_key == month_key for c in self._finance.list_closures())

    def list_closures(self) -> list[FinanceMonthClosure]:
        return list(self._finance.list_closures())

    def close_month(
        self,
        month_key: str,
        *,
        closed_by: str,
        notes: Optional[str] = None,
        now: datetime | None = None,
    ) -> FinanceMonthClosure:
        """Snapshot the month's KPIs; an earlier closure of the same month is replaced."""
        transactions = self._finance.list_transactions()
        kpis = analytics.monthly_kpis(transactions, month_key)
        closure = FinanceMonthClosure(
            month_key=month_key,
            closed_at=now or now_local(),
            closed_by=closed_by,
            income_paid=kpis.income_paid,
            expenses_paid=kpis.expenses_paid,
            net_income=kpis.net_income,
            cash_at_close=analytics.current_cash(self._finance.list_accounts(), transactions),
            notes=optional_text(notes),
        )
        others = [c for c in self._finance.list_closures() if c.month_key != month_key]
        self._finance.save_closures([closure] + others)
        logger.info("Closed finance month %s by %s", month_key, closed_by)
        return closure

    def dashboard(
        self,
        month_key: str,
        *,
        today: Optional[date] = None,
        series_length: int = DEFAULT_MONTHLY_SERIES_LENGTH,
    ) -> dict:
        today = today or now_local().date()
        transactions = self._finance.list_transactions()
        accounts = self._finance.list_accounts()
        kpis = analytics.monthly_kpis(transactions, month_key)
        cash = analytics.current_cash(accounts, transactions)
        return {
            "month_key": month_key,
            "kpis": kpis,
            "current_cash": cash,
            "balances": analytics.account_balances(accounts, transactions),
            "month_balances": analytics.account_balances(accounts, transactions, month_key),
            "runway_weeks": analytics.runway_weeks(cash, kpis.expenses_paid, month_key, today),
            "weekly": analytics.weekly_breakdown(transactions, month_key),
            "categories": analytics.category_breakdown(transactions, month_key),
            "series": analytics.monthly_series(transactions, month_key, series_length),
            "alerts": analytics.finance_alerts(kpis),
            "closed": self.is_month_closed(month_key),
        }

    def seed_defaults(self) -> None:
        """Write the default accounts and categories when none exist."""
        if not self._finance.list_accounts():
            self._finance.save_accounts(list(DEFAULT_ACCOUNTS))
        if not self._finance.list_categories():
            self._finance.save_categories(list(DEFAULT_CATEGORIES))
