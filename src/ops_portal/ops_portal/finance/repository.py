from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..common.datetime_utils import format_timestamp, month_key, parse_iso_date, parse_timestamp
from ..core.constants import DEFAULT_CURRENCY
from ..core.enums import AccountId, CategoryScope, Collection, TransactionStatus, TransactionType
from ..storage.store import RecordStore, entry_id, parse_entries
from .model import FinanceAccount, FinanceCategory, FinanceMonthClosure, FinanceSettings, FinanceTransaction

logger = logging.getLogger(__name__)


class FinanceRepository(Protocol):
    def list_transactions(self) -> Sequence[FinanceTransaction]:
        raise NotImplementedError

    def save_transactions(self, transactions: Sequence[FinanceTransaction]) -> None:
        raise NotImplementedError

    def prepend_transaction(self, transaction: FinanceTransaction) -> None:
        raise NotImplementedError

    def update_transaction_status(
        self, transaction_id: str, status: TransactionStatus, paid_at: Optional[datetime]
    ) -> bool:
        raise NotImplementedError

    def delete_transaction(self, transaction_id: str) -> bool:
        raise NotImplementedError

    def list_accounts(self) -> Sequence[FinanceAccount]:
        raise NotImplementedError

    def save_accounts(self, accounts: Sequence[FinanceAccount]) -> None:
        raise NotImplementedError

    def list_categories(self) -> Sequence[FinanceCategory]:
        raise NotImplementedError

    def save_categories(self, categories: Sequence[FinanceCategory]) -> None:
        raise NotImplementedError

    def list_closures(self) -> Sequence[FinanceMonthClosure]:
        raise NotImplementedError

    def save_closures(self, closures: Sequence[FinanceMonthClosure]) -> None:
        raise NotImplementedError

    def get_settings(self) -> FinanceSettings:
        raise NotImplementedError

    def save_settings(self, settings: FinanceSettings) -> None:
        raise NotImplementedError


def _account(value) -> Optional[AccountId]:
    if not value:
        return None
    try:
        return AccountId(value)
    except ValueError:
        logger.warning("Unknown finance account %r ignored", value)
        return None


def _number(value) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def transaction_from_dict(data: dict) -> FinanceTransaction:
    tx_date = parse_iso_date(str(data["date"]))
    return FinanceTransaction(
        transaction_id=str(data["id"]),
        date=tx_date,
        tx_type=TransactionType(data["type"]),
        category=str(data.get("category") or "general"),
        amount=_number(data.get("amount")),
        final_amount=_number(data.get("finalAmount", data.get("amount"))),
        responsible=str(data.get("responsible") or ""),
        status=TransactionStatus(data.get("status") or TransactionStatus.PENDING.value),
        reference_id=str(data.get("referenceId") or ""),
        month_key=str(data.get("monthKey") or month_key(tx_date)),
        created_at=parse_timestamp(data.get("createdAt")) or parse_timestamp(tx_date.isoformat()),
        client=data.get("client"),
        project=data.get("project"),
        bonus=_number(data.get("bonus")),
        discount=_number(data.get("discount")),
        refund=_number(data.get("refund")),
        account_from=_account(data.get("accountFrom")),
        account_to=_account(data.get("accountTo")),
        paid_at=parse_timestamp(data.get("paidAt")),
        notes=data.get("notes"),
        receipt_url=data.get("receiptUrl"),
    )


def transaction_to_dict(tx: FinanceTransaction) -> dict:
    return {
        "id": tx.transaction_id,
        "date": tx.date.isoformat(),
        "type": tx.tx_type.value,
        "category": tx.category,
        "client": tx.client,
        "project": tx.project,
        "amount": tx.amount,
        "bonus": tx.bonus,
        "discount": tx.discount,
        "refund": tx.refund,
        "finalAmount": tx.final_amount,
        "responsible": tx.responsible,
        "accountFrom": tx.account_from.value if tx.account_from else None,
        "accountTo": tx.account_to.value if tx.account_to else None,
        "status": tx.status.value,
        "paidAt": format_timestamp(tx.paid_at),
        "referenceId": tx.reference_id,
        "notes": tx.notes,
        "receiptUrl": tx.receipt_url,
        "monthKey": tx.month_key,
        "createdAt": format_timestamp(tx.created_at),
    }


def account_from_dict(data: dict) -> FinanceAccount:
    return FinanceAccount(
        account_id=AccountId(data["id"]),
        name=str(data.get("name") or data["id"]),
        currency=str(data.get("currency") or DEFAULT_CURRENCY),
        initial_balance=_number(data.get("initialBalance")),
        active=bool(data.get("active", True)),
    )


def account_to_dict(account: FinanceAccount) -> dict:
    return {
        "id": account.account_id.value,
        "name": account.name,
        "currency": account.currency,
        "initialBalance": account.initial_balance,
        "active": account.active,
    }


def closure_from_dict(data: dict) -> FinanceMonthClosure:
    return FinanceMonthClosure(
        month_key=str(data["monthKey"]),
        closed_at=parse_timestamp(data["closedAt"]),
        closed_by=str(data.get("closedBy") or ""),
        income_paid=_number(data.get("incomePaid")),
        expenses_paid=_number(data.get("expensesPaid")),
        net_income=_number(data.get("netIncome")),
        cash_at_close=_number(data.get("cashAtClose")),
        notes=data.get("notes"),
    )


def closure_to_dict(closure: FinanceMonthClosure) -> dict:
    return {
        "monthKey": closure.month_key,
        "closedAt": format_timestamp(closure.closed_at),
        "closedBy": closure.closed_by,
        "incomePaid": closure.income_paid,
        "expensesPaid": closure.expenses_paid,
        "netIncome": closure.net_income,
        "cashAtClose": closure.cash_at_close,
        "notes": closure.notes,
    }


class StoreFinanceRepository(FinanceRepository):
    def __init__(self, store: RecordStore):
        self._store = store

    def _load_valid(self, collection: Collection, from_dict) -> list:
        return parse_entries(collection.value, self._store.get(collection.value, []), from_dict)

    def list_transactions(self) -> Sequence[FinanceTransaction]:
        return self._load_valid(Collection.FINANCE_TRANSACTIONS, transaction_from_dict)

    def save_transactions(self, transactions: Sequence[FinanceTransaction]) -> None:
        self._store.set(Collection.FINANCE_TRANSACTIONS.value, [transaction_to_dict(t) for t in transactions])

    def _raw_transactions(self) -> list:
        return self._store.get(Collection.FINANCE_TRANSACTIONS.value, [])

    def prepend_transaction(self, transaction: FinanceTransaction) -> None:
        # Works on the raw list so entries this module cannot read are kept.
        items = self._raw_transactions()
        items.insert(0, transaction_to_dict(transaction))
        self._store.set(Collection.FINANCE_TRANSACTIONS.value, items)

    def update_transaction_status(
        self, transaction_id: str, status: TransactionStatus, paid_at: Optional[datetime]
    ) -> bool:
        items = self._raw_transactions()
        for idx, item in enumerate(items):
            if entry_id(item) == transaction_id:
                items[idx] = {**item, "status": status.value, "paidAt": format_timestamp(paid_at)}
                self._store.set(Collection.FINANCE_TRANSACTIONS.value, items)
                return True
        return False

    def delete_transaction(self, transaction_id: str) -> bool:
        items = self._raw_transactions()
        kept = [item for item in items if entry_id(item) != transaction_id]
        if len(kept) == len(items):
            return False
        self._store.set(Collection.FINANCE_TRANSACTIONS.value, kept)
        return True

    def list_accounts(self) -> Sequence[FinanceAccount]:
        return self._load_valid(Collection.FINANCE_ACCOUNTS, account_from_dict)

    def save_accounts(self, accounts: Sequence[FinanceAccount]) -> None:
        self._store.set(Collection.FINANCE_ACCOUNTS.value, [account_to_dict(a) for a in accounts])

    def list_categories(self) -> Sequence[FinanceCategory]:
        return self._load_valid(
            Collection.FINANCE_CATEGORIES,
            lambda d: FinanceCategory(
                category_id=str(d["id"]),
                label=str(d.get("label") or d["id"]),
                scope=CategoryScope(d.get("type") or CategoryScope.ALL.value),
            ),
        )

    def save_categories(self, categories: Sequence[FinanceCategory]) -> None:
        self._store.set(
            Collection.FINANCE_CATEGORIES.value,
            [{"id": c.category_id, "label": c.label, "type": c.scope.value} for c in categories],
        )

    def list_closures(self) -> Sequence[FinanceMonthClosure]:
        return self._load_valid(Collection.FINANCE_MONTH_CLOSURES, closure_from_dict)

    def save_closures(self, closures: Sequence[FinanceMonthClosure]) -> None:
        self._store.set(Collection.FINANCE_MONTH_CLOSURES.value, [closure_to_dict(c) for c in closures])

    def get_settings(self) -> FinanceSettings:
        data = self._store.get(Collection.SETTINGS_FINANCE.value, {})
        return FinanceSettings(
            finance_key=data.get("financeKey") or None,
            finance_key_hash=data.get("financeKeyHash") or None,
        )

    def save_settings(self, settings: FinanceSettings) -> None:
        data = {}
        if settings.finance_key:
            data["financeKey"] = settings.finance_key
        if settings.finance_key_hash:
            data["financeKeyHash"] = settings.finance_key_hash
        self._store.set(Collection.SETTINGS_FINANCE.value, data)
