"""Pure finance rollups: balances, KPIs, runway and chart groupings.

Everything here works on already-loaded lists so it can be reused by the
dashboard, month closing and tests without touching storage.
"""

from __future__ import annotations

import calendar
from collections import OrderedDict
from datetime import date
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import month_key as month_key_of
from ..common.datetime_utils import parse_month_key, shift_month_key
from ..core.constants import (
    DEFAULT_MONTHLY_SERIES_LENGTH,
    DUPLICATE_AMOUNT_TOLERANCE,
    MARGIN_ALERT_THRESHOLD,
    PENDING_ALERT_RATIO,
)
from ..core.enums import TransactionStatus, TransactionType
from .model import AccountBalance, FinanceAccount, FinanceAlert, FinanceTransaction, MonthlyKpis


def find_duplicates(
    candidate: FinanceTransaction,
    existing: Iterable[FinanceTransaction],
    *,
    reference_id: Optional[str] = None,
) -> list[FinanceTransaction]:
    """Soft duplicates: same day, type, final amount (within tolerance) and account pair.

    The reference only narrows the match when one was supplied by the caller.
    """
    out = []
    for tx in existing:
        if tx.transaction_id == candidate.transaction_id:
            continue
        if tx.date != candidate.date or tx.tx_type != candidate.tx_type:
            continue
        if abs(tx.final_amount - candidate.final_amount) >= DUPLICATE_AMOUNT_TOLERANCE:
            continue
        if tx.account_from != candidate.account_from or tx.account_to != candidate.account_to:
            continue
        if reference_id and tx.reference_id != reference_id:
            continue
        out.append(tx)
    return out


def account_balances(
    accounts: Sequence[FinanceAccount],
    transactions: Sequence[FinanceTransaction],
    month_key: Optional[str] = None,
) -> list[AccountBalance]:
    """Initial balance plus paid credits minus paid debits; ``month_key`` restricts to one month."""
    rows = []
    for account in accounts:
        balance = account.initial_balance
        for tx in transactions:
            if not tx.is_paid:
                continue
            if month_key is not None and tx.month_key != month_key:
                continue
            if tx.account_to == account.account_id:
                balance += tx.final_amount
            if tx.account_from == account.account_id:
                balance -= tx.final_amount
        rows.append(
            AccountBalance(
                account_id=account.account_id,
                name=account.name,
                currency=account.currency,
                balance=round(balance, 2),
            )
        )
    return rows


def current_cash(accounts: Sequence[FinanceAccount], transactions: Sequence[FinanceTransaction]) -> float:
    """Total cash position across active accounts, all-time."""
    active = [a for a in accounts if a.active]
    return round(sum(b.balance for b in account_balances(active, transactions)), 2)


def _sum(transactions: Iterable[FinanceTransaction], tx_type: TransactionType, status: TransactionStatus) -> float:
    return sum(tx.final_amount for tx in transactions if tx.tx_type == tx_type and tx.status == status)


def monthly_kpis(transactions: Sequence[FinanceTransaction], month_key: str) -> MonthlyKpis:
    scoped = [tx for tx in transactions if tx.month_key == month_key]
    income_paid = _sum(scoped, TransactionType.INCOME, TransactionStatus.PAID)
    expenses_paid = _sum(scoped, TransactionType.EXPENSE, TransactionStatus.PAID)
    net_income = income_paid - expenses_paid
    return MonthlyKpis(
        month_key=month_key,
        income_paid=income_paid,
        income_pending=_sum(scoped, TransactionType.INCOME, TransactionStatus.PENDING),
        expenses_paid=expenses_paid,
        expenses_pending=_sum(scoped, TransactionType.EXPENSE, TransactionStatus.PENDING),
        net_income=net_income,
        margin=(net_income / income_paid * 100) if income_paid > 0 else 0.0,
    )


def elapsed_days_in_month(month_key: str, today: date) -> int:
    year, month = parse_month_key(month_key)
    current = month_key_of(today)
    if month_key == current:
        return max(today.day, 1)
    if month_key < current:
        return calendar.monthrange(year, month)[1]
    return 1


def runway_weeks(total_cash: float, expenses_paid: float, month_key: str, today: date) -> Optional[float]:
    """Weeks of cash left at this month's weekly burn; None when nothing was spent."""
    if expenses_paid <= 0:
        return None
    weeks_elapsed = elapsed_days_in_month(month_key, today) / 7
    weekly_burn = expenses_paid / weeks_elapsed
    return round(total_cash / weekly_burn, 1)


def weekly_breakdown(transactions: Sequence[FinanceTransaction], month_key: str) -> list[dict]:
    year, month = parse_month_key(month_key)
    days = calendar.monthrange(year, month)[1]
    weeks = (days + 6) // 7
    rows = [{"label": f"Semana {i + 1}", "income": 0.0, "expenses": 0.0} for i in range(weeks)]
    for tx in transactions:
        if tx.month_key != month_key or tx.date.year != year or tx.date.month != month:
            continue
        row = rows[(tx.date.day - 1) // 7]
        if tx.tx_type == TransactionType.INCOME:
            row["income"] += tx.final_amount
        elif tx.tx_type == TransactionType.EXPENSE:
            row["expenses"] += tx.final_amount
    return rows


def category_breakdown(
    transactions: Sequence[FinanceTransaction],
    month_key: str,
    *,
    tx_type: TransactionType = TransactionType.EXPENSE,
) -> list[dict]:
    totals: "OrderedDict[str, float]" = OrderedDict()
    for tx in transactions:
        if tx.month_key != month_key or tx.tx_type != tx_type:
            continue
        totals[tx.category] = totals.get(tx.category, 0.0) + tx.final_amount
    rows = [{"category": k, "total": round(v, 2)} for k, v in totals.items()]
    rows.sort(key=lambda x: x["total"], reverse=True)
    return rows


def build_month_keys(base_month_key: str, last_n: int = DEFAULT_MONTHLY_SERIES_LENGTH) -> list[str]:
    return [shift_month_key(base_month_key, -(last_n - 1 - i)) for i in range(last_n)]


def monthly_series(
    transactions: Sequence[FinanceTransaction],
    base_month_key: str,
    last_n: int = DEFAULT_MONTHLY_SERIES_LENGTH,
) -> list[dict]:
    rows = []
    for key in build_month_keys(base_month_key, last_n):
        k = monthly_kpis(transactions, key)
        rows.append(
            {
                "month_key": key,
                "income_paid": k.income_paid,
                "income_pending": k.income_pending,
                "expenses_paid": k.expenses_paid,
                "expenses_pending": k.expenses_pending,
                "income_total": k.income_projected,
                "expenses_total": k.expenses_projected,
                "net": k.projected_net,
            }
        )
    return rows


def finance_alerts(
    kpis: MonthlyKpis,
    *,
    margin_threshold: float = MARGIN_ALERT_THRESHOLD,
    pending_ratio: float = PENDING_ALERT_RATIO,
) -> list[FinanceAlert]:
    alerts = []
    if kpis.projected_margin < margin_threshold:
        alerts.append(FinanceAlert("warning", f"Margen neto proyectado menor a {margin_threshold:g}%."))
    if kpis.expenses_projected > kpis.income_projected:
        alerts.append(FinanceAlert("danger", "Gastos proyectados superan ingresos proyectados."))
    if kpis.income_projected > 0 and kpis.income_pending / kpis.income_projected > pending_ratio:
        alerts.append(
            FinanceAlert(
                "warning",
                f"Pendientes por cobrar superan el {pending_ratio * 100:g}% de los ingresos proyectados.",
            )
        )
    return alerts
