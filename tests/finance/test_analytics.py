from __future__ import annotations

from datetime import date

import pytest

from src.ops_portal.ops_portal.core.enums import AccountId, TransactionStatus, TransactionType
from src.ops_portal.ops_portal.finance import analytics
from src.ops_portal.ops_portal.finance.model import FinanceAccount

PAID = TransactionStatus.PAID
PENDING = TransactionStatus.PENDING
INCOME = TransactionType.INCOME
EXPENSE = TransactionType.EXPENSE


@pytest.mark.parametrize(
    "rows",
    [
        [],
        [(INCOME, 1000, PAID)],
        [(EXPENSE, 250.5, PAID)],
        [(INCOME, 1000, PAID), (INCOME, 400, PENDING), (EXPENSE, 300, PAID), (EXPENSE, 90, PENDING)],
        [(TransactionType.TAX, 80, PAID), (TransactionType.TRANSFER, 500, PAID), (INCOME, 10, PAID)],
    ],
)
def test_net_income_is_paid_income_minus_paid_expenses(make_tx, rows):
    txs = [make_tx(date(2026, 1, 10), t, amount, status=status) for t, amount, status in rows]

    kpis = analytics.monthly_kpis(txs, "2026-01")

    assert kpis.net_income == pytest.approx(kpis.income_paid - kpis.expenses_paid)


def test_kpis_ignore_other_months(make_tx):
    txs = [
        make_tx(date(2026, 1, 10), INCOME, 1000),
        make_tx(date(2026, 2, 1), INCOME, 9999),
        make_tx(date(2026, 1, 11), INCOME, 500, status=PENDING),
    ]

    kpis = analytics.monthly_kpis(txs, "2026-01")

    assert kpis.income_paid == 1000
    assert kpis.income_pending == 500
    assert kpis.income_projected == 1500
    assert kpis.margin == 100.0


def test_margin_is_zero_without_paid_income(make_tx):
    kpis = analytics.monthly_kpis([make_tx(date(2026, 1, 1), EXPENSE, 100)], "2026-01")

    assert kpis.margin == 0.0
    assert kpis.net_income == -100


def test_account_balances_and_current_cash(make_tx):
    accounts = [
        FinanceAccount(AccountId.LUIS, "Cuenta Luis", initial_balance=696),
        FinanceAccount(AccountId.ALONDRA, "Cuenta Alondra"),
        FinanceAccount(AccountId.KIMCE, "Caja Kimce", active=False, initial_balance=50),
    ]
    txs = [
        make_tx(date(2025, 12, 20), INCOME, 1000, account_to=AccountId.LUIS),
        make_tx(date(2026, 1, 5), TransactionType.TRANSFER, 300, account_from=AccountId.LUIS, account_to=AccountId.ALONDRA),
        make_tx(date(2026, 1, 6), EXPENSE, 200, account_from=AccountId.LUIS, status=PENDING),
    ]

    balances = {b.account_id: b.balance for b in analytics.account_balances(accounts, txs)}
    january = {b.account_id: b.balance for b in analytics.account_balances(accounts, txs, "2026-01")}

    assert balances == {AccountId.LUIS: 1396, AccountId.ALONDRA: 300, AccountId.KIMCE: 50}
    assert january[AccountId.LUIS] == 396
    # Inactive accounts are left out; history before the month is included.
    assert analytics.current_cash(accounts, txs) == 1696


def test_duplicates_match_within_tolerance(make_tx):
    existing = [make_tx(date(2026, 1, 5), EXPENSE, 1400, account_from=AccountId.LUIS)]

    near = make_tx(date(2026, 1, 5), EXPENSE, 1400.009, account_from=AccountId.LUIS)
    far = make_tx(date(2026, 1, 5), EXPENSE, 1400.5, account_from=AccountId.LUIS)
    other_day = make_tx(date(2026, 1, 6), EXPENSE, 1400, account_from=AccountId.LUIS)
    other_type = make_tx(date(2026, 1, 5), INCOME, 1400, account_from=AccountId.LUIS)

    assert len(analytics.find_duplicates(near, existing)) == 1
    assert analytics.find_duplicates(far, existing) == []
    assert analytics.find_duplicates(other_day, existing) == []
    assert analytics.find_duplicates(other_type, existing) == []


@pytest.mark.parametrize(
    "month_key, today, expected",
    [
        ("2026-01", date(2026, 1, 14), 14),
        ("2025-12", date(2026, 1, 14), 31),
        ("2024-02", date(2026, 1, 14), 29),
        ("2026-03", date(2026, 1, 14), 1),
    ],
)
def test_elapsed_days_in_month(month_key, today, expected):
    assert analytics.elapsed_days_in_month(month_key, today) == expected


def test_runway_none_without_expenses():
    assert analytics.runway_weeks(5000, 0, "2026-01", date(2026, 1, 14)) is None


def test_runway_for_closed_past_month():
    # 31 days elapsed, 3100 spent -> 700 per week
    assert analytics.runway_weeks(7000, 3100, "2025-12", date(2026, 1, 14)) == 10.0


def test_weekly_breakdown_has_week_per_seven_days(make_tx):
    rows = analytics.weekly_breakdown([make_tx(date(2026, 1, 29), INCOME, 50)], "2026-01")

    assert [r["label"] for r in rows] == ["Semana 1", "Semana 2", "Semana 3", "Semana 4", "Semana 5"]
    assert rows[4]["income"] == 50


def test_category_breakdown_sorted_by_total(make_tx):
    txs = [
        make_tx(date(2026, 1, 2), EXPENSE, 100, category="operativos"),
        make_tx(date(2026, 1, 3), EXPENSE, 300, category="personal"),
        make_tx(date(2026, 1, 4), EXPENSE, 50, category="operativos"),
        make_tx(date(2026, 1, 4), INCOME, 999, category="ventas"),
    ]

    assert analytics.category_breakdown(txs, "2026-01") == [
        {"category": "personal", "total": 300},
        {"category": "operativos", "total": 150},
    ]


def test_build_month_keys_crosses_year():
    assert analytics.build_month_keys("2026-02", 4) == ["2025-11", "2025-12", "2026-01", "2026-02"]


def test_alerts(make_tx):
    healthy = analytics.monthly_kpis([make_tx(date(2026, 1, 2), INCOME, 1000)], "2026-01")
    risky = analytics.monthly_kpis(
        [
            make_tx(date(2026, 1, 2), INCOME, 100),
            make_tx(date(2026, 1, 3), INCOME, 900, status=PENDING),
            make_tx(date(2026, 1, 4), EXPENSE, 1500),
        ],
        "2026-01",
    )

    assert analytics.finance_alerts(healthy) == []
    tones = [a.tone for a in analytics.finance_alerts(risky)]
    assert tones == ["warning", "danger", "warning"]
