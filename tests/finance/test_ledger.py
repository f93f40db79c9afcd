from __future__ import annotations

from datetime import date, datetime

import pytest

from src.ops_portal.ops_portal.core.enums import AccountId, TransactionStatus, TransactionType
from src.ops_portal.ops_portal.core.exceptions import ValidationError
from src.ops_portal.ops_portal.finance.ledger import FinanceLedger
from src.ops_portal.ops_portal.finance.model import TransactionDraft


@pytest.fixture
def ledger(container):
    ledger = container.finance_ledger
    ledger.seed_defaults()
    return ledger


def _expense_draft(**kwargs) -> TransactionDraft:
    values = dict(date=date(2026, 1, 5), tx_type="expense", amount=1400, account_from="LUIS")
    values.update(kwargs)
    return TransactionDraft(**values)


def test_final_amount_applies_bonus_discount_refund(ledger, fixed_now):
    proposal = ledger.create_transaction(
        TransactionDraft(date=date(2026, 1, 5), tx_type="income", amount=100, bonus=0, discount=10, refund=0),
        now=fixed_now,
    )

    assert proposal.transaction.final_amount == 90
    assert proposal.transaction.month_key == "2026-01"
    assert proposal.transaction.reference_id.startswith("REF-")
    assert proposal.duplicates == []


def test_create_transaction_does_not_persist(ledger, fixed_now):
    ledger.create_transaction(_expense_draft(), now=fixed_now)

    assert ledger.list_transactions() == []


def test_second_identical_expense_is_flagged_once(ledger, fixed_now):
    first = ledger.create_transaction(_expense_draft(), now=fixed_now)
    ledger.add_transaction(first.transaction)

    second = ledger.create_transaction(_expense_draft(notes="otra vez"), now=fixed_now)

    assert len(second.duplicates) == 1
    assert second.duplicates[0].transaction_id == first.transaction.transaction_id
    assert second.transaction.transaction_id != first.transaction.transaction_id


def test_duplicate_is_advisory(ledger, fixed_now):
    first = ledger.create_transaction(_expense_draft(), now=fixed_now)
    ledger.add_transaction(first.transaction)
    second = ledger.create_transaction(_expense_draft(), now=fixed_now)

    rows = ledger.add_transaction(second.transaction)

    assert [r.transaction_id for r in rows] == [second.transaction.transaction_id, first.transaction.transaction_id]


def test_different_account_pair_is_not_a_duplicate(ledger, fixed_now):
    ledger.add_transaction(ledger.create_transaction(_expense_draft(), now=fixed_now).transaction)

    other = ledger.create_transaction(_expense_draft(account_from="KIMCE"), now=fixed_now)

    assert other.duplicates == []


def test_explicit_reference_narrows_duplicates(ledger, fixed_now):
    ledger.add_transaction(
        ledger.create_transaction(_expense_draft(reference_id="REF-A"), now=fixed_now).transaction
    )

    same_ref = ledger.create_transaction(_expense_draft(reference_id="REF-A"), now=fixed_now)
    other_ref = ledger.create_transaction(_expense_draft(reference_id="REF-B"), now=fixed_now)

    assert len(same_ref.duplicates) == 1
    assert other_ref.duplicates == []


def test_invalid_drafts(ledger):
    with pytest.raises(ValidationError):
        ledger.create_transaction(_expense_draft(tx_type="gift"))
    with pytest.raises(ValidationError):
        ledger.create_transaction(_expense_draft(amount=-5))
    with pytest.raises(ValidationError):
        ledger.create_transaction(_expense_draft(account_from="BANCO"))


def test_paid_transaction_gets_paid_at(ledger, fixed_now):
    proposal = ledger.create_transaction(_expense_draft(status="paid"), now=fixed_now)

    assert proposal.transaction.status == TransactionStatus.PAID
    assert proposal.transaction.paid_at == fixed_now


def test_list_transactions_by_month(ledger, fixed_now):
    for day in (date(2026, 1, 5), date(2026, 2, 3)):
        ledger.add_transaction(ledger.create_transaction(_expense_draft(date=day), now=fixed_now).transaction)

    assert [t.date for t in ledger.list_transactions(month_key="2026-02")] == [date(2026, 2, 3)]


def test_seed_defaults_only_when_empty(container):
    ledger = FinanceLedger(container.finance_repo)
    ledger.seed_defaults()
    ledger.seed_defaults()

    assert [a.account_id for a in ledger.list_accounts()] == [AccountId.LUIS, AccountId.ALONDRA, AccountId.KIMCE]
    assert len(ledger.list_categories()) == 7


def test_close_month_replaces_previous_closure(ledger, make_tx):
    ledger.save_transactions(
        [
            make_tx(date(2026, 1, 10), TransactionType.INCOME, 5000, account_to=AccountId.LUIS),
            make_tx(date(2026, 1, 12), TransactionType.EXPENSE, 1200, account_from=AccountId.LUIS),
        ]
    )

    ledger.close_month("2026-01", closed_by="admin-1", now=datetime(2026, 2, 1, 9, 0))
    closure = ledger.close_month("2026-01", closed_by="admin-1", notes="ajuste", now=datetime(2026, 2, 2, 9, 0))

    assert ledger.is_month_closed("2026-01")
    assert not ledger.is_month_closed("2026-02")
    assert len(ledger.list_closures()) == 1
    assert closure.net_income == 3800
    # 696 initial balance on LUIS
    assert closure.cash_at_close == 4496
    assert ledger.list_closures()[0].notes == "ajuste"


def test_dashboard_shape(ledger, make_tx):
    ledger.save_transactions(
        [
            make_tx(date(2026, 1, 3), TransactionType.INCOME, 1000, account_to=AccountId.LUIS),
            make_tx(date(2026, 1, 9), TransactionType.EXPENSE, 700, account_from=AccountId.LUIS),
        ]
    )

    data = ledger.dashboard("2026-01", today=date(2026, 1, 14), series_length=3)

    assert data["kpis"].net_income == 300
    assert data["current_cash"] == 996
    assert [s["month_key"] for s in data["series"]] == ["2025-11", "2025-12", "2026-01"]
    assert data["weekly"][0]["income"] == 1000
    assert data["weekly"][1]["expenses"] == 700
    # 996 / (700 / 2 weeks)
    assert data["runway_weeks"] == 2.8
    assert data["closed"] is False


def test_paying_a_pending_income_moves_kpis_and_cash(ledger, make_tx):
    income = make_tx(
        date(2026, 1, 6), TransactionType.INCOME, 2000, status=TransactionStatus.PENDING, account_to=AccountId.LUIS
    )
    expense = make_tx(date(2026, 1, 7), TransactionType.EXPENSE, 500, account_from=AccountId.LUIS)
    ledger.save_transactions([income, expense])

    before = ledger.dashboard("2026-01", today=date(2026, 1, 20))
    assert before["kpis"].income_paid == 0
    assert before["kpis"].income_pending == 2000
    assert before["current_cash"] == 196

    paid = ledger.set_transaction_status(income.transaction_id, "paid", now=datetime(2026, 1, 20, 10, 0))

    assert paid.status == TransactionStatus.PAID
    assert paid.paid_at == datetime(2026, 1, 20, 10, 0)
    after = ledger.dashboard("2026-01", today=date(2026, 1, 20))
    assert after["kpis"].income_paid == 2000
    assert after["kpis"].income_pending == 0
    assert after["kpis"].net_income == 1500
    assert after["current_cash"] == 2196
    stored = {tx.transaction_id: tx for tx in ledger.list_transactions()}
    assert stored[income.transaction_id].paid_at == datetime(2026, 1, 20, 10, 0)


def test_back_to_pending_clears_paid_at(ledger, make_tx):
    tx = make_tx(date(2026, 1, 6), TransactionType.INCOME, 300, account_to=AccountId.KIMCE)
    ledger.save_transactions([tx])
    ledger.set_transaction_status(tx.transaction_id, "paid", now=datetime(2026, 1, 6, 12, 0))

    reverted = ledger.set_transaction_status(tx.transaction_id, "pending")

    assert reverted.paid_at is None
    assert ledger.list_transactions()[0].status == TransactionStatus.PENDING


def test_status_change_rejects_unknown_status_and_ignores_unknown_id(ledger, make_tx):
    tx = make_tx(date(2026, 1, 6), TransactionType.INCOME, 300)
    ledger.save_transactions([tx])

    with pytest.raises(ValidationError, match="Estado no válido"):
        ledger.set_transaction_status(tx.transaction_id, "cancelled")
    assert ledger.set_transaction_status("missing", "paid") is None


def test_delete_transaction(ledger, make_tx):
    keep = make_tx(date(2026, 1, 6), TransactionType.INCOME, 300)
    drop = make_tx(date(2026, 1, 7), TransactionType.EXPENSE, 100)
    ledger.save_transactions([keep, drop])

    assert ledger.delete_transaction(drop.transaction_id)
    assert not ledger.delete_transaction(drop.transaction_id)
    assert [t.transaction_id for t in ledger.list_transactions()] == [keep.transaction_id]
