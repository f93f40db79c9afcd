from __future__ import annotations

from datetime import date, datetime
from typing import Optional

import pytest

from src.ops_portal.ops_portal.core.enums import AccountId, TransactionStatus, TransactionType
from src.ops_portal.ops_portal.finance.model import FinanceTransaction


@pytest.fixture
def make_tx():
    counter = iter(range(1, 10_000))

    def _make(
        day: date,
        tx_type: TransactionType,
        amount: float,
        *,
        status: TransactionStatus = TransactionStatus.PAID,
        account_from: Optional[AccountId] = None,
        account_to: Optional[AccountId] = None,
        category: str = "general",
    ) -> FinanceTransaction:
        n = next(counter)
        return FinanceTransaction(
            transaction_id=f"tx-{n}",
            date=day,
            tx_type=tx_type,
            category=category,
            amount=amount,
            final_amount=amount,
            responsible="LUIS",
            status=status,
            reference_id=f"REF-{n}",
            month_key=f"{day.year:04d}-{day.month:02d}",
            created_at=datetime(2026, 1, 1, 8, 0),
            account_from=account_from,
            account_to=account_to,
        )

    return _make
