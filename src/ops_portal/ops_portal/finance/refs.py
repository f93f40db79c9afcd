from __future__ import annotations

import random
import string
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import now_local

_BASE36 = string.digits + string.ascii_lowercase


def to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    n = abs(value)
    while n:
        n, rem = divmod(n, 36)
        digits.append(_BASE36[rem])
    return ("-" if value < 0 else "") + "".join(reversed(digits))


def epoch_ms(value: datetime) -> int:
    return int(value.timestamp() * 1000)


def generate_reference_id(now: Optional[datetime] = None, *, rng: Optional[random.Random] = None) -> str:
    """Human readable reference: ``REF-XXXXXX-<base36 epoch ms>``."""
    rng = rng or random.Random()
    token = "".join(rng.choice(string.ascii_uppercase + string.digits) for _ in range(6))
    return f"REF-{token}-{to_base36(epoch_ms(now or now_local()))}"
