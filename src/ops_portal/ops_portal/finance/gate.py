from __future__ import annotations

import hashlib
import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import MutableMapping, Optional

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_FINANCE_UNLOCK_MINUTES, FINANCE_UNLOCK_SESSION_KEY
from ..core.exceptions import AuthenticationError
from .refs import epoch_ms
from .repository import FinanceRepository

logger = logging.getLogger(__name__)


def hash_finance_key(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


class FinanceAccessGate:
    """Time-limited unlock of the finance module, kept in the caller's session.

    This is a convenience PIN, not a security boundary.
    """

    def __init__(self, finance: FinanceRepository, *, ttl_minutes: int = DEFAULT_FINANCE_UNLOCK_MINUTES):
        self._finance = finance
        self._ttl = timedelta(minutes=int(ttl_minutes))

    def verify_key(self, candidate: Optional[str]) -> bool:
        if not candidate:
            return False
        settings = self._finance.get_settings()
        if settings.finance_key_hash:
            return hash_finance_key(candidate) == settings.finance_key_hash
        if settings.finance_key:
            return candidate == settings.finance_key
        return False

    def unlock(self, session: MutableMapping, candidate: Optional[str], *, now: datetime | None = None) -> int:
        if not self.verify_key(candidate):
            logger.warning("Rejected finance unlock attempt")
            raise AuthenticationError("Clave inválida.")
        expires_at = epoch_ms((now or now_local()) + self._ttl)
        session[FINANCE_UNLOCK_SESSION_KEY] = {"expiresAt": expires_at}
        return expires_at

    def is_unlocked(self, session: MutableMapping, *, now: datetime | None = None) -> bool:
        data = session.get(FINANCE_UNLOCK_SESSION_KEY)
        if not isinstance(data, dict):
            return False
        try:
            expires_at = int(data.get("expiresAt") or 0)
        except (TypeError, ValueError):
            return False
        return epoch_ms(now or now_local()) < expires_at

    def lock(self, session: MutableMapping) -> None:
        session.pop(FINANCE_UNLOCK_SESSION_KEY, None)

    def ensure_finance_key(self, value: str) -> bool:
        """Seed a plaintext key only when neither a key nor a hash is configured."""
        settings = self._finance.get_settings()
        if settings.finance_key or settings.finance_key_hash:
            return False
        self._finance.save_settings(replace(settings, finance_key=value))
        return True

    def set_finance_key_hash(self, value: str) -> None:
        """Replace the stored key by its SHA-256 digest."""
        settings = replace(self._finance.get_settings(), finance_key=None, finance_key_hash=hash_finance_key(value))
        self._finance.save_settings(settings)
