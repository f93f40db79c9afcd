from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class UserProfile:
    """Portal user. ``approved`` and ``is_active`` are optional admin flags."""

    uid: str
    email: str
    display_name: str
    role: Role
    photo_url: str = ""
    position: str = ""
    work_schedule_id: Optional[str] = None
    active: bool = True
    approved: Optional[bool] = None
    is_active: Optional[bool] = None
    created_at: Optional[str] = None
    password_hash: Optional[str] = None

    @property
    def enabled(self) -> bool:
        return bool(self.active) and self.is_active is not False

    @property
    def is_active_admin(self) -> bool:
        return self.role == Role.ADMIN and self.enabled
