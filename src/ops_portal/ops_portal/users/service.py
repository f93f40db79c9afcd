from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import MutableMapping, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import format_timestamp, now_local
from ..common.validators import optional_text, require_non_empty
from ..core.constants import AUTH_SESSION_KEY, FINANCE_UNLOCK_SESSION_KEY
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from .model import UserProfile
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into the session after login."""

    uid: str
    email: str
    display_name: str
    role: Role


def _session_user(user: UserProfile) -> SessionUser:
    return SessionUser(uid=user.uid, email=user.email, display_name=user.display_name, role=user.role)


class AuthService:
    """Use case: sign in / sign out against the stored user profiles."""

    def __init__(self, users: UserRepository):
        self._users = users

    def sign_in(self, email: str, password: str, session: MutableMapping) -> SessionUser:
        if not (email or "").strip() or not password:
            raise ValidationError("Completa todos los campos.")

        user = self._users.get_by_email(email)
        if not user:
            raise AuthenticationError("Credenciales inválidas.")

        if user.password_hash:
            try:
                ok = check_password_hash(user.password_hash, password)
            except ValueError:
                # e.g. placeholder or corrupted hashes
                ok = False
            if not ok:
                raise AuthenticationError("Credenciales inválidas.")

        if not user.enabled:
            raise AuthenticationError("Acceso deshabilitado.")
        if user.approved is False:
            raise AuthenticationError("Tu cuenta está pendiente de aprobación.")

        session[AUTH_SESSION_KEY] = {"uid": user.uid, "email": user.email}
        logger.info("User %s signed in", user.uid)
        return _session_user(user)

    def sign_out(self, session: MutableMapping) -> None:
        session.pop(AUTH_SESSION_KEY, None)
        session.pop(FINANCE_UNLOCK_SESSION_KEY, None)

    def current_user(self, session: MutableMapping) -> Optional[UserProfile]:
        data = session.get(AUTH_SESSION_KEY)
        if not isinstance(data, dict) or not data.get("uid"):
            return None
        user = self._users.get_by_id(str(data["uid"]))
        if not user or not user.enabled:
            return None
        return user

    def require_role(self, session: MutableMapping, role: Role) -> UserProfile:
        user = self.current_user(session)
        if not user:
            raise AuthenticationError("Inicia sesión para continuar.")
        if user.role != role:
            raise AuthorizationError("No tienes permisos.")
        return user


class UserService:
    """Use case: manage users (admin console)."""

    def __init__(self, users: UserRepository):
        self._users = users

    @staticmethod
    def _require_admin(current_role: Role) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("No tienes permisos.")

    def _active_admins(self) -> list[UserProfile]:
        return [u for u in self._users.list_all() if u.is_active_admin]

    def _get(self, uid: str) -> UserProfile:
        user = self._users.get_by_id(uid)
        if not user:
            raise ValidationError("Usuario no encontrado.")
        return user

    def _save_checked(self, before: UserProfile, after: UserProfile, message: str) -> UserProfile:
        # At least one active admin must remain.
        if before.is_active_admin and not after.is_active_admin and len(self._active_admins()) <= 1:
            raise ValidationError(message)
        return self._users.upsert(after)

    def list_users(self, *, current_role: Role) -> list[UserProfile]:
        self._require_admin(current_role)
        return sorted(self._users.list_all(), key=lambda u: (u.display_name or u.email).lower())

    def set_active(self, *, current_role: Role, uid: str, active: bool) -> UserProfile:
        self._require_admin(current_role)
        user = self._get(uid)
        updated = replace(user, active=bool(active), is_active=bool(active))
        logger.info("Set active=%s for user %s", active, uid)
        return self._save_checked(user, updated, "No puedes desactivar al último admin.")

    def set_role(self, *, current_role: Role, uid: str, role: str) -> UserProfile:
        self._require_admin(current_role)
        try:
            new_role = Role(role)
        except ValueError:
            raise ValidationError("Rol no válido.")
        user = self._get(uid)
        return self._save_checked(user, replace(user, role=new_role), "No puedes quitar el rol de admin al último admin.")

    def approve_user(self, *, current_role: Role, uid: str) -> UserProfile:
        self._require_admin(current_role)
        user = self._get(uid)
        return self._users.upsert(replace(user, approved=True, active=True, is_active=True))

    def upsert_user(
        self,
        *,
        current_role: Role,
        uid: str,
        email: str,
        display_name: str,
        role: str = Role.COLLAB.value,
        position: str = "",
        work_schedule_id: Optional[str] = None,
        password: Optional[str] = None,
    ) -> UserProfile:
        self._require_admin(current_role)
        uid = require_non_empty(uid, "Id")
        email = require_non_empty(email, "Email").lower()
        try:
            new_role = Role(role)
        except ValueError:
            raise ValidationError("Rol no válido.")

        other = self._users.get_by_email(email)
        if other and other.uid != uid:
            raise ValidationError("El email ya está registrado.")

        existing = self._users.get_by_id(uid)
        password_hash = generate_password_hash(password) if password else None
        if existing:
            updated = replace(
                existing,
                email=email,
                display_name=require_non_empty(display_name, "Nombre"),
                role=new_role,
                position=(position or "").strip(),
                work_schedule_id=optional_text(work_schedule_id) or existing.work_schedule_id,
                password_hash=password_hash or existing.password_hash,
            )
            return self._save_checked(existing, updated, "No puedes quitar el rol de admin al último admin.")

        user = UserProfile(
            uid=uid,
            email=email,
            display_name=require_non_empty(display_name, "Nombre"),
            role=new_role,
            position=(position or "").strip(),
            work_schedule_id=optional_text(work_schedule_id),
            active=True,
            approved=True,
            is_active=True,
            created_at=format_timestamp(now_local()),
            password_hash=password_hash,
        )
        return self._users.upsert(user)

    def update_profile(
        self,
        *,
        uid: str,
        display_name: Optional[str] = None,
        position: Optional[str] = None,
        photo_url: Optional[str] = None,
    ) -> UserProfile:
        """Self-service edit of the signed-in user's own profile fields."""
        user = self._get(uid)
        return self._users.upsert(
            replace(
                user,
                display_name=optional_text(display_name) or user.display_name,
                position=user.position if position is None else position.strip(),
                photo_url=user.photo_url if photo_url is None else photo_url.strip(),
            )
        )
