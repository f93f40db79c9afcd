from __future__ import annotations

import pytest
from werkzeug.security import generate_password_hash

from src.ops_portal.ops_portal.core.constants import AUTH_SESSION_KEY, FINANCE_UNLOCK_SESSION_KEY
from src.ops_portal.ops_portal.core.enums import Role
from src.ops_portal.ops_portal.core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from src.ops_portal.ops_portal.users.model import UserProfile


@pytest.fixture
def auth(container):
    repo = container.users_repo
    repo.upsert(UserProfile(uid="admin-1", email="admin@demo.com", display_name="Carlos", role=Role.ADMIN))
    repo.upsert(
        UserProfile(
            uid="collab-1",
            email="alondra@demo.com",
            display_name="Alondra",
            role=Role.COLLAB,
            password_hash=generate_password_hash("clave123"),
        )
    )
    repo.upsert(UserProfile(uid="off", email="off@demo.com", display_name="Off", role=Role.COLLAB, active=False))
    repo.upsert(
        UserProfile(uid="wait", email="wait@demo.com", display_name="Wait", role=Role.COLLAB, approved=False)
    )
    return container.auth_service


def test_sign_in_writes_session(auth):
    session = {}

    user = auth.sign_in("ADMIN@demo.com", "x", session)

    assert user.uid == "admin-1"
    assert session[AUTH_SESSION_KEY] == {"uid": "admin-1", "email": "admin@demo.com"}
    assert auth.current_user(session).uid == "admin-1"


@pytest.mark.parametrize(
    "email, password, exc, message",
    [
        ("", "x", ValidationError, "Completa todos los campos."),
        ("admin@demo.com", "", ValidationError, "Completa todos los campos."),
        ("nobody@demo.com", "x", AuthenticationError, "Credenciales inválidas."),
        ("alondra@demo.com", "wrong", AuthenticationError, "Credenciales inválidas."),
        ("off@demo.com", "x", AuthenticationError, "Acceso deshabilitado."),
        ("wait@demo.com", "x", AuthenticationError, "Tu cuenta está pendiente de aprobación."),
    ],
)
def test_sign_in_rejections(auth, email, password, exc, message):
    session = {}
    with pytest.raises(exc, match=message):
        auth.sign_in(email, password, session)
    assert AUTH_SESSION_KEY not in session


def test_stored_hash_accepts_right_password(auth):
    assert auth.sign_in("alondra@demo.com", "clave123", {}).uid == "collab-1"


def test_sign_out_clears_finance_unlock(auth):
    session = {}
    auth.sign_in("admin@demo.com", "x", session)
    session[FINANCE_UNLOCK_SESSION_KEY] = {"expiresAt": 1}

    auth.sign_out(session)

    assert session == {}
    assert auth.current_user(session) is None


def test_require_role(auth):
    session = {}
    with pytest.raises(AuthenticationError):
        auth.require_role(session, Role.ADMIN)

    auth.sign_in("alondra@demo.com", "clave123", session)
    with pytest.raises(AuthorizationError, match="No tienes permisos."):
        auth.require_role(session, Role.ADMIN)
    assert auth.require_role(session, Role.COLLAB).uid == "collab-1"
