from __future__ import annotations

import pytest

from src.ops_portal.ops_portal.core.enums import Collection, Role
from src.ops_portal.ops_portal.core.exceptions import AuthorizationError, ValidationError
from src.ops_portal.ops_portal.users.model import UserProfile


@pytest.fixture
def users(container):
    repo = container.users_repo
    repo.upsert(UserProfile(uid="admin-1", email="admin@demo.com", display_name="Carlos", role=Role.ADMIN))
    repo.upsert(UserProfile(uid="collab-1", email="alondra@demo.com", display_name="Alondra", role=Role.COLLAB))
    return repo


def test_deactivating_sole_admin_is_rejected_and_nothing_changes(container, users):
    before = container.user_service.list_users(current_role=Role.ADMIN)

    with pytest.raises(ValidationError, match="No puedes desactivar al último admin."):
        container.user_service.set_active(current_role=Role.ADMIN, uid="admin-1", active=False)

    assert container.user_service.list_users(current_role=Role.ADMIN) == before


def test_demoting_sole_admin_is_rejected(container, users):
    with pytest.raises(ValidationError, match="No puedes quitar el rol de admin al último admin."):
        container.user_service.set_role(current_role=Role.ADMIN, uid="admin-1", role="collab")

    assert users.get_by_id("admin-1").role == Role.ADMIN


def test_admin_can_be_deactivated_when_another_remains(container, users):
    container.user_service.set_role(current_role=Role.ADMIN, uid="collab-1", role="admin")

    updated = container.user_service.set_active(current_role=Role.ADMIN, uid="admin-1", active=False)

    assert updated.enabled is False
    assert [u.uid for u in users.list_all() if u.is_active_admin] == ["collab-1"]


def test_collab_cannot_manage_users(container, users):
    with pytest.raises(AuthorizationError):
        container.user_service.list_users(current_role=Role.COLLAB)
    with pytest.raises(AuthorizationError):
        container.user_service.set_active(current_role=Role.COLLAB, uid="collab-1", active=False)


def test_unknown_role_is_rejected(container, users):
    with pytest.raises(ValidationError, match="Rol no válido."):
        container.user_service.set_role(current_role=Role.ADMIN, uid="collab-1", role="owner")


def test_upsert_user_hashes_password_and_checks_email(container, users):
    created = container.user_service.upsert_user(
        current_role=Role.ADMIN,
        uid="collab-2",
        email="Diego@Demo.com",
        display_name="Diego",
        password="secreto",
    )

    assert created.email == "diego@demo.com"
    assert created.password_hash and created.password_hash != "secreto"
    assert created.approved is True

    with pytest.raises(ValidationError, match="El email ya está registrado."):
        container.user_service.upsert_user(
            current_role=Role.ADMIN, uid="collab-3", email="diego@demo.com", display_name="Otro"
        )


def test_approve_user(container, users):
    users.upsert(
        UserProfile(uid="new", email="new@demo.com", display_name="Nuevo", role=Role.COLLAB, approved=False)
    )

    approved = container.user_service.approve_user(current_role=Role.ADMIN, uid="new")

    assert approved.approved is True
    assert approved.enabled


def test_update_profile_keeps_unset_fields(container, users):
    updated = container.user_service.update_profile(uid="collab-1", position=" Diseñadora ")

    assert updated.display_name == "Alondra"
    assert updated.position == "Diseñadora"
    assert users.get_by_id("collab-1").position == "Diseñadora"


def test_malformed_user_entries_are_skipped(container, store):
    store.set(
        Collection.USERS.value,
        [
            {"uid": "admin-1", "email": "admin@demo.com", "displayName": "Carlos", "role": "admin"},
            "garbage",
            ["not", "a", "user"],
        ],
    )

    users = container.user_service.list_users(current_role=Role.ADMIN)

    assert [u.uid for u in users] == ["admin-1"]
    container.users_repo.upsert(UserProfile(uid="collab-2", email="c2@demo.com", display_name="Bea", role=Role.COLLAB))
    assert len(store.get(Collection.USERS.value, [])) == 4
