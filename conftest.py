from __future__ import annotations

from datetime import datetime

import pytest

from src.ops_portal.ops_portal.container import build_container
from src.ops_portal.ops_portal.core.enums import Role
from src.ops_portal.ops_portal.main import create_app
from src.ops_portal.ops_portal.storage.store import InMemoryRecordStore
from src.ops_portal.ops_portal.users.model import UserProfile


@pytest.fixture
def fixed_now():
    # Monday
    return datetime(2026, 1, 5, 9, 0, 0)


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def container(store):
    return build_container(store=store)


@pytest.fixture
def app():
    app = create_app("config.testing")
    c = app.extensions["ops_portal"]
    c.users_repo.upsert(UserProfile(uid="admin-1", email="admin@demo.com", display_name="Carlos", role=Role.ADMIN))
    c.users_repo.upsert(UserProfile(uid="collab-1", email="alondra@demo.com", display_name="Alondra", role=Role.COLLAB))
    c.finance_gate.ensure_finance_key("9021")
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client):
    def _login(email: str, password: str = "demo"):
        resp = client.post("/api/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.get_json()
        return resp

    return _login
