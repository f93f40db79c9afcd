from __future__ import annotations

import pytest

from src.ops_portal.ops_portal.database.mysql_record_store import MySQLRecordStore
from src.ops_portal.ops_portal.storage.store import InMemoryRecordStore, JsonFileRecordStore, entry_id, parse_entries


def test_memory_store_returns_copies():
    store = InMemoryRecordStore({"users": [{"uid": "a"}]})

    users = store.get("users", [])
    users.append({"uid": "b"})

    assert store.get("users", []) == [{"uid": "a"}]


def test_memory_store_falls_back_on_corrupt_or_mistyped_payload():
    store = InMemoryRecordStore()
    store.set_raw("users", "[{broken")
    store.set("settings_finance", [1, 2])

    assert store.get("users", []) == []
    assert store.get("settings_finance", {}) == {}
    assert store.get("missing", []) == []


def test_file_store_roundtrip_and_delete(tmp_path):
    store = JsonFileRecordStore(tmp_path / "data")
    store.set("workSchedules", [{"id": "x", "name": "Jornada ñ"}])

    assert store.get("workSchedules", []) == [{"id": "x", "name": "Jornada ñ"}]
    assert store.names() == ["workSchedules"]
    assert JsonFileRecordStore(tmp_path / "data").get("workSchedules", []) == [{"id": "x", "name": "Jornada ñ"}]

    store.delete("workSchedules")
    assert store.names() == []


def test_file_store_corrupt_file(tmp_path):
    store = JsonFileRecordStore(tmp_path)
    (tmp_path / "users.json").write_text("not json", encoding="utf-8")

    assert store.get("users", []) == []


class FakeCursor:
    def __init__(self, db: dict):
        self._db = db
        self._result = []

    def execute(self, sql, params=()):
        sql = " ".join(sql.split())
        if sql.startswith("CREATE TABLE"):
            self._db.setdefault("__schema__", True)
        elif sql.startswith("SELECT payload"):
            name = params[0]
            self._result = [{"payload": self._db[name]}] if name in self._db else []
        elif sql.startswith("INSERT INTO record_store"):
            self._db[params[0]] = params[1]
        elif sql.startswith("DELETE"):
            self._db.pop(params[0], None)
        elif sql.startswith("SELECT name"):
            self._result = [{"name": n} for n in sorted(self._db) if n != "__schema__"]
        else:
            raise AssertionError(sql)

    def fetchone(self):
        return self._result[0] if self._result else None

    def fetchall(self):
        return list(self._result)

    def close(self):
        pass


class FakeConnection:
    def __init__(self, db: dict):
        self._db = db
        self.commits = 0

    def cursor(self, dictionary=True):
        return FakeCursor(self._db)

    def commit(self):
        self.commits += 1

    def rollback(self):
        pass

    def close(self):
        pass


class FakeConnFactory:
    def __init__(self):
        self.db: dict = {}

    def connect(self):
        return FakeConnection(self.db)


@pytest.fixture
def mysql_store():
    factory = FakeConnFactory()
    store = MySQLRecordStore(factory)
    store.ensure_schema()
    return store


def test_mysql_store_overwrites_whole_collection(mysql_store):
    mysql_store.set("attendance_records", [{"id": "a"}])
    mysql_store.set("attendance_records", [{"id": "b"}])

    assert mysql_store.get("attendance_records", []) == [{"id": "b"}]
    assert mysql_store.names() == ["attendance_records"]


def test_mysql_store_missing_and_delete(mysql_store):
    assert mysql_store.get("users", []) == []
    mysql_store.set("users", [{"uid": "x"}])
    mysql_store.delete("users")
    assert mysql_store.get("users", []) == []


def test_parse_entries_skips_what_the_mapper_cannot_read(caplog):
    items = [{"n": "1"}, {"n": "x"}, {}, None, {"n": "2"}]

    with caplog.at_level("WARNING"):
        parsed = parse_entries("numbers", items, lambda d: int(d["n"]))

    assert parsed == [1, 2]
    assert caplog.text.count("Skipping malformed entry in numbers") == 3
    assert parse_entries("numbers", {"n": "1"}, lambda d: int(d["n"])) == []


def test_entry_id_ignores_non_objects():
    assert entry_id({"id": "a"}) == "a"
    assert entry_id({"uid": "u"}, "uid") == "u"
    assert entry_id("garbage") is None
