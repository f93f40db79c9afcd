"""Key/value record store.

Every collection is a single JSON value (usually a list) addressed by name.
Reads return a copy, so callers mutate freely and write the whole value back.
Malformed payloads never raise: they are logged and replaced by the default.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Optional, Protocol, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RecordStore(Protocol):
    def get(self, name: str, default: Any = None) -> Any:
        raise NotImplementedError

    def set(self, name: str, value: Any) -> None:
        raise NotImplementedError

    def delete(self, name: str) -> None:
        raise NotImplementedError

    def names(self) -> list[str]:
        raise NotImplementedError


def decode_payload(name: str, raw: Optional[str], default: Any) -> Any:
    """Decode a stored payload, falling back to ``default`` when unusable."""
    if not raw:
        return default
    try:
        value = json.loads(raw)
    except ValueError:
        logger.exception("Corrupt payload for collection %r, using default", name)
        return default
    if default is not None and not isinstance(value, type(default)):
        logger.warning(
            "Collection %r holds %s, expected %s; using default",
            name,
            type(value).__name__,
            type(default).__name__,
        )
        return default
    return value


def encode_payload(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, default=str)


def parse_entries(name: str, items: Any, from_dict: Callable[[dict], T]) -> list[T]:
    """Map stored items through ``from_dict``, skipping the ones it cannot read."""
    if not isinstance(items, list):
        return []
    out = []
    for item in items:
        try:
            out.append(from_dict(item))
        except (KeyError, TypeError, ValueError, AttributeError):
            logger.warning("Skipping malformed entry in %s: %r", name, item)
    return out


def entry_id(item: Any, key: str = "id") -> Any:
    """Identifier of a raw stored item, or None for items that are not objects."""
    return item.get(key) if isinstance(item, dict) else None


class InMemoryRecordStore:
    """Stores encoded JSON strings, mirroring browser storage semantics."""

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._data: dict[str, str] = {}
        for name, value in (initial or {}).items():
            self.set(name, value)

    def get(self, name: str, default: Any = None) -> Any:
        return decode_payload(name, self._data.get(name), default)

    def set(self, name: str, value: Any) -> None:
        self._data[name] = encode_payload(value)

    def set_raw(self, name: str, raw: str) -> None:
        """Write an undecoded payload (used to simulate corrupt storage)."""
        self._data[name] = raw

    def delete(self, name: str) -> None:
        self._data.pop(name, None)

    def names(self) -> list[str]:
        return sorted(self._data)


class JsonFileRecordStore:
    """One ``<name>.json`` file per collection inside ``directory``."""

    def __init__(self, directory: Path):
        self._dir = Path(directory)
        self._dir.mkdir(parents=True, exist_ok=True)

    def _path(self, name: str) -> Path:
        return self._dir / f"{name}.json"

    def get(self, name: str, default: Any = None) -> Any:
        path = self._path(name)
        if not path.exists():
            return default
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError:
            logger.exception("Failed to read collection %r", name)
            return default
        return decode_payload(name, raw, default)

    def set(self, name: str, value: Any) -> None:
        # Write to a sibling temp file then swap it in, so readers never see half a payload.
        fd, tmp = tempfile.mkstemp(dir=self._dir, prefix=f".{name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(encode_payload(value))
            os.replace(tmp, self._path(name))
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise
        logger.debug("Wrote collection %r", name)

    def delete(self, name: str) -> None:
        path = self._path(name)
        if path.exists():
            path.unlink()

    def names(self) -> list[str]:
        return sorted(p.stem for p in self._dir.glob("*.json"))
