from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Collection, Role
from ..storage.store import RecordStore, entry_id, parse_entries
from .model import UserProfile


class UserRepository(Protocol):
    def get_by_id(self, uid: str) -> Optional[UserProfile]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[UserProfile]:
        raise NotImplementedError

    def list_all(self) -> Sequence[UserProfile]:
        raise NotImplementedError

    def upsert(self, user: UserProfile) -> UserProfile:
        raise NotImplementedError


def user_from_dict(data: dict) -> UserProfile:
    role_value = data.get("role")
    return UserProfile(
        uid=str(data["uid"]),
        email=str(data.get("email") or ""),
        display_name=str(data.get("displayName") or ""),
        role=Role.ADMIN if role_value == Role.ADMIN.value else Role.COLLAB,
        photo_url=str(data.get("photoURL") or ""),
        position=str(data.get("position") or ""),
        work_schedule_id=data.get("workScheduleId") or None,
        active=bool(data.get("active", True)),
        approved=data.get("approved"),
        is_active=data.get("isActive"),
        created_at=data.get("createdAt"),
        password_hash=data.get("passwordHash") or None,
    )


def user_to_dict(user: UserProfile) -> dict:
    data = {
        "uid": user.uid,
        "email": user.email,
        "displayName": user.display_name,
        "photoURL": user.photo_url,
        "role": user.role.value,
        "position": user.position,
        "active": user.active,
    }
    optional = {
        "workScheduleId": user.work_schedule_id,
        "approved": user.approved,
        "isActive": user.is_active,
        "createdAt": user.created_at,
        "passwordHash": user.password_hash,
    }
    data.update({k: v for k, v in optional.items() if v is not None})
    return data


class StoreUserRepository(UserRepository):
    def __init__(self, store: RecordStore):
        self._store = store

    def _load(self) -> list[dict]:
        return self._store.get(Collection.USERS.value, [])

    def list_all(self) -> Sequence[UserProfile]:
        return [u for u in parse_entries(Collection.USERS.value, self._load(), user_from_dict) if u.uid]

    def get_by_id(self, uid: str) -> Optional[UserProfile]:
        for u in self.list_all():
            if u.uid == uid:
                return u
        return None

    def get_by_email(self, email: str) -> Optional[UserProfile]:
        needle = (email or "").strip().lower()
        for u in self.list_all():
            if u.email.lower() == needle:
                return u
        return None

    def upsert(self, user: UserProfile) -> UserProfile:
        items = self._load()
        data = user_to_dict(user)
        for idx, item in enumerate(items):
            if entry_id(item, "uid") == user.uid:
                items[idx] = data
                break
        else:
            items.append(data)
        self._store.set(Collection.USERS.value, items)
        return user
