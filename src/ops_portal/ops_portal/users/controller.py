from __future__ import annotations

from flask import Flask, g, session

from ..common.web import admin_required, json_body, login_required, to_jsonable
from ..container import Container
from ..core.exceptions import ValidationError


def _public(user) -> dict:
    data = to_jsonable(user)
    data.pop("password_hash", None)
    return data


def register(app: Flask, container: Container) -> None:
    login = login_required(container)
    admin = admin_required(container)

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def auth_login():
        body = json_body()
        s_user = container.auth_service.sign_in(body.get("email", ""), body.get("password", ""), session)
        return {"user": to_jsonable(s_user)}

    @app.route("/api/auth/logout", methods=["POST"], endpoint="auth_logout")
    def auth_logout():
        container.auth_service.sign_out(session)
        return {"ok": True}

    @app.route("/api/auth/me", endpoint="auth_me")
    @login
    def auth_me():
        return {"user": _public(g.current_user)}

    @app.route("/api/me/profile", methods=["PATCH"], endpoint="update_profile")
    @login
    def update_profile():
        body = json_body()
        user = container.user_service.update_profile(
            uid=g.current_user.uid,
            display_name=body.get("display_name"),
            position=body.get("position"),
            photo_url=body.get("photo_url"),
        )
        return {"user": _public(user)}

    @app.route("/api/admin/users", endpoint="admin_users")
    @admin
    def admin_users():
        users = container.user_service.list_users(current_role=g.current_user.role)
        return {"users": [_public(u) for u in users]}

    @app.route("/api/admin/users", methods=["POST"], endpoint="admin_upsert_user")
    @admin
    def admin_upsert_user():
        body = json_body()
        user = container.user_service.upsert_user(
            current_role=g.current_user.role,
            uid=body.get("uid", ""),
            email=body.get("email", ""),
            display_name=body.get("display_name", ""),
            role=body.get("role", "collab"),
            position=body.get("position", ""),
            work_schedule_id=body.get("work_schedule_id"),
            password=body.get("password"),
        )
        return {"user": _public(user)}, 201

    @app.route("/api/admin/users/<uid>/active", methods=["POST"], endpoint="admin_set_active")
    @admin
    def admin_set_active(uid: str):
        active = json_body().get("active", True)
        if not isinstance(active, bool):
            raise ValidationError("active debe ser true o false")
        user = container.user_service.set_active(current_role=g.current_user.role, uid=uid, active=active)
        return {"user": _public(user)}

    @app.route("/api/admin/users/<uid>/role", methods=["POST"], endpoint="admin_set_role")
    @admin
    def admin_set_role(uid: str):
        user = container.user_service.set_role(
            current_role=g.current_user.role,
            uid=uid,
            role=json_body().get("role", ""),
        )
        return {"user": _public(user)}

    @app.route("/api/admin/users/<uid>/approve", methods=["POST"], endpoint="admin_approve_user")
    @admin
    def admin_approve_user(uid: str):
        user = container.user_service.approve_user(current_role=g.current_user.role, uid=uid)
        return {"user": _public(user)}
