from __future__ import annotations

import dataclasses
import logging
from datetime import date, datetime
from enum import Enum
from functools import wraps
from typing import Any, Optional

from flask import g, request, session

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, DomainError, ValidationError
from .datetime_utils import parse_iso_date

logger = logging.getLogger(__name__)


def to_jsonable(value: Any) -> Any:
    """Convert domain objects (dataclasses, enums, dates) into JSON-ready values."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def date_arg(value: Optional[str], default: Optional[date] = None) -> Optional[date]:
    if not value:
        return default
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError("Fecha inválida (YYYY-MM-DD)")


def login_required(container):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            user = container.auth_service.current_user(session)
            if not user:
                raise AuthenticationError("Inicia sesión para continuar.")
            g.current_user = user
            return view(*args, **kwargs)

        return wrapper

    return decorator


def admin_required(container):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            g.current_user = container.auth_service.require_role(session, Role.ADMIN)
            return view(*args, **kwargs)

        return wrapper

    return decorator


def register_error_handlers(app) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        if exc.status_code >= 401:
            logger.info("%s on %s %s: %s", type(exc).__name__, request.method, request.path, exc)
        return {"error": str(exc)}, exc.status_code
