from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization."""

    ADMIN = "admin"
    COLLAB = "collab"


class AttendanceState(str, Enum):
    """Read-time projection of an attendance record (never persisted)."""

    OFF = "OFF"
    IN_SHIFT = "IN_SHIFT"
    ON_BREAK = "ON_BREAK"
    CLOSED = "CLOSED"


class RecordStatus(str, Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class RequestStatus(str, Enum):
    """Approval workflow status (requests, corrections, extras)."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class RequestType(str, Enum):
    DIA_LIBRE = "DIA_LIBRE"
    PERMISO_HORAS = "PERMISO_HORAS"
    MEDICO = "MEDICO"


class ExtraActivityType(str, Enum):
    REUNION = "Reunión"
    GRABACION = "Grabación"
    URGENCIA = "Urgencia"
    EVENTO = "Evento"
    OTRO = "Otro"


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"
    COLLABORATOR_PAYMENT = "collaborator_payment"
    TRANSFER = "transfer"
    REFUND = "refund"
    TAX = "tax"


class TransactionStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"


class AccountId(str, Enum):
    """Closed set of cash pools tracked by the finance module."""

    LUIS = "LUIS"
    ALONDRA = "ALONDRA"
    KIMCE = "KIMCE"


class CategoryScope(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"
    ALL = "all"


class Collection(str, Enum):
    """Names of the persisted collections in the record store."""

    USERS = "users"
    REQUESTS = "requests"
    ATTENDANCE = "attendance"
    ATTENDANCE_RECORDS = "attendance_records"
    ATTENDANCE_EXTRAS = "attendance_extras"
    ATTENDANCE_REQUESTS = "attendance_requests"
    ATTENDANCE_CORRECTIONS = "attendance_corrections"
    FINANCE_TRANSACTIONS = "financeTransactions"
    FINANCE_ACCOUNTS = "financeAccounts"
    FINANCE_CATEGORIES = "financeCategories"
    FINANCE_MONTH_CLOSURES = "financeMonthClosures"
    WORK_SCHEDULES = "workSchedules"
    SETTINGS_FINANCE = "settings_finance"


class RequestKind(str, Enum):
    """Families shown together in the unified recent list."""

    EXTRA = "EXTRA"
    REQUEST = "REQUEST"
    CORRECTION = "CORRECTION"
