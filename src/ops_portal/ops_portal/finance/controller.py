from __future__ import annotations

from functools import wraps

from flask import Flask, g, request, session

from ..common.datetime_utils import month_key, now_local, parse_month_key
from ..common.web import admin_required, date_arg, json_body, to_jsonable
from ..container import Container
from ..core.exceptions import AuthorizationError, ValidationError
from .model import TransactionDraft


def _month_arg(value: str | None) -> str:
    if not value:
        return month_key(now_local().date())
    try:
        year, month = parse_month_key(value)
    except ValueError:
        year, month = 0, 0
    if not 1 <= month <= 12 or year < 1:
        raise ValidationError("Mes inválido (YYYY-MM)")
    return f"{year:04d}-{month:02d}"


def _draft_from_body(body: dict) -> TransactionDraft:
    tx_date = date_arg(body.get("date"))
    if tx_date is None:
        raise ValidationError("Fecha es obligatorio")
    return TransactionDraft(
        date=tx_date,
        tx_type=body.get("type", ""),
        amount=body.get("amount"),
        category=body.get("category") or "general",
        responsible=body.get("responsible") or "",
        status=body.get("status") or "pending",
        bonus=body.get("bonus"),
        discount=body.get("discount"),
        refund=body.get("refund"),
        client=body.get("client"),
        project=body.get("project"),
        account_from=body.get("account_from"),
        account_to=body.get("account_to"),
        reference_id=body.get("reference_id"),
        notes=body.get("notes"),
        receipt_url=body.get("receipt_url"),
    )


def register(app: Flask, container: Container) -> None:
    admin = admin_required(container)
    gate = container.finance_gate
    ledger = container.finance_ledger

    def unlocked(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if not gate.is_unlocked(session):
                raise AuthorizationError("Módulo de finanzas bloqueado.")
            return view(*args, **kwargs)

        return wrapper

    @app.route("/api/finance/unlock", methods=["POST"], endpoint="finance_unlock")
    @admin
    def finance_unlock():
        expires_at = gate.unlock(session, json_body().get("key"))
        return {"unlocked": True, "expires_at": expires_at}

    @app.route("/api/finance/lock", methods=["POST"], endpoint="finance_lock")
    @admin
    def finance_lock():
        gate.lock(session)
        return {"unlocked": False}

    @app.route("/api/finance/status", endpoint="finance_status")
    @admin
    def finance_status():
        return {"unlocked": gate.is_unlocked(session)}

    @app.route("/api/finance/dashboard", endpoint="finance_dashboard")
    @admin
    @unlocked
    def finance_dashboard():
        return to_jsonable(ledger.dashboard(_month_arg(request.args.get("month"))))

    @app.route("/api/finance/transactions", endpoint="finance_transactions")
    @admin
    @unlocked
    def finance_transactions():
        month = request.args.get("month")
        rows = ledger.list_transactions(month_key=_month_arg(month) if month else None)
        return {"transactions": to_jsonable(rows)}

    @app.route("/api/finance/transactions", methods=["POST"], endpoint="finance_add_transaction")
    @admin
    @unlocked
    def finance_add_transaction():
        body = json_body()
        proposal = ledger.create_transaction(_draft_from_body(body))
        if proposal.duplicates and not body.get("confirm"):
            return {
                "transaction": to_jsonable(proposal.transaction),
                "duplicates": to_jsonable(proposal.duplicates),
            }, 409
        ledger.add_transaction(proposal.transaction)
        return {"transaction": to_jsonable(proposal.transaction)}, 201

    @app.route("/api/finance/transactions/<tx_id>/status", methods=["PUT"], endpoint="finance_transaction_status")
    @admin
    @unlocked
    def finance_transaction_status(tx_id: str):
        transaction = ledger.set_transaction_status(tx_id, json_body().get("status"))
        if transaction is None:
            return {"error": "Movimiento no encontrado"}, 404
        return {"transaction": to_jsonable(transaction)}

    @app.route("/api/finance/transactions/<tx_id>", methods=["DELETE"], endpoint="finance_delete_transaction")
    @admin
    @unlocked
    def finance_delete_transaction(tx_id: str):
        if not ledger.delete_transaction(tx_id):
            return {"error": "Movimiento no encontrado"}, 404
        return {"deleted": tx_id}

    @app.route("/api/finance/accounts", endpoint="finance_accounts")
    @admin
    @unlocked
    def finance_accounts():
        return {
            "accounts": to_jsonable(ledger.list_accounts()),
            "categories": to_jsonable(ledger.list_categories()),
        }

    @app.route("/api/finance/closures", endpoint="finance_closures")
    @admin
    @unlocked
    def finance_closures():
        return {"closures": to_jsonable(ledger.list_closures())}

    @app.route("/api/finance/closures/<month>", methods=["POST"], endpoint="finance_close_month")
    @admin
    @unlocked
    def finance_close_month(month: str):
        closure = ledger.close_month(
            _month_arg(month),
            closed_by=g.current_user.uid,
            notes=json_body().get("notes"),
        )
        return {"closure": to_jsonable(closure)}, 201
