"""Flask REST API exposing the budget tracker services."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from budget_core.aggregator import split_by_type, summarize_month
from budget_core.categories import EntryType, categories_for
from budget_core.config import get_settings
from budget_core.exceptions import PersistenceError, RecordNotFoundError, ValidationError
from budget_core.fiscal import MONTH_LABELS, calendar_year_of, month_index
from budget_core.services import LedgerService
from budget_core.storage import JSONStorage


def create_app(data_dir: Optional[Path] = None) -> Flask:
    app = Flask(__name__)
    settings = get_settings()

    if settings.is_development:
        CORS(app, resources={r"/*": {"origins": "*"}}, supports_credentials=True)
    elif settings.allowed_origins:
        CORS(app, resources={r"/*": {"origins": settings.allowed_origins}}, supports_credentials=True)
    else:
        CORS(app)

    storage = JSONStorage(Path(data_dir or settings.data_dir))
    ledger = LedgerService(storage, settings.resource)

    def _success(payload: Any, status: int = 200):
        if status == 204:
            return ("", status)
        return jsonify(payload), status

    def _handle_error(exc: Exception, status: int, message: str):
        app.logger.error("%s: %s", message, exc)
        return jsonify({"error": message, "details": str(exc)}), status

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        return _handle_error(exc, 400, "Validation error")

    @app.errorhandler(RecordNotFoundError)
    def handle_not_found(exc: RecordNotFoundError):
        return _handle_error(exc, 404, "Record not found")

    @app.errorhandler(PersistenceError)
    def handle_persistence_error(exc: PersistenceError):
        return _handle_error(exc, 500, "Persistence error")

    def _json_body() -> Dict[str, Any]:
        if not request.is_json:
            raise ValidationError("Request content must be application/json")
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Malformed JSON body")
        return data

    def _check_month(month: int) -> int:
        if not 1 <= month <= 12:
            raise ValidationError("month must be between 1 and 12")
        return month

    @app.get("/categories")
    def list_categories():
        return _success({
            entry_type.value: [category.to_dict() for category in categories_for(entry_type)]
            for entry_type in EntryType
        })

    @app.get("/entries")
    def list_entries():
        return _success({"items": [entry.to_dict() for entry in ledger.entries]})

    @app.post("/entries")
    def create_entry():
        entry = ledger.add_entry(_json_body())
        return _success(entry.to_dict(), 201)

    @app.get("/entries/<entry_id>")
    def get_entry(entry_id: str):
        return _success(ledger.get_entry(entry_id).to_dict())

    @app.put("/entries/<entry_id>")
    def update_entry(entry_id: str):
        entry = ledger.update_entry(entry_id, _json_body())
        return _success(entry.to_dict())

    @app.delete("/entries/<entry_id>")
    def delete_entry(entry_id: str):
        ledger.delete_entry(entry_id)
        return _success({}, 204)

    @app.get("/recurring")
    def list_recurring():
        return _success({"items": [item.to_dict() for item in ledger.recurring_expenses]})

    @app.post("/recurring")
    def create_recurring():
        recurring = ledger.add_recurring(_json_body())
        return _success(recurring.to_dict(), 201)

    @app.delete("/recurring/<recurring_id>")
    def delete_recurring(recurring_id: str):
        ledger.delete_recurring(recurring_id)
        return _success({}, 204)

    @app.get("/years/<int:fiscal_year>/summary")
    def year_summary(fiscal_year: int):
        payload = ledger.year_summary(fiscal_year).to_dict()
        for label, month in zip(MONTH_LABELS, payload["perMonth"]):
            month["label"] = label
        return _success(payload)

    @app.get("/years/<int:fiscal_year>/months/<int:month>")
    def month_detail(fiscal_year: int, month: int):
        _check_month(month)
        effective = ledger.entries_for_month(fiscal_year, month)
        incomes, expenses = split_by_type(effective)
        summary = summarize_month(effective, calendar_year_of(fiscal_year, month), month)
        return _success({
            "fiscalYear": fiscal_year,
            "label": MONTH_LABELS[month_index(month)],
            **summary.to_dict(),
            "incomes": [entry.to_dict() for entry in incomes],
            "expenses": [entry.to_dict() for entry in expenses],
        })

    return app
