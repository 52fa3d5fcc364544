"""Flask application exposing the expense tracker core to the browser UI."""

from __future__ import annotations

import os
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from flask import Flask, Response, jsonify, request
from flask_cors import CORS

from expense_core.exceptions import RecordNotFoundError, StorageUnavailableError, ValidationError
from expense_core.export import export_csv, export_filename, export_rows
from expense_core.filters import ExpenseFilters, filter_expenses, filtered_total
from expense_core.models import Category
from expense_core.storage import JSONFileStorage, KeyValueStorage, MemoryStorage
from expense_core.store import ExpenseStore, StoreResult, StoreStatus
from expense_core.summary import average_per_day, category_breakdown, monthly_totals, summarize


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _configure_cors(app: Flask) -> None:
    env_name = os.getenv("EXPENSE_TRACKER_ENV", "prod").lower()
    if env_name in {"dev", "development"}:
        CORS(app, resources={r"/*": {"origins": "*"}}, supports_credentials=True)
        return
    allowed_origins = os.getenv("EXPENSE_TRACKER_ALLOWED_ORIGINS")
    if allowed_origins:
        origins = [origin.strip() for origin in allowed_origins.split(",") if origin.strip()]
        CORS(app, resources={r"/*": {"origins": origins}}, supports_credentials=True)
    else:
        CORS(app)


def _storage_quota(app: Flask) -> Optional[int]:
    raw = os.getenv("EXPENSE_TRACKER_STORAGE_QUOTA")
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        app.logger.warning("Ignoring invalid EXPENSE_TRACKER_STORAGE_QUOTA=%r", raw)
        return None


def _default_storage(app: Flask, data_dir: Optional[Path]) -> KeyValueStorage:
    base_path = Path(data_dir or os.getenv("EXPENSE_TRACKER_DATA_DIR", "data"))
    try:
        return JSONFileStorage(base_path, quota_bytes=_storage_quota(app))
    except StorageUnavailableError as exc:
        app.logger.error("Storage unavailable, running without persistence: %s", exc)
        degraded = MemoryStorage()
        degraded.available = False
        return degraded


def create_app(
    data_dir: Optional[Path] = None,
    storage: Optional[KeyValueStorage] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> Flask:
    app = Flask(__name__)
    _configure_cors(app)

    now = clock or _utcnow
    store = ExpenseStore(storage or _default_storage(app, data_dir), clock=now)

    def _today() -> date:
        return now().astimezone().date()

    def _success(payload: Any, status: int = 200):
        if status == 204:
            return ("", status)
        return jsonify(payload), status

    def _handle_error(exc: Exception, status: int, message: str, details: Any = None):
        app.logger.error("%s: %s", message, exc)
        return jsonify({"error": message, "details": details if details is not None else str(exc)}), status

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        return _handle_error(exc, 400, "Validation error", exc.errors or str(exc))

    @app.errorhandler(RecordNotFoundError)
    def handle_not_found(exc: RecordNotFoundError):
        return _handle_error(exc, 404, "Record not found")

    def _json_body() -> Dict[str, Any]:
        if not request.is_json:
            raise ValidationError("Request content must be application/json")
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Malformed JSON body")
        return data

    def _collection(result: StoreResult) -> Dict[str, Any]:
        if not result.ok:
            app.logger.warning("Serving expenses with storage unavailable")
        return {
            "items": [expense.to_dict() for expense in result],
            "storage": result.status.value,
        }

    @app.get("/categories")
    def list_categories():
        return _success({
            "items": [
                {"name": category.value, **category.style.to_dict()} for category in Category
            ]
        })

    @app.get("/expenses")
    def list_expenses():
        filters = ExpenseFilters.from_params(request.args)
        loaded = store.load()
        matching = filter_expenses(loaded, filters)
        return _success({
            "items": [expense.to_dict() for expense in matching],
            "total": f"{filtered_total(matching):.2f}",
            "count": len(matching),
            "total_count": len(loaded),
            "storage": loaded.status.value,
        })

    @app.post("/expenses")
    def create_expense():
        result = store.create(_json_body())
        return _success(_collection(result), 201)

    @app.get("/expenses/<expense_id>")
    def get_expense(expense_id: str):
        return _success(store.get(expense_id).to_dict())

    @app.put("/expenses/<expense_id>")
    def update_expense(expense_id: str):
        result = store.update(expense_id, _json_body())
        return _success(_collection(result))

    @app.delete("/expenses/<expense_id>")
    def delete_expense(expense_id: str):
        return _success(_collection(store.delete(expense_id)))

    @app.delete("/expenses")
    def clear_expenses():
        status = store.clear()
        if status is not StoreStatus.OK:
            return _success({"storage": status.value}, 503)
        return _success({}, 204)

    @app.get("/summary")
    def summary():
        today = _today()
        loaded = store.load()
        totals = summarize(loaded, today)
        return _success({
            **totals.to_dict(),
            "averagePerDay": f"{average_per_day(totals, today):.2f}",
            "month": today.strftime("%B %Y"),
            "storage": loaded.status.value,
        })

    @app.get("/charts")
    def charts():
        loaded = store.load()
        return _success({
            "categories": [entry.to_dict() for entry in category_breakdown(loaded)],
            "monthly": [entry.to_dict() for entry in monthly_totals(loaded)],
            "storage": loaded.status.value,
        })

    @app.get("/export.csv")
    def export():
        exported = export_csv(export_rows(store.load()), export_filename(_today()))
        if exported is None:
            return _success({}, 204)
        return Response(
            exported.content,
            content_type=exported.mimetype,
            headers={"Content-Disposition": f"attachment; filename={exported.filename}"},
        )

    return app
