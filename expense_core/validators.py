"""Validation helpers for the expense form submission path."""

from __future__ import annotations

import dataclasses
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Dict, Mapping, Optional

from .exceptions import ValidationError
from .models import Category, Expense, parse_date

MAX_AMOUNT = Decimal("999999")
MIN_DESCRIPTION_LENGTH = 3

AMOUNT_MESSAGE = "Please enter a valid amount (0.01 - 999,999)"

EDITABLE_FIELDS = ("amount", "category", "description", "date")


def quantize_cents(amount: Decimal) -> Decimal:
    """Round the amount to two decimal places using HALF_UP rounding."""
    return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def parse_amount(raw: object) -> Decimal:
    """Convert raw input to a Decimal within (0, 999999] with two fraction digits."""
    if raw is None or isinstance(raw, bool) or (isinstance(raw, str) and not raw.strip()):
        raise ValidationError(AMOUNT_MESSAGE, {"amount": AMOUNT_MESSAGE})
    try:
        amount = Decimal(str(raw).strip())
    except (InvalidOperation, TypeError) as exc:
        raise ValidationError(AMOUNT_MESSAGE, {"amount": AMOUNT_MESSAGE}) from exc

    if not amount.is_finite() or amount <= 0 or amount > MAX_AMOUNT:
        raise ValidationError(AMOUNT_MESSAGE, {"amount": AMOUNT_MESSAGE})
    return quantize_cents(amount)


def validate_description(value: object) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Description is required", {"description": "Description is required"})
    trimmed = value.strip()
    if len(trimmed) < MIN_DESCRIPTION_LENGTH:
        message = f"Description must be at least {MIN_DESCRIPTION_LENGTH} characters"
        raise ValidationError(message, {"description": message})
    return trimmed


def validate_category(value: object) -> Category:
    if isinstance(value, Category):
        return value
    try:
        return Category(str(value).strip())
    except ValueError as exc:
        message = f"Category must be one of: {', '.join(c.value for c in Category)}"
        raise ValidationError(message, {"category": message}) from exc


def validate_date(value: object, field: str = "date") -> date:
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Date is required", {field: "Date is required"})
    try:
        return parse_date(value)
    except ValueError as exc:
        message = "Date must be in YYYY-MM-DD format"
        raise ValidationError(message, {field: message}) from exc


_FIELD_VALIDATORS = {
    "amount": parse_amount,
    "category": validate_category,
    "description": validate_description,
    "date": validate_date,
}


def validate_fields(payload: Mapping[str, object], *, partial: bool = False) -> Dict[str, object]:
    """Validate form fields, collecting every field-level error before raising.

    With ``partial`` only the editable fields present in ``payload`` are
    checked and returned; otherwise all of them are required.
    """
    cleaned: Dict[str, object] = {}
    errors: Dict[str, str] = {}
    for field in EDITABLE_FIELDS:
        if partial and field not in payload:
            continue
        try:
            cleaned[field] = _FIELD_VALIDATORS[field](payload.get(field))
        except ValidationError as exc:
            errors.update(exc.errors)

    if errors:
        raise ValidationError("Expense data is invalid", errors)
    return cleaned


def ensure_updated_after(created_at: datetime, updated_at: datetime) -> None:
    if updated_at < created_at:
        message = "updatedAt must not be earlier than createdAt"
        raise ValidationError(message, {"updatedAt": message})


def validate_expense(expense: Expense) -> Expense:
    """Check a complete record and return it with normalised field values."""
    cleaned = validate_fields({field: getattr(expense, field) for field in EDITABLE_FIELDS})
    ensure_updated_after(expense.created_at, expense.updated_at)
    return dataclasses.replace(expense, **cleaned)


def optional_date(value: Optional[str], field: str) -> Optional[date]:
    """Parse an optional boundary date; empty strings mean absent."""
    if value is None or not str(value).strip():
        return None
    return validate_date(value, field)
