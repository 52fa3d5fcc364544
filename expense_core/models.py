"""Data models for the expense tracker domain."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict

__all__ = [
    "Category",
    "CategoryStyle",
    "CATEGORY_STYLES",
    "Expense",
    "isoformat_utc",
    "parse_datetime",
    "parse_date",
]


def isoformat_utc(dt: datetime) -> str:
    """Return an ISO 8601 string with trailing Z for UTC-aware datetimes."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)
    iso = dt.isoformat(timespec="milliseconds")
    return iso.replace("+00:00", "Z")


def parse_datetime(value: str) -> datetime:
    """Parse ISO 8601 datetime strings with optional trailing Z into UTC-aware datetime."""
    if not isinstance(value, str):
        raise TypeError(f"Expected an ISO 8601 string, got {type(value).__name__}")
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        # Naive timestamps are read as UTC.
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` calendar date."""
    return date.fromisoformat(value.strip())


class Category(str, Enum):
    FOOD = "Food"
    TRANSPORTATION = "Transportation"
    ENTERTAINMENT = "Entertainment"
    SHOPPING = "Shopping"
    BILLS = "Bills"
    OTHER = "Other"

    @property
    def style(self) -> "CategoryStyle":
        return CATEGORY_STYLES[self]

    @property
    def color(self) -> str:
        return CATEGORY_STYLES[self].color


@dataclass(frozen=True)
class CategoryStyle:
    color: str
    badge: str

    def to_dict(self) -> Dict[str, str]:
        return {"color": self.color, "badge": self.badge}


CATEGORY_STYLES: Dict[Category, CategoryStyle] = {
    Category.FOOD: CategoryStyle(color="#10B981", badge="green"),
    Category.TRANSPORTATION: CategoryStyle(color="#3B82F6", badge="blue"),
    Category.ENTERTAINMENT: CategoryStyle(color="#8B5CF6", badge="purple"),
    Category.SHOPPING: CategoryStyle(color="#EC4899", badge="pink"),
    Category.BILLS: CategoryStyle(color="#EF4444", badge="red"),
    Category.OTHER: CategoryStyle(color="#6B7280", badge="gray"),
}

_unstyled = [category.value for category in Category if category not in CATEGORY_STYLES]
if _unstyled:
    raise RuntimeError(f"Missing display style for categories: {', '.join(_unstyled)}")


@dataclass(frozen=True)
class Expense:
    id: str
    amount: Decimal
    category: Category
    description: str
    date: date
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the expense to the stored JSON shape."""
        return {
            "id": self.id,
            "amount": f"{self.amount:.2f}",
            "category": self.category.value,
            "description": self.description,
            "date": self.date.isoformat(),
            "createdAt": isoformat_utc(self.created_at),
            "updatedAt": isoformat_utc(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Expense":
        """Hydrate an Expense from stored JSON data; unknown keys are ignored."""
        return cls(
            id=str(data["id"]),
            amount=Decimal(str(data["amount"])),
            category=Category(data["category"]),
            description=str(data["description"]).strip(),
            date=parse_date(data["date"]),
            created_at=parse_datetime(data["createdAt"]),
            updated_at=parse_datetime(data["updatedAt"]),
        )
