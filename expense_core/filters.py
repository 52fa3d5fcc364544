"""Search, category and date-range filtering for the expense list view."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Mapping, Optional, Union

from .models import Category, Expense
from .validators import optional_date, validate_category


@dataclass(frozen=True)
class DateRange:
    """Inclusive date bounds; either end may be open."""

    start: Optional[date] = None
    end: Optional[date] = None

    def contains(self, value: date) -> bool:
        if self.start and value < self.start:
            return False
        if self.end and value > self.end:
            return False
        return True


@dataclass(frozen=True)
class ExpenseFilters:
    search_term: Optional[str] = None
    category: Optional[Union[Category, str]] = None
    date_range: Optional[DateRange] = None

    @classmethod
    def from_params(cls, params: Mapping[str, Optional[str]]) -> "ExpenseFilters":
        """Build filters from request parameters; empty values are treated as absent.

        Raises ValidationError for an unknown category or a malformed date.
        """
        search = params.get("search") or None
        raw_category = (params.get("category") or "").strip()
        category = validate_category(raw_category) if raw_category else None
        start = optional_date(params.get("from"), "from")
        end = optional_date(params.get("to"), "to")
        date_range = DateRange(start, end) if start or end else None
        return cls(search_term=search, category=category, date_range=date_range)


def filter_expenses(
    expenses: Iterable[Expense], filters: Optional[ExpenseFilters] = None
) -> List[Expense]:
    """Return expenses matching every supplied filter, most recent date first."""
    filters = filters or ExpenseFilters()
    # Normalise once rather than per record.
    needle = filters.search_term.lower() if filters.search_term else None
    category = filters.category or None
    date_range = filters.date_range

    def matches(expense: Expense) -> bool:
        if needle and needle not in expense.description.lower():
            return False
        if category and expense.category != category:
            return False
        if date_range and not date_range.contains(expense.date):
            return False
        return True

    # sorted() is stable with reverse=True, so equal dates keep collection order.
    return sorted(filter(matches, expenses), key=lambda expense: expense.date, reverse=True)


def filtered_total(expenses: Iterable[Expense]) -> Decimal:
    return sum((expense.amount for expense in expenses), Decimal("0.00"))
