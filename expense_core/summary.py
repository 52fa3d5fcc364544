"""Summary statistics and chart datasets derived from the expense collection."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from .models import Category, Expense
from .validators import quantize_cents

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class CategoryTotal:
    category: Category
    amount: Decimal

    def to_dict(self) -> Dict[str, object]:
        return {"category": self.category.value, "amount": f"{self.amount:.2f}"}


@dataclass(frozen=True)
class Summary:
    total_expenses: Decimal
    monthly_total: Decimal
    top_category: Optional[CategoryTotal]
    category_totals: Dict[Category, Decimal]
    transaction_count: int = 0

    def to_dict(self) -> Dict[str, object]:
        return {
            "totalExpenses": f"{self.total_expenses:.2f}",
            "monthlyTotal": f"{self.monthly_total:.2f}",
            "topCategory": self.top_category.to_dict() if self.top_category else None,
            "categoryTotals": {
                category.value: f"{amount:.2f}" for category, amount in self.category_totals.items()
            },
            "transactionCount": self.transaction_count,
        }


@dataclass(frozen=True)
class CategorySlice:
    category: Category
    amount: Decimal
    color: str

    def to_dict(self) -> Dict[str, object]:
        return {
            "category": self.category.value,
            "amount": f"{self.amount:.2f}",
            "color": self.color,
        }


@dataclass(frozen=True)
class MonthlyTotal:
    year: int
    month: int
    amount: Decimal

    @property
    def label(self) -> str:
        return date(self.year, self.month, 1).strftime("%b %Y")

    def to_dict(self) -> Dict[str, object]:
        return {"month": self.label, "amount": f"{self.amount:.2f}"}


def category_totals(expenses: Iterable[Expense]) -> Dict[Category, Decimal]:
    """Sum amounts per category, keyed in order of first occurrence."""
    totals: Dict[Category, Decimal] = {}
    for expense in expenses:
        totals[expense.category] = totals.get(expense.category, ZERO) + expense.amount
    return totals


def summarize(expenses: Iterable[Expense], today: Optional[date] = None) -> Summary:
    """Compute dashboard totals for ``expenses`` relative to ``today``."""
    today = today or date.today()
    records = list(expenses)

    total = sum((expense.amount for expense in records), ZERO)
    monthly = sum(
        (
            expense.amount
            for expense in records
            if expense.date.month == today.month and expense.date.year == today.year
        ),
        ZERO,
    )
    totals = category_totals(records)

    top: Optional[CategoryTotal] = None
    best = ZERO
    for category, amount in totals.items():
        # Strict comparison: the earliest category wins a tie.
        if amount > best:
            top = CategoryTotal(category, amount)
            best = amount

    return Summary(
        total_expenses=total,
        monthly_total=monthly,
        top_category=top,
        category_totals=totals,
        transaction_count=len(records),
    )


def average_per_day(summary: Summary, today: Optional[date] = None) -> Decimal:
    """Average spend per elapsed day of the current month."""
    if summary.transaction_count == 0:
        return ZERO
    today = today or date.today()
    return quantize_cents(summary.monthly_total / today.day)


def category_breakdown(expenses: Iterable[Expense]) -> List[CategorySlice]:
    return [
        CategorySlice(category, amount, category.color)
        for category, amount in category_totals(expenses).items()
    ]


def monthly_totals(expenses: Iterable[Expense], months: int = 6) -> List[MonthlyTotal]:
    """Per-month totals in chronological order, limited to the latest ``months``."""
    if months <= 0:
        return []
    buckets: Dict[Tuple[int, int], Decimal] = {}
    for expense in expenses:
        key = (expense.date.year, expense.date.month)
        buckets[key] = buckets.get(key, ZERO) + expense.amount
    ordered = sorted(buckets.items())
    return [MonthlyTotal(year, month, amount) for (year, month), amount in ordered[-months:]]
