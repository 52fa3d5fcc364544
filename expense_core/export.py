"""CSV export of the expense collection."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .models import Expense

CSV_MIMETYPE = "text/csv;charset=utf-8"


@dataclass(frozen=True)
class CsvExport:
    filename: str
    content: str
    mimetype: str = CSV_MIMETYPE


def format_display_date(value: date) -> str:
    """Render a date as ``Jun 1, 2024``."""
    return f"{value:%b} {value.day}, {value.year}"


def export_rows(expenses: Iterable[Expense]) -> List[Dict[str, object]]:
    """Project expenses onto the columns offered for download."""
    return [
        {
            "Date": format_display_date(expense.date),
            "Amount": expense.amount,
            "Category": expense.category.value,
            "Description": expense.description,
        }
        for expense in expenses
    ]


def _format_value(value: object) -> str:
    # Strings are quoted verbatim; embedded quotes and commas are not escaped.
    if isinstance(value, str):
        return f'"{value}"'
    if value is None:
        return ""
    if isinstance(value, Decimal):
        normalized = value.normalize()
        if normalized == normalized.to_integral_value():
            return str(normalized.quantize(Decimal(1)))
        return format(normalized, "f")
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def to_csv(rows: Sequence[Mapping[str, object]]) -> Optional[str]:
    """Serialise rows with a header taken from the first row's keys."""
    if not rows:
        return None
    header = ",".join(rows[0].keys())
    lines = [header]
    lines.extend(",".join(_format_value(value) for value in row.values()) for row in rows)
    return "\n".join(lines)


def export_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"expenses-{today.isoformat()}.csv"


def export_csv(rows: Sequence[Mapping[str, object]], filename: str) -> Optional[CsvExport]:
    """Build the download payload, or None when there is nothing to export."""
    content = to_csv(rows)
    if content is None:
        return None
    return CsvExport(filename=filename, content=content)
