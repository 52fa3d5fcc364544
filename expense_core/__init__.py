"""Core business logic package for the expense tracker."""

from .exceptions import (
    PersistenceError,
    RecordNotFoundError,
    StorageUnavailableError,
    ValidationError,
)
from .export import CsvExport, export_csv, export_filename, export_rows, to_csv
from .filters import DateRange, ExpenseFilters, filter_expenses, filtered_total
from .models import CATEGORY_STYLES, Category, CategoryStyle, Expense
from .storage import JSONFileStorage, KeyValueStorage, MemoryStorage
from .store import STORAGE_KEY, ExpenseStore, StoreResult, StoreStatus
from .summary import (
    CategorySlice,
    CategoryTotal,
    MonthlyTotal,
    Summary,
    average_per_day,
    category_breakdown,
    monthly_totals,
    summarize,
)

__all__ = [
    "CATEGORY_STYLES",
    "Category",
    "CategorySlice",
    "CategoryStyle",
    "CategoryTotal",
    "CsvExport",
    "DateRange",
    "Expense",
    "ExpenseFilters",
    "ExpenseStore",
    "JSONFileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "MonthlyTotal",
    "PersistenceError",
    "RecordNotFoundError",
    "STORAGE_KEY",
    "StorageUnavailableError",
    "StoreResult",
    "StoreStatus",
    "Summary",
    "ValidationError",
    "average_per_day",
    "category_breakdown",
    "export_csv",
    "export_filename",
    "export_rows",
    "filter_expenses",
    "filtered_total",
    "monthly_totals",
    "summarize",
    "to_csv",
]
