"""Core business logic package for the fiscal-year budget tracker."""

from .aggregator import entries_for_month, year_summary
from .categories import EntryType, ExpenseCategory, IncomeCategory
from .exceptions import PersistenceError, RecordNotFoundError, ValidationError
from .fiscal import MONTH_LABELS, fiscal_year_of, month_from_index, month_index
from .models import EffectiveEntry, Entry, MonthSummary, RecurringExpense, YearSummary
from .services import LedgerService
from .storage import JSONStorage

__all__ = [
    "EntryType",
    "IncomeCategory",
    "ExpenseCategory",
    "Entry",
    "RecurringExpense",
    "EffectiveEntry",
    "MonthSummary",
    "YearSummary",
    "MONTH_LABELS",
    "fiscal_year_of",
    "month_index",
    "month_from_index",
    "entries_for_month",
    "year_summary",
    "LedgerService",
    "JSONStorage",
    "PersistenceError",
    "ValidationError",
    "RecordNotFoundError",
]
