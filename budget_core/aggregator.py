"""Monthly and yearly aggregation over entries and recurring expenses.

Everything here is a pure function of its inputs. Missing collections are
treated as empty; dates and amounts are trusted as given.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from .categories import EntryType
from .fiscal import calendar_year_of, fiscal_year_of, month_from_index
from .models import EffectiveEntry, Entry, MonthSummary, RecurringExpense, YearSummary

__all__ = [
    "OPEN_END_HORIZON_YEARS",
    "is_recurring_active",
    "entries_for_month",
    "split_by_type",
    "summarize_month",
    "year_summary",
]

# An open-ended recurring expense is checked against an end this many years
# after the queried fiscal year.
OPEN_END_HORIZON_YEARS = 10


def _month_ordinal(year: int, month: int) -> int:
    return year * 12 + month


def is_recurring_active(recurring: RecurringExpense, fiscal_year: int, month: int) -> bool:
    """Return True when ``recurring`` applies to ``month`` of ``fiscal_year``.

    The comparison uses the fiscal year together with the calendar month, and
    both range bounds are inclusive. An inverted range never matches.
    """
    end_year = recurring.end_year if recurring.end_year is not None else fiscal_year + OPEN_END_HORIZON_YEARS
    end_month = recurring.end_month if recurring.end_month is not None else 12

    current = _month_ordinal(fiscal_year, month)
    start = _month_ordinal(recurring.start_year, recurring.start_month)
    end = _month_ordinal(end_year, end_month)
    return start <= current <= end


def entries_for_month(
    entries: Optional[Iterable[Entry]],
    recurring: Optional[Iterable[RecurringExpense]],
    fiscal_year: int,
    month: int,
) -> List[EffectiveEntry]:
    """Return the effective entry set for ``month`` of ``fiscal_year``.

    Stored entries come first in their original order, followed by one
    synthetic fixed-cost expense per active recurring expense.
    """
    stored = [
        EffectiveEntry.from_entry(entry)
        for entry in entries or ()
        if fiscal_year_of(entry.date) == fiscal_year and entry.date.month == month
    ]
    synthetic = [
        EffectiveEntry.from_recurring(item)
        for item in recurring or ()
        if is_recurring_active(item, fiscal_year, month)
    ]
    return stored + synthetic


def split_by_type(
    effective_entries: Iterable[EffectiveEntry],
) -> Tuple[List[EffectiveEntry], List[EffectiveEntry]]:
    """Partition into ``(incomes, expenses)`` keeping order."""
    incomes: List[EffectiveEntry] = []
    expenses: List[EffectiveEntry] = []
    for entry in effective_entries:
        if entry.type is EntryType.INCOME:
            incomes.append(entry)
        else:
            expenses.append(entry)
    return incomes, expenses


def summarize_month(
    effective_entries: Iterable[EffectiveEntry], calendar_year: int, calendar_month: int
) -> MonthSummary:
    incomes, expenses = split_by_type(effective_entries)
    return MonthSummary(
        calendar_year=calendar_year,
        calendar_month=calendar_month,
        income=sum(entry.amount for entry in incomes),
        expense=sum(entry.amount for entry in expenses),
    )


def year_summary(
    entries: Optional[Iterable[Entry]],
    recurring: Optional[Iterable[RecurringExpense]],
    fiscal_year: int,
) -> YearSummary:
    """Summarise all twelve months of ``fiscal_year``, April through March."""
    # Materialise once; the inputs are walked twelve times.
    entries = list(entries or ())
    recurring = list(recurring or ())

    per_month = []
    for index in range(12):
        month = month_from_index(index)
        effective = entries_for_month(entries, recurring, fiscal_year, month)
        per_month.append(summarize_month(effective, calendar_year_of(fiscal_year, month), month))
    return YearSummary(fiscal_year=fiscal_year, per_month=per_month)
