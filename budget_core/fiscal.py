"""Fiscal calendar helpers.

The fiscal year starts in April and ends in March of the following calendar
year; it is identified by the calendar year in which it starts. Months are
addressed either by calendar month (1-12) or by fiscal index (0 = April,
11 = March).
"""

from __future__ import annotations

from datetime import date
from typing import Optional, Tuple

__all__ = [
    "FISCAL_YEAR_START_MONTH",
    "MONTH_LABELS",
    "fiscal_year_of",
    "month_index",
    "month_from_index",
    "calendar_year_of",
    "previous_month",
    "next_month",
    "default_entry_date",
    "current_fiscal_period",
]

FISCAL_YEAR_START_MONTH = 4

MONTH_LABELS: Tuple[str, ...] = (
    "4月", "5月", "6月", "7月", "8月", "9月",
    "10月", "11月", "12月", "1月", "2月", "3月",
)


def _check_month(month: int) -> int:
    if not 1 <= month <= 12:
        raise ValueError(f"month must be between 1 and 12, got {month}")
    return month


def fiscal_year_of(value: date) -> int:
    """Return the fiscal year a calendar date belongs to."""
    if value.month >= FISCAL_YEAR_START_MONTH:
        return value.year
    return value.year - 1


def month_index(month: int) -> int:
    """Map a calendar month to its position within the fiscal year."""
    _check_month(month)
    return month - 4 if month >= 4 else month + 8


def month_from_index(index: int) -> int:
    """Inverse of :func:`month_index`."""
    if not 0 <= index <= 11:
        raise ValueError(f"fiscal month index must be between 0 and 11, got {index}")
    return index + 4 if index < 9 else index - 8


def calendar_year_of(fiscal_year: int, month: int) -> int:
    """Calendar year in which ``month`` of ``fiscal_year`` falls."""
    return fiscal_year if month_index(month) < 9 else fiscal_year + 1


def previous_month(month: int) -> int:
    # Wraps within the fiscal year: April goes back to March.
    return month_from_index((month_index(month) - 1) % 12)


def next_month(month: int) -> int:
    return month_from_index((month_index(month) + 1) % 12)


def default_entry_date(fiscal_year: int, month: int) -> date:
    """First day of the month, used to prefill a new entry."""
    return date(calendar_year_of(fiscal_year, month), month, 1)


def current_fiscal_period(today: Optional[date] = None) -> Tuple[int, int]:
    """Return ``(fiscal_year, calendar_month)`` for ``today``."""
    today = today or date.today()
    return fiscal_year_of(today), today.month
