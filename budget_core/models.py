"""Data models for the budget tracker domain."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from .categories import AnyCategory, EntryType, ExpenseCategory, resolve_category

__all__ = [
    "Entry",
    "RecurringExpense",
    "EffectiveEntry",
    "MonthSummary",
    "YearSummary",
    "empty_document",
    "format_date",
    "parse_date",
    "parse_stored_amount",
]


def format_date(value: date) -> str:
    """Return the ``YYYY-MM-DD`` form used in the persisted document."""
    return value.isoformat()


def parse_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` string; invalid input raises ``ValueError``."""
    return date.fromisoformat(value.strip())


def parse_stored_amount(value: Any) -> int:
    """Read a persisted amount; anything but whole yen raises ``ValueError``."""
    if isinstance(value, bool):
        raise ValueError(f"amount must be a number, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        return int(value.strip())
    raise ValueError(f"amount must be a whole number of yen, got {value!r}")


def empty_document() -> Dict[str, List[Dict[str, Any]]]:
    return {"entries": [], "recurringExpenses": []}


@dataclass(frozen=True)
class Entry:
    id: str
    type: EntryType
    category: AnyCategory
    amount: int
    date: date
    name: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the entry to JSON-friendly natives."""
        return {
            "id": self.id,
            "type": self.type.value,
            "category": self.category.id,
            "name": self.name,
            "amount": self.amount,
            "date": format_date(self.date),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Entry":
        """Hydrate an Entry from JSON-native data."""
        entry_type = EntryType(data["type"])
        return cls(
            id=str(data["id"]),
            type=entry_type,
            category=resolve_category(entry_type, data["category"]),
            amount=parse_stored_amount(data["amount"]),
            date=parse_date(data["date"]),
            name=data.get("name") or "",
        )


@dataclass(frozen=True)
class RecurringExpense:
    id: str
    name: str
    amount: int
    start_year: int
    start_month: int
    end_year: Optional[int] = None
    end_month: Optional[int] = None

    @property
    def is_open_ended(self) -> bool:
        return self.end_year is None

    def to_dict(self) -> Dict[str, Any]:
        # Keys follow the camelCase layout of the stored document.
        return {
            "id": self.id,
            "name": self.name,
            "amount": self.amount,
            "startYear": self.start_year,
            "startMonth": self.start_month,
            "endYear": self.end_year,
            "endMonth": self.end_month,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RecurringExpense":
        end_year = data.get("endYear")
        end_month = data.get("endMonth")
        return cls(
            id=str(data["id"]),
            name=data["name"],
            amount=parse_stored_amount(data["amount"]),
            start_year=int(data["startYear"]),
            start_month=int(data["startMonth"]),
            end_year=int(end_year) if end_year is not None else None,
            end_month=int(end_month) if end_month is not None else None,
        )


@dataclass(frozen=True)
class EffectiveEntry:
    """An entry as it appears in a month: stored, or synthesised from a recurring expense."""

    id: str
    type: EntryType
    category: AnyCategory
    amount: int
    name: str = ""
    date: Optional[date] = None
    is_recurring: bool = False

    @classmethod
    def from_entry(cls, entry: Entry) -> "EffectiveEntry":
        return cls(
            id=entry.id,
            type=entry.type,
            category=entry.category,
            amount=entry.amount,
            name=entry.name,
            date=entry.date,
        )

    @classmethod
    def from_recurring(cls, recurring: RecurringExpense) -> "EffectiveEntry":
        return cls(
            id=recurring.id,
            type=EntryType.EXPENSE,
            category=ExpenseCategory.FIXED,
            amount=recurring.amount,
            name=recurring.name,
            is_recurring=True,
        )

    @property
    def label(self) -> str:
        """Name shown in lists, falling back to the category name."""
        return self.name or self.category.display_name

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "category": self.category.id,
            "name": self.name,
            "amount": self.amount,
            "date": format_date(self.date) if self.date else None,
            "isRecurring": self.is_recurring,
        }


@dataclass(frozen=True)
class MonthSummary:
    calendar_year: int
    calendar_month: int
    income: int = 0
    expense: int = 0

    @property
    def balance(self) -> int:
        return self.income - self.expense

    def to_dict(self) -> Dict[str, int]:
        return {
            "calendarYear": self.calendar_year,
            "calendarMonth": self.calendar_month,
            "income": self.income,
            "expense": self.expense,
            "balance": self.balance,
        }


@dataclass(frozen=True)
class YearSummary:
    fiscal_year: int
    per_month: List[MonthSummary] = field(default_factory=list)

    @property
    def total_income(self) -> int:
        return sum(month.income for month in self.per_month)

    @property
    def total_expense(self) -> int:
        return sum(month.expense for month in self.per_month)

    @property
    def balance(self) -> int:
        return self.total_income - self.total_expense

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fiscalYear": self.fiscal_year,
            "totalIncome": self.total_income,
            "totalExpense": self.total_expense,
            "balance": self.balance,
            "perMonth": [month.to_dict() for month in self.per_month],
        }
