"""Fixed category sets for income and expense entries."""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Type, Union

from .exceptions import ValidationError

__all__ = [
    "EntryType",
    "IncomeCategory",
    "ExpenseCategory",
    "AnyCategory",
    "categories_for",
    "default_category",
    "resolve_category",
]


class EntryType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class _CategoryMixin:
    """Shared accessors; members are ``(id, display_name, color)`` tuples."""

    @property
    def id(self) -> str:
        return self.value[0]

    @property
    def display_name(self) -> str:
        return self.value[1]

    @property
    def color(self) -> str:
        return self.value[2]

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "name": self.display_name, "color": self.color}


class IncomeCategory(_CategoryMixin, Enum):
    MAIN = ("main", "本業", "#22c55e")
    SIDE = ("side", "副業", "#3b82f6")
    EXTRA = ("extra", "臨時", "#f59e0b")
    ADJUST = ("adjust", "調整金", "#6b7280")


class ExpenseCategory(_CategoryMixin, Enum):
    CREDIT = ("credit", "クレジット系", "#ef4444")
    FIXED = ("fixed", "固定費", "#8b5cf6")
    ADJUST = ("adjust", "調整金", "#6b7280")


AnyCategory = Union[IncomeCategory, ExpenseCategory]

_CATEGORY_SETS: Dict[EntryType, Type[Enum]] = {
    EntryType.INCOME: IncomeCategory,
    EntryType.EXPENSE: ExpenseCategory,
}


def categories_for(entry_type: EntryType) -> List[AnyCategory]:
    return list(_CATEGORY_SETS[EntryType(entry_type)])


def default_category(entry_type: EntryType) -> AnyCategory:
    """Category preselected for a new entry of the given type."""
    if EntryType(entry_type) is EntryType.INCOME:
        return IncomeCategory.MAIN
    return ExpenseCategory.CREDIT


def resolve_category(entry_type: EntryType, category_id: str) -> AnyCategory:
    """Look up a category by id within the set belonging to ``entry_type``."""
    for category in categories_for(entry_type):
        if category.id == category_id:
            return category
    allowed = ", ".join(category.id for category in categories_for(entry_type))
    raise ValidationError(
        f"category must be one of: {allowed} for {EntryType(entry_type).value} entries"
    )
