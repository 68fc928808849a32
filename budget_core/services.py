"""Framework-agnostic business services for the budget tracker."""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Dict, List, Optional, Tuple
from uuid import uuid4

from . import aggregator
from .exceptions import PersistenceError, RecordNotFoundError
from .models import EffectiveEntry, Entry, RecurringExpense, YearSummary
from .storage import DEFAULT_RESOURCE, JSONStorage, LedgerDocument
from .validators import (
    NAME_MAX_LENGTH,
    parse_amount,
    validate_category,
    validate_date,
    validate_entry_type,
    validate_month,
    validate_optional_str,
    validate_recurring_range,
    validate_required_str,
    validate_year,
)

logger = logging.getLogger(__name__)

SUMMARY_CACHE_SIZE = 8


class LedgerService:
    """Owns the entries and recurring expenses of one ledger document.

    Every mutation rewrites the whole document; the last write wins.
    """

    def __init__(self, storage: JSONStorage, resource: str = DEFAULT_RESOURCE) -> None:
        self._storage = storage
        self._resource = resource
        self._entries: Dict[str, Entry] = {}
        self._recurring: Dict[str, RecurringExpense] = {}
        self._summary_cache: OrderedDict[int, YearSummary] = OrderedDict()
        self.load()  # Hydrate in-memory state from persistence on construction.

    # Entries --------------------------------------------------------------
    @property
    def entries(self) -> Tuple[Entry, ...]:
        return tuple(self._entries.values())

    def add_entry(self, payload: Dict[str, object]) -> Entry:
        entry = Entry(**self._validate_entry(payload))
        self._commit(entries={**self._entries, entry.id: entry})
        logger.info("Added %s entry %s", entry.type.value, entry.id)
        return entry

    def update_entry(self, entry_id: str, changes: Dict[str, object]) -> Entry:
        existing = self._get_entry_or_raise(entry_id)
        # Merge existing serialised data with incoming changes to support partial updates.
        merged = {**existing.to_dict(), **changes}
        if "category" not in changes and str(merged.get("type")).strip().lower() != existing.type.value:
            # A new type starts from its own default category.
            merged.pop("category", None)
        updated = Entry(**self._validate_entry(merged, current=existing))
        self._commit(entries={**self._entries, entry_id: updated})
        logger.info("Updated entry %s", entry_id)
        return updated

    def delete_entry(self, entry_id: str) -> None:
        self._get_entry_or_raise(entry_id)
        self._commit(entries={key: value for key, value in self._entries.items() if key != entry_id})
        logger.info("Deleted entry %s", entry_id)

    def get_entry(self, entry_id: str) -> Entry:
        return self._get_entry_or_raise(entry_id)

    # Recurring expenses ---------------------------------------------------
    @property
    def recurring_expenses(self) -> Tuple[RecurringExpense, ...]:
        return tuple(self._recurring.values())

    def add_recurring(self, payload: Dict[str, object]) -> RecurringExpense:
        recurring = RecurringExpense(**self._validate_recurring(payload))
        self._commit(recurring={**self._recurring, recurring.id: recurring})
        logger.info("Added recurring expense %s", recurring.id)
        return recurring

    def delete_recurring(self, recurring_id: str) -> None:
        self._get_recurring_or_raise(recurring_id)
        self._commit(
            recurring={key: value for key, value in self._recurring.items() if key != recurring_id}
        )
        logger.info("Deleted recurring expense %s", recurring_id)

    def get_recurring(self, recurring_id: str) -> RecurringExpense:
        return self._get_recurring_or_raise(recurring_id)

    # Aggregated views -----------------------------------------------------
    def entries_for_month(self, fiscal_year: int, month: int) -> List[EffectiveEntry]:
        return aggregator.entries_for_month(
            self._entries.values(), self._recurring.values(), fiscal_year, month
        )

    def year_summary(self, fiscal_year: int) -> YearSummary:
        """Return the summary for ``fiscal_year``, computed once per state.

        Only the most recently used fiscal years are kept.
        """
        summary = self._summary_cache.get(fiscal_year)
        if summary is None:
            summary = aggregator.year_summary(
                self._entries.values(), self._recurring.values(), fiscal_year
            )
            self._summary_cache[fiscal_year] = summary
            if len(self._summary_cache) > SUMMARY_CACHE_SIZE:
                self._summary_cache.popitem(last=False)
        else:
            self._summary_cache.move_to_end(fiscal_year)
        return summary

    # Persistence ----------------------------------------------------------
    def snapshot(self) -> LedgerDocument:
        """Return the serialisable document, as persisted."""
        return _document(self._entries, self._recurring)

    def load(self) -> None:
        """Load the ledger document from persistence."""
        document = self._storage.load_document(self._resource)
        try:
            entries = [Entry.from_dict(raw) for raw in document["entries"]]
            recurring = [RecurringExpense.from_dict(raw) for raw in document["recurringExpenses"]]
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.warning("Discarding unreadable ledger data in %s: %s", self._resource, exc)
            entries, recurring = [], []
        self._entries = {entry.id: entry for entry in entries}
        self._recurring = {item.id: item for item in recurring}
        self._summary_cache.clear()

    # Internal helpers -----------------------------------------------------
    def _commit(
        self,
        *,
        entries: Optional[Dict[str, Entry]] = None,
        recurring: Optional[Dict[str, RecurringExpense]] = None,
    ) -> None:
        """Persist the new state, then make it current; a failed write changes nothing."""
        entries = self._entries if entries is None else entries
        recurring = self._recurring if recurring is None else recurring
        try:
            self._storage.save_document(_document(entries, recurring), self._resource)
        except PersistenceError:
            raise
        except Exception as exc:
            raise PersistenceError("Unexpected error while saving the ledger") from exc
        self._entries = entries
        self._recurring = recurring
        self._summary_cache.clear()

    def _get_entry_or_raise(self, entry_id: str) -> Entry:
        try:
            return self._entries[entry_id]
        except KeyError as exc:
            raise RecordNotFoundError(f"Entry {entry_id} not found") from exc

    def _get_recurring_or_raise(self, recurring_id: str) -> RecurringExpense:
        try:
            return self._recurring[recurring_id]
        except KeyError as exc:
            raise RecordNotFoundError(f"Recurring expense {recurring_id} not found") from exc

    def _validate_entry(
        self, payload: Dict[str, object], *, current: Optional[Entry] = None
    ) -> Dict[str, object]:
        entry_type = validate_entry_type(payload.get("type"))
        return {
            "id": current.id if current else str(uuid4()),
            "type": entry_type,
            "category": validate_category(entry_type, payload.get("category")),
            "name": validate_optional_str(payload.get("name"), "name", NAME_MAX_LENGTH),
            "amount": parse_amount(payload.get("amount"), "amount"),
            "date": validate_date(payload.get("date"), "date"),
        }

    def _validate_recurring(self, payload: Dict[str, object]) -> Dict[str, object]:
        start_year = validate_year(payload.get("startYear"), "startYear")
        start_month = validate_month(payload.get("startMonth"), "startMonth")
        end_year, end_month = validate_recurring_range(
            start_year, start_month, payload.get("endYear"), payload.get("endMonth")
        )
        return {
            "id": str(uuid4()),
            "name": validate_required_str(payload.get("name"), "name", NAME_MAX_LENGTH),
            "amount": parse_amount(payload.get("amount"), "amount"),
            "start_year": start_year,
            "start_month": start_month,
            "end_year": end_year,
            "end_month": end_month,
        }


def _document(
    entries: Dict[str, Entry], recurring: Dict[str, RecurringExpense]
) -> LedgerDocument:
    return {
        "entries": [entry.to_dict() for entry in entries.values()],
        "recurringExpenses": [item.to_dict() for item in recurring.values()],
    }
