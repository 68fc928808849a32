import json
from datetime import date

import pytest

from budget_core.categories import EntryType, ExpenseCategory, IncomeCategory
from budget_core.exceptions import PersistenceError, RecordNotFoundError, ValidationError
from budget_core.services import SUMMARY_CACHE_SIZE, LedgerService
from budget_core.storage import DEFAULT_RESOURCE, JSONStorage


def _income(**overrides):
    payload = {"type": "income", "amount": 300000, "date": "2024-05-10", "name": "給与"}
    payload.update(overrides)
    return payload


def _rent(**overrides):
    payload = {"name": "Rent", "amount": 80000, "startYear": 2024, "startMonth": 4}
    payload.update(overrides)
    return payload


def test_add_entry_assigns_id_and_defaults(ledger: LedgerService) -> None:
    entry = ledger.add_entry({"type": "expense", "amount": "1200", "date": "2024-06-01"})
    assert entry.id
    assert entry.category is ExpenseCategory.CREDIT
    assert entry.name == ""
    assert entry.amount == 1200
    assert entry.date == date(2024, 6, 1)
    assert ledger.get_entry(entry.id) == entry


def test_add_entry_rejects_invalid_input(ledger: LedgerService) -> None:
    with pytest.raises(ValidationError):
        ledger.add_entry(_income(amount=0))
    with pytest.raises(ValidationError):
        ledger.add_entry(_income(amount=-5))
    with pytest.raises(ValidationError):
        ledger.add_entry(_income(category="credit"))
    with pytest.raises(ValidationError):
        ledger.add_entry(_income(date="2024-13-01"))
    with pytest.raises(ValidationError):
        ledger.add_entry(_income(type="transfer"))
    assert ledger.entries == ()


def test_update_entry_preserves_identity(ledger: LedgerService) -> None:
    entry = ledger.add_entry(_income())
    updated = ledger.update_entry(entry.id, {"amount": 310000, "id": "ignored"})
    assert updated.id == entry.id
    assert updated.amount == 310000
    assert updated.name == "給与"
    assert len(ledger.entries) == 1


def test_changing_type_resets_category(ledger: LedgerService) -> None:
    entry = ledger.add_entry(_income(category="side"))
    assert entry.category is IncomeCategory.SIDE
    updated = ledger.update_entry(entry.id, {"type": "expense"})
    assert updated.type is EntryType.EXPENSE
    assert updated.category is ExpenseCategory.CREDIT


def test_delete_entry(ledger: LedgerService) -> None:
    entry = ledger.add_entry(_income())
    ledger.delete_entry(entry.id)
    assert ledger.entries == ()
    with pytest.raises(RecordNotFoundError):
        ledger.delete_entry(entry.id)


def test_unknown_entry_ids_raise(ledger: LedgerService) -> None:
    with pytest.raises(RecordNotFoundError):
        ledger.get_entry("missing")
    with pytest.raises(RecordNotFoundError):
        ledger.update_entry("missing", {"amount": 1})


def test_synthetic_entries_cannot_be_edited_through_entry_path(ledger: LedgerService) -> None:
    rent = ledger.add_recurring(_rent())
    synthetic = ledger.entries_for_month(2024, 5)[0]
    assert synthetic.id == rent.id and synthetic.is_recurring
    with pytest.raises(RecordNotFoundError):
        ledger.update_entry(synthetic.id, {"amount": 1})
    with pytest.raises(RecordNotFoundError):
        ledger.delete_entry(synthetic.id)
    assert ledger.recurring_expenses == (rent,)


def test_add_recurring_validation(ledger: LedgerService) -> None:
    with pytest.raises(ValidationError):
        ledger.add_recurring(_rent(name="  "))
    with pytest.raises(ValidationError):
        ledger.add_recurring(_rent(amount=0))
    with pytest.raises(ValidationError):
        ledger.add_recurring(_rent(startMonth=13))
    with pytest.raises(ValidationError):
        ledger.add_recurring(_rent(endYear=2025))
    with pytest.raises(ValidationError):
        ledger.add_recurring(_rent(endYear=2024, endMonth=3))
    assert ledger.recurring_expenses == ()


def test_add_and_delete_recurring(ledger: LedgerService) -> None:
    open_ended = ledger.add_recurring(_rent())
    bounded = ledger.add_recurring(_rent(name="Gym", amount=5000, endYear=2024, endMonth=4))
    assert open_ended.is_open_ended
    assert (bounded.end_year, bounded.end_month) == (2024, 4)

    ledger.delete_recurring(open_ended.id)
    assert ledger.recurring_expenses == (bounded,)
    with pytest.raises(RecordNotFoundError):
        ledger.delete_recurring(open_ended.id)


def test_end_to_end_month_and_year(ledger: LedgerService) -> None:
    ledger.add_entry(_income())
    ledger.add_entry({"type": "expense", "amount": 50000, "date": "2024-05-15"})
    ledger.add_recurring(_rent())

    effective = ledger.entries_for_month(2024, 5)
    assert [entry.is_recurring for entry in effective] == [False, False, True]

    may = ledger.year_summary(2024).per_month[1]
    assert (may.income, may.expense, may.balance) == (300000, 130000, 170000)


def test_year_summary_cache_is_invalidated_by_mutations(ledger: LedgerService) -> None:
    first = ledger.year_summary(2024)
    assert ledger.year_summary(2024) is first

    ledger.add_recurring(_rent())
    second = ledger.year_summary(2024)
    assert second is not first
    # January to March compare as the fiscal year's own calendar year, before April.
    assert second.total_expense == 9 * 80000


def test_persisted_dataset_reloads_identically(storage: JSONStorage, ledger: LedgerService) -> None:
    ledger.add_entry(_income())
    ledger.add_entry({"type": "expense", "category": "adjust", "amount": 700, "date": "2025-02-03"})
    ledger.add_recurring(_rent())
    ledger.add_recurring(_rent(name="Phone", amount=3000, endYear=2025, endMonth=3))

    reloaded = LedgerService(storage)
    assert reloaded.snapshot() == ledger.snapshot()
    assert reloaded.entries == ledger.entries
    assert reloaded.recurring_expenses == ledger.recurring_expenses

    on_disk = json.loads((storage.base_path / DEFAULT_RESOURCE).read_text(encoding="utf-8"))
    assert on_disk == ledger.snapshot()


def test_unreadable_records_fall_back_to_empty(storage: JSONStorage, caplog) -> None:
    storage.save_document({
        "entries": [{"id": "1", "type": "income", "category": "main", "amount": 1, "date": "not-a-date"}],
        "recurringExpenses": [],
    })
    ledger = LedgerService(storage)
    assert ledger.entries == ()
    assert "Discarding unreadable ledger data" in caplog.text


def test_legacy_numeric_ids_are_loaded_as_strings(storage: JSONStorage) -> None:
    storage.save_document({
        "entries": [{"id": 1718000000000, "type": "expense", "category": "credit", "name": "", "amount": 980, "date": "2024-06-10"}],
        "recurringExpenses": [{"id": 1718000000001, "name": "家賃", "amount": 80000, "startYear": 2024, "startMonth": 4, "endYear": None, "endMonth": None}],
    })
    ledger = LedgerService(storage)
    assert ledger.get_entry("1718000000000").amount == 980
    assert ledger.get_recurring("1718000000001").name == "家賃"


def test_oversized_amount_is_rejected_and_ledger_stays_usable(ledger: LedgerService) -> None:
    with pytest.raises(ValidationError):
        ledger.add_entry(_income(amount="1e5000"))
    assert ledger.entries == ()

    entry = ledger.add_entry(_income(amount=100))
    assert ledger.entries == (entry,)


def test_failed_write_leaves_state_unchanged(ledger: LedgerService, monkeypatch) -> None:
    kept = ledger.add_entry(_income())
    rent = ledger.add_recurring(_rent())
    before = ledger.snapshot()

    def broken_save(document, resource=DEFAULT_RESOURCE):
        raise ValueError("cannot serialise")

    monkeypatch.setattr(ledger._storage, "save_document", broken_save)

    with pytest.raises(PersistenceError):
        ledger.add_entry(_income(amount=1))
    with pytest.raises(PersistenceError):
        ledger.update_entry(kept.id, {"amount": 5})
    with pytest.raises(PersistenceError):
        ledger.delete_entry(kept.id)
    with pytest.raises(PersistenceError):
        ledger.delete_recurring(rent.id)
    assert ledger.snapshot() == before

    monkeypatch.undo()
    added = ledger.add_entry(_income(amount=1))
    assert ledger.get_entry(added.id).amount == 1


def test_summary_cache_keeps_recent_years_only(ledger: LedgerService) -> None:
    for fiscal_year in range(2000, 2000 + SUMMARY_CACHE_SIZE + 5):
        ledger.year_summary(fiscal_year)
    assert len(ledger._summary_cache) == SUMMARY_CACHE_SIZE
    assert 2000 not in ledger._summary_cache

    recent = ledger.year_summary(2000 + SUMMARY_CACHE_SIZE + 4)
    assert ledger.year_summary(2000 + SUMMARY_CACHE_SIZE + 4) is recent


def test_fractional_stored_amounts_are_unreadable(storage: JSONStorage, caplog) -> None:
    storage.save_document({
        "entries": [{"id": "1", "type": "expense", "category": "credit", "name": "", "amount": 980.5, "date": "2024-06-10"}],
        "recurringExpenses": [],
    })
    ledger = LedgerService(storage)
    assert ledger.entries == ()
    assert "Discarding unreadable ledger data" in caplog.text


def test_whole_float_amounts_load_as_int(storage: JSONStorage) -> None:
    storage.save_document({
        "entries": [{"id": "1", "type": "expense", "category": "credit", "name": "", "amount": 980.0, "date": "2024-06-10"}],
        "recurringExpenses": [],
    })
    amount = LedgerService(storage).get_entry("1").amount
    assert amount == 980 and isinstance(amount, int)
