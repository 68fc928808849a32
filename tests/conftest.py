from pathlib import Path

import pytest

from budget_core.services import LedgerService
from budget_core.storage import JSONStorage


@pytest.fixture()
def storage(tmp_path: Path) -> JSONStorage:
    return JSONStorage(tmp_path / "data")


@pytest.fixture()
def ledger(storage: JSONStorage) -> LedgerService:
    return LedgerService(storage)
