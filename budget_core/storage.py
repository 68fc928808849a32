"""Persistence utilities for the budget tracker core services."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from .exceptions import PersistenceError
from .models import empty_document

logger = logging.getLogger(__name__)

DEFAULT_RESOURCE = "budget_data_v1.json"

LedgerDocument = Dict[str, List[Dict[str, Any]]]


class JSONStorage:
    """File-based storage of whole ledger documents with crash-safe writes.

    Reads never fail: a missing, unreadable or malformed document is replaced
    by an empty one. Writes raise :class:`PersistenceError`.
    """

    def __init__(self, base_path: Path) -> None:
        self._base_path = Path(base_path)
        self._base_path.mkdir(parents=True, exist_ok=True)

    def load_document(self, resource: str = DEFAULT_RESOURCE) -> LedgerDocument:
        path = self._base_path / resource
        if not path.exists():
            return empty_document()
        try:
            with path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            logger.warning("Ignoring corrupted ledger document %s: %s", path, exc)
            return empty_document()
        except OSError as exc:
            logger.warning("Unable to read ledger document %s: %s", path, exc)
            return empty_document()

        if not _is_document(payload):
            logger.warning("Ignoring ledger document %s with unexpected layout", path)
            return empty_document()
        return {
            "entries": payload.get("entries") or [],
            "recurringExpenses": payload.get("recurringExpenses") or [],
        }

    def save_document(self, document: LedgerDocument, resource: str = DEFAULT_RESOURCE) -> None:
        path = self._base_path / resource
        temp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            with temp_path.open("w", encoding="utf-8") as handle:
                json.dump(document, handle, indent=2, ensure_ascii=False)
                handle.flush()
            # Use replace for atomic move on POSIX; ensures crash-safe persistence.
            temp_path.replace(path)
        except OSError as exc:
            _discard(temp_path)
            raise PersistenceError(f"Unable to write to {path}") from exc
        except (TypeError, ValueError) as exc:
            _discard(temp_path)
            raise PersistenceError(f"Unable to serialise ledger document for {path}") from exc

    @property
    def base_path(self) -> Path:
        return self._base_path


def _is_document(payload: object) -> bool:
    if not isinstance(payload, dict):
        return False
    for key in ("entries", "recurringExpenses"):
        value = payload.get(key)
        if value is not None and not isinstance(value, list):
            return False
    return True


def _discard(temp_path: Path) -> None:
    # Leftover of a failed write; a directory in its place is left alone.
    if temp_path.is_file():
        temp_path.unlink()
