import threading
import uuid
from datetime import datetime, timezone
from typing import Any, List, Optional, Tuple

from .base import PropertyRecord, StoredEntry, StoredProperty


class PropertyStore:
    """
    In-process placeholder for the property database.
    Nothing survives a restart; one store lives on each app instance.
    """
    def __init__(self):
        self._lock = threading.Lock()
        self._rows: dict[str, StoredProperty] = {}

    def create(self, record: PropertyRecord, owner_id: str = "default-user") -> StoredProperty:
        row = StoredProperty(
            id=uuid.uuid4().hex,
            owner_id=owner_id,
            created_at=datetime.now(timezone.utc),
            record=record,
        )
        with self._lock:
            self._rows[row.id] = row
        return row

    def get(self, property_id: str) -> Optional[StoredProperty]:
        with self._lock:
            return self._rows.get(property_id)

    def list(self, owner_id: str = "default-user", limit: int = 10, offset: int = 0) -> Tuple[List[StoredProperty], int]:
        """Newest first, paged. Returns (page, total for the owner)."""
        with self._lock:
            owned = [r for r in self._rows.values() if r.owner_id == owner_id]
        owned.sort(key=lambda r: r.created_at, reverse=True)
        return owned[offset:offset + limit], len(owned)

    def add_valuation(self, property_id: str, result: Any, source: str) -> StoredEntry:
        return self._append(property_id, "valuations", result, source)

    def add_legal_check(self, property_id: str, result: Any, source: str) -> StoredEntry:
        return self._append(property_id, "legal_checks", result, source)

    def add_financial_model(self, property_id: str, result: Any, source: str) -> StoredEntry:
        return self._append(property_id, "financial_models", result, source)

    def _append(self, property_id: str, kind: str, result: Any, source: str) -> StoredEntry:
        entry = StoredEntry(
            id=uuid.uuid4().hex,
            property_id=property_id,
            created_at=datetime.now(timezone.utc),
            source=source,
            result=result,
        )
        with self._lock:
            row = self._rows.get(property_id)
            if row is None:
                raise KeyError(property_id)
            getattr(row, kind).append(entry)
        return entry


def latest(entries: List[StoredEntry]) -> Optional[StoredEntry]:
    return entries[-1] if entries else None
