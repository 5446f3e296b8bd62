"""
Remote backend interface - the persistence collaborator the stores talk to.

Backends never raise for remote-side failures; they answer with a
RemoteResponse whose error is set. Stores turn that into exceptions.
"""

import copy
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional


# Error codes a backend may report
NOT_FOUND = "not_found"
VALIDATION = "validation"
CONFLICT = "conflict"
UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class RemoteError:
    """Structured error payload from the backend."""
    code: str
    message: str = ""


@dataclass
class RemoteResponse:
    """Either data or an error, never both."""
    data: Any = None
    error: Optional[RemoteError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, code: str, message: str = "") -> "RemoteResponse":
        return cls(error=RemoteError(code, message))


def matches(record: dict, filters: Optional[dict]) -> bool:
    """
    Check a record against equality/membership predicates.

    List, tuple and set values mean membership, anything else equality.
    """
    if not filters:
        return True
    for key, expected in filters.items():
        value = record.get(key)
        if isinstance(expected, (list, tuple, set, frozenset)):
            if value not in expected:
                return False
        elif value != expected:
            return False
    return True


def _as_datetime(value: str) -> datetime:
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def order_records(records: list[dict], order_by: Optional[str], descending: bool) -> list[dict]:
    """
    Stable ordering with missing values last in either direction.

    ISO timestamp strings are compared as datetimes, since serialized
    forms ("...:00Z" vs "...:00.5Z") do not sort lexically.
    """
    if not order_by:
        return list(records)
    present = [r for r in records if r.get(order_by) is not None]
    missing = [r for r in records if r.get(order_by) is None]

    keys = [r[order_by] for r in present]
    if keys and all(isinstance(k, str) for k in keys):
        try:
            keys = [_as_datetime(k) for k in keys]
        except ValueError:
            pass

    ranked = sorted(zip(keys, range(len(present))), key=lambda pair: pair[0], reverse=descending)
    return [present[i] for _, i in ranked] + missing


class RemoteBackend(ABC):
    """
    Object-collection API over named tables.

    Records are plain JSON-compatible dicts keyed by 'id'.
    """

    @abstractmethod
    async def select(
        self,
        table: str,
        filters: Optional[dict] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> RemoteResponse:
        """Select matching records. data is a list of dicts."""
        pass

    @abstractmethod
    async def insert(self, table: str, record: dict) -> RemoteResponse:
        """Insert a record. data is the stored record."""
        pass

    @abstractmethod
    async def update(self, table: str, id: str, changes: dict) -> RemoteResponse:
        """Apply partial changes. data is the full updated record."""
        pass

    @abstractmethod
    async def delete(self, table: str, id: str) -> RemoteResponse:
        """Delete a record. data is the deleted id."""
        pass


class TableBackend(RemoteBackend):
    """
    Shared select/insert/update/delete logic over table dicts.

    Subclasses provide _load() and _store() for one table at a time.
    """

    @abstractmethod
    async def _load(self, table: str) -> dict[str, dict]:
        pass

    @abstractmethod
    async def _store(self, table: str, rows: dict[str, dict]) -> None:
        pass

    async def select(self, table, filters=None, order_by=None, descending=False):
        rows = await self._load(table)
        found = [copy.deepcopy(r) for r in rows.values() if matches(r, filters)]
        return RemoteResponse(data=order_records(found, order_by, descending))

    async def insert(self, table, record):
        record_id = record.get("id")
        if not record_id:
            return RemoteResponse.failure(VALIDATION, "record has no id")
        rows = await self._load(table)
        if record_id in rows:
            return RemoteResponse.failure(CONFLICT, f"duplicate id {record_id}")
        rows[record_id] = copy.deepcopy(record)
        await self._store(table, rows)
        return RemoteResponse(data=copy.deepcopy(rows[record_id]))

    async def update(self, table, id, changes):
        if "id" in changes and changes["id"] != id:
            return RemoteResponse.failure(VALIDATION, "id is immutable")
        rows = await self._load(table)
        if id not in rows:
            return RemoteResponse.failure(NOT_FOUND, f"{table}/{id} not found")
        rows[id].update(copy.deepcopy(changes))
        await self._store(table, rows)
        return RemoteResponse(data=copy.deepcopy(rows[id]))

    async def delete(self, table, id):
        rows = await self._load(table)
        if id not in rows:
            return RemoteResponse.failure(NOT_FOUND, f"{table}/{id} not found")
        del rows[id]
        await self._store(table, rows)
        return RemoteResponse(data=id)
