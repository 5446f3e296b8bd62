"""
JSON file backend - stores each table as one JSON file.

Directory structure:
    {data_dir}/
        tasks.json          - list of task records
        articles.json       - list of article records
        team_members.json   - list of team member records

File I/O runs in a worker thread; operations are serialized per backend
so a read-modify-write never interleaves with another.
"""

import asyncio
import json
import logging
import threading
from pathlib import Path
from typing import Optional

from config import DATA_DIR
from .base import TableBackend, RemoteResponse, UNAVAILABLE

logger = logging.getLogger(__name__)


class WriteQueue:
    """Thread-safe write serialization."""

    def __init__(self):
        self._lock = threading.Lock()

    def write_json(self, path: Path, data) -> None:
        """Atomic JSON write."""
        with self._lock:
            path.parent.mkdir(parents=True, exist_ok=True)
            temp = path.with_suffix(".json.tmp")
            with open(temp, "w") as f:
                json.dump(data, f, indent=2, default=str)
            temp.replace(path)

    def read_json(self, path: Path, default=None):
        with self._lock:
            if not path.exists():
                return default
            with open(path) as f:
                return json.load(f)


_write_queue = WriteQueue()


class JsonBackend(TableBackend):
    """JSON file implementation of the remote backend."""

    def __init__(self, base_path: Optional[Path] = None):
        self._base_path = Path(base_path or DATA_DIR)
        self._lock = asyncio.Lock()

    def _table_file(self, table: str) -> Path:
        return self._base_path / f"{table}.json"

    def _read_table(self, table: str) -> dict[str, dict]:
        path = self._table_file(table)
        try:
            records = _write_queue.read_json(path, default=[])
        except json.JSONDecodeError as e:
            raise OSError(f"corrupt {path.name}: {e}") from e
        return {r["id"]: r for r in records if isinstance(r, dict) and r.get("id")}

    async def _load(self, table):
        return await asyncio.to_thread(self._read_table, table)

    async def _store(self, table, rows):
        await asyncio.to_thread(_write_queue.write_json, self._table_file(table), list(rows.values()))

    async def _guarded(self, operation, *args) -> RemoteResponse:
        async with self._lock:
            try:
                return await operation(*args)
            except OSError as e:
                logger.warning("[JSON-BACKEND] %s failed: %s", operation.__name__, e)
                return RemoteResponse.failure(UNAVAILABLE, str(e))

    async def select(self, table, filters=None, order_by=None, descending=False):
        return await self._guarded(super().select, table, filters, order_by, descending)

    async def insert(self, table, record):
        return await self._guarded(super().insert, table, record)

    async def update(self, table, id, changes):
        return await self._guarded(super().update, table, id, changes)

    async def delete(self, table, id):
        return await self._guarded(super().delete, table, id)
