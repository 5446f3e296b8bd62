"""
Entity store base - typed CRUD over one backend table.

Stores hold no cache: every read goes to the backend. Backend errors are
raised as StoreError subclasses and never caught here.
"""

import logging
import uuid
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from errors import NotFound, StoreUnavailable, ValidationRejected
from .base import RemoteBackend, RemoteResponse, NOT_FOUND, VALIDATION

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


def new_id() -> str:
    return str(uuid.uuid4())


class EntityStore(Generic[T]):
    """
    Shared plumbing for the task, article and team stores.

    Subclasses set `table` and `model`.
    """

    table: str = ""
    model: type[T]

    def __init__(self, backend: RemoteBackend):
        self.backend = backend

    def _unwrap(self, response: RemoteResponse, action: str):
        """Return response data or raise the matching StoreError."""
        if response.ok:
            return response.data

        error = response.error
        context = {"table": self.table, "action": action, "code": error.code}
        if error.code == NOT_FOUND:
            raise NotFound(error.message or f"{self.table} record not found", context=context)
        if error.code == VALIDATION:
            raise ValidationRejected(error.message or "record rejected", context=context)
        raise StoreUnavailable(error.message or f"{action} failed", context=context)

    def to_model(self, record) -> T:
        """Validate one backend record into the entity model."""
        if not isinstance(record, dict):
            raise ValidationRejected(
                f"expected a {self.table} record, got {type(record).__name__}",
                context={"table": self.table},
            )
        try:
            return self.model.model_validate(record)
        except ValidationError as e:
            raise ValidationRejected(
                f"invalid {self.table} record: {e.error_count()} error(s)",
                context={"table": self.table, "id": record.get("id"), "errors": e.errors()},
            ) from e

    def to_models(self, records) -> list[T]:
        if records is None:
            return []
        if not isinstance(records, list):
            raise ValidationRejected(f"expected a list of {self.table} records")
        return [self.to_model(r) for r in records]

    async def _select(self, filters: Optional[dict] = None, order_by: Optional[str] = None,
                      descending: bool = False) -> list[T]:
        response = await self.backend.select(self.table, filters, order_by, descending)
        return self.to_models(self._unwrap(response, "select"))

    async def _insert(self, record: dict) -> T:
        response = await self.backend.insert(self.table, record)
        return self.to_model(self._unwrap(response, "insert"))

    async def _update(self, id: str, changes: dict) -> T:
        response = await self.backend.update(self.table, id, changes)
        return self.to_model(self._unwrap(response, "update"))

    async def _delete(self, id: str) -> None:
        response = await self.backend.delete(self.table, id)
        self._unwrap(response, "delete")
        logger.debug("[%s] Deleted %s", self.table.upper(), id)

    async def get_by_id(self, id: str) -> Optional[T]:
        """Fetch one record; None when it does not exist."""
        found = await self._select({"id": id})
        return found[0] if found else None

    async def delete(self, id: str) -> bool:
        """Hard delete. Raises NotFound if the record is gone already."""
        await self._delete(id)
        return True
