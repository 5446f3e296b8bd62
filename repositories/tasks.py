"""
Task store.
"""

from models import Task, TaskStatus, CreateTaskInput, UpdateTaskInput, utc_now
from .store import EntityStore, new_id

TASKS_TABLE = "tasks"


class TaskStore(EntityStore[Task]):
    """CRUD for tasks. list() is newest-created first."""

    table = TASKS_TABLE
    model = Task

    async def create(self, data: CreateTaskInput, creator_id: str) -> Task:
        now = utc_now()
        task = Task(
            id=new_id(),
            **data.model_dump(),
            created_at=now,
            updated_at=now,
            created_by=creator_id,
        )
        return await self._insert(task.model_dump(mode="json"))

    async def update(self, id: str, data: UpdateTaskInput) -> Task:
        """Write only the fields set on `data`, plus a fresh updated_at."""
        changes = data.changes()
        changes["updated_at"] = utc_now().isoformat()
        return await self._update(id, changes)

    async def bulk_update_status(self, ids: list[str], status: TaskStatus) -> list[Task]:
        """
        Move several tasks to one status.

        All get the same updated_at. Stops at the first failure; tasks
        already written stay written.
        """
        stamp = utc_now().isoformat()
        status = TaskStatus(status)
        updated = []
        for id in ids:
            updated.append(await self._update(id, {"status": status.value, "updated_at": stamp}))
        return updated

    # Defined last: the method name shadows the builtin inside the class body
    async def list(self) -> list[Task]:
        return await self._select(order_by="created_at", descending=True)
