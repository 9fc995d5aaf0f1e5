"""Repository for the ``tasks`` collection."""

from __future__ import annotations

from ..db.store import DocumentStore
from ..models import UNASSIGNED_USER_ID, UNASSIGNED_USER_NAME, Task, User
from .base import BaseRepository, object_ids

_UNASSIGNED = {"assignedUser": UNASSIGNED_USER_ID, "assignedUserName": UNASSIGNED_USER_NAME}


class TaskRepository(BaseRepository[Task]):
    """Concrete repository encapsulating ``Task`` persistence operations."""

    def __init__(self, store: DocumentStore) -> None:
        super().__init__(store, Task)

    async def count_existing(self, task_ids: list[str]) -> int:
        """Return how many of ``task_ids`` name stored tasks."""
        if not task_ids:
            return 0
        return await self.count({"_id": {"$in": object_ids(task_ids)}})

    async def list_ids_assigned_to(self, user_id: str) -> list[str]:
        """Return ids of every task whose ``assignedUser`` is ``user_id``."""
        cursor = self.collection.find({"assignedUser": user_id}, {"_id": 1})
        documents = await cursor.to_list(length=None)
        return [str(document["_id"]) for document in documents]

    async def assign_to_user(self, task_ids: list[str], user: User) -> int:
        """Point the given tasks at ``user`` and mark them not completed."""
        if not task_ids:
            return 0
        result = await self.collection.update_many(
            {"_id": {"$in": object_ids(task_ids)}},
            {
                "$set": {
                    "assignedUser": user.id,
                    "assignedUserName": user.name,
                    "completed": False,
                }
            },
        )
        return result.modified_count

    async def unassign_from_user(self, task_ids: list[str], user_id: str) -> int:
        """Clear the assignment of those ``task_ids`` still pointing at ``user_id``."""
        if not task_ids:
            return 0
        result = await self.collection.update_many(
            {"_id": {"$in": object_ids(task_ids)}, "assignedUser": user_id},
            {"$set": dict(_UNASSIGNED)},
        )
        return result.modified_count

    async def unassign_all_from_user(self, user_id: str) -> int:
        """Clear the assignment of every task pointing at ``user_id``."""
        result = await self.collection.update_many(
            {"assignedUser": user_id},
            {"$set": dict(_UNASSIGNED)},
        )
        return result.modified_count
