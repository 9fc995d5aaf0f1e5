"""Repository for the ``users`` collection."""

from __future__ import annotations

from ..db.store import DocumentStore
from ..models import User, to_object_id
from .base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Concrete repository for CRUD operations on ``User`` documents."""

    def __init__(self, store: DocumentStore) -> None:
        super().__init__(store, User)

    async def get_by_email(self, email: str) -> User | None:
        """Return a user matching the supplied email if it exists."""
        document = await self.collection.find_one({"email": email})
        if document is None:
            return None
        return User.from_document(document)

    async def add_pending_task(self, user_id: str, task_id: str) -> bool:
        """Add ``task_id`` to the user's ``pendingTasks``; repeated adds are no-ops."""
        object_id = to_object_id(user_id)
        if object_id is None:
            return False
        result = await self.collection.update_one(
            {"_id": object_id},
            {"$addToSet": {"pendingTasks": task_id}},
        )
        return result.modified_count > 0

    async def remove_pending_task(self, user_id: str, task_id: str) -> bool:
        """Remove ``task_id`` from the user's ``pendingTasks``."""
        object_id = to_object_id(user_id)
        if object_id is None:
            return False
        result = await self.collection.update_one(
            {"_id": object_id},
            {"$pull": {"pendingTasks": task_id}},
        )
        return result.modified_count > 0
