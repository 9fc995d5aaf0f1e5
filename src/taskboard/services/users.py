"""Service layer orchestrating user-related operations.

User writes persist the user first and then rewrite the assignment fields of
the affected tasks. The set of tasks previously assigned to a user is read
from the ``tasks`` collection, not from the user's stored ``pendingTasks``.
"""

from __future__ import annotations

import logging
from typing import Any

from pymongo.errors import DuplicateKeyError

from ..db.store import DocumentStore
from ..errors import NotFoundError, ValidationError
from ..models import User
from ..query import Projection, ReadSpec
from ..repositories import TaskRepository, UserRepository
from ..schemas import UserWrite

logger = logging.getLogger(__name__)

USER_NOT_FOUND = "User not found"
EMAIL_EXISTS = "Email already exists"


class UserService:
    """High-level business operations for ``User`` documents."""

    def __init__(self, store: DocumentStore) -> None:
        self._repository = UserRepository(store)
        self._task_repository = TaskRepository(store)

    @staticmethod
    def _require_fields(payload: UserWrite) -> None:
        if not payload.name or not payload.email:
            raise ValidationError("Name and email are required")

    async def list_users(self, spec: ReadSpec) -> list[dict[str, Any]] | int:
        """Return the users matching ``spec``, or their number when ``spec.count`` is set."""
        if spec.count:
            return await self._repository.count(spec.mongo_filter)
        return await self._repository.find(spec)

    async def get_user(self, user_id: str, projection: Projection | None = None) -> dict[str, Any]:
        document = await self._repository.get_document(
            user_id,
            projection.to_mongo() if projection is not None else None,
        )
        if document is None:
            raise NotFoundError(USER_NOT_FOUND)
        return document

    async def create_user(self, payload: UserWrite) -> User:
        """Create a user and claim every task listed in ``pendingTasks``.

        The listed ids are not checked; tasks that exist are reassigned to the
        new user and reopened, whatever their previous assignment.
        """
        self._require_fields(payload)
        if await self._repository.get_by_email(payload.email) is not None:
            raise ValidationError(EMAIL_EXISTS)

        user = User(name=payload.name, email=payload.email, pending_tasks=payload.pending_tasks)
        try:
            await self._repository.add(user)
        except DuplicateKeyError as exc:
            raise ValidationError(EMAIL_EXISTS) from exc
        logger.info("User created", extra={"user_id": user.id, "pending_tasks": len(user.pending_tasks)})

        if user.pending_tasks:
            assigned = await self._task_repository.assign_to_user(user.pending_tasks, user)
            logger.debug("Assigned pending tasks", extra={"user_id": user.id, "modified": assigned})
        return user

    async def replace_user(self, user_id: str, payload: UserWrite) -> User:
        """Replace a user and re-point the tasks leaving and joining its pending list."""
        self._require_fields(payload)
        current = await self._repository.get(user_id)
        if current is None:
            raise NotFoundError(USER_NOT_FOUND)

        email_owner = await self._repository.get_by_email(payload.email)
        if email_owner is not None and email_owner.id != current.id:
            raise ValidationError(EMAIL_EXISTS)

        pending_tasks = payload.pending_tasks
        if pending_tasks:
            existing = await self._task_repository.count_existing(pending_tasks)
            if existing != len(pending_tasks):
                raise ValidationError("One or more pendingTasks IDs are invalid")

        previous_task_ids = await self._task_repository.list_ids_assigned_to(current.id)

        user = current.model_copy(
            update={"name": payload.name, "email": payload.email, "pending_tasks": pending_tasks}
        )
        try:
            await self._repository.replace(user)
        except DuplicateKeyError as exc:
            raise ValidationError(EMAIL_EXISTS) from exc
        logger.info("User replaced", extra={"user_id": user.id, "pending_tasks": len(pending_tasks)})

        kept = set(pending_tasks)
        released = [task_id for task_id in previous_task_ids if task_id not in kept]
        if released:
            unassigned = await self._task_repository.unassign_from_user(released, user.id)
            logger.debug("Released tasks", extra={"user_id": user.id, "modified": unassigned})
        if pending_tasks:
            assigned = await self._task_repository.assign_to_user(pending_tasks, user)
            logger.debug("Assigned pending tasks", extra={"user_id": user.id, "modified": assigned})
        return user

    async def delete_user(self, user_id: str) -> None:
        """Unassign every task pointing at the user, then delete it."""
        user = await self._repository.get(user_id)
        if user is None:
            raise NotFoundError(USER_NOT_FOUND)
        unassigned = await self._task_repository.unassign_all_from_user(user.id)
        await self._repository.delete(user.id)
        logger.info("User deleted", extra={"user_id": user.id, "unassigned_tasks": unassigned})
