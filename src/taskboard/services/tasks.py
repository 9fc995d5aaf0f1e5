"""Service layer encapsulating task-related operations.

Every write first persists the task itself and then repairs the ``pendingTasks``
mirror held by the affected users. The steps are awaited in order and are not
atomic: if a later step fails the task is correct but a user's
``pendingTasks`` may be stale.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ..db.store import DocumentStore
from ..errors import NotFoundError, ValidationError
from ..models import UNASSIGNED_USER_ID, UNASSIGNED_USER_NAME, Task, parse_instant
from ..query import Projection, ReadSpec
from ..repositories import TaskRepository, UserRepository
from ..schemas import TaskWrite

logger = logging.getLogger(__name__)

TASK_NOT_FOUND = "Task not found"


@dataclass(slots=True)
class _TaskFields:
    """Validated field values for a task write."""

    name: str
    description: str
    deadline: datetime
    completed: bool
    assigned_user: str
    assigned_user_name: str


class TaskService:
    """High-level business orchestration for ``Task`` documents."""

    def __init__(self, store: DocumentStore) -> None:
        self._repository = TaskRepository(store)
        self._user_repository = UserRepository(store)

    @staticmethod
    def _require_fields(payload: TaskWrite) -> None:
        if not payload.name.strip() or payload.deadline is None:
            raise ValidationError("Name and deadline are required")

    @staticmethod
    def _parse_deadline(raw: Any) -> datetime:
        try:
            return parse_instant(raw)
        except ValueError as exc:
            raise ValidationError("Invalid deadline") from exc

    async def _resolve_assignee_name(self, assigned_user: str) -> str:
        if not assigned_user:
            return UNASSIGNED_USER_NAME
        user = await self._user_repository.get(assigned_user)
        if user is None:
            raise ValidationError("Assigned user not found")
        return user.name

    async def _resolve_fields(self, payload: TaskWrite) -> _TaskFields:
        deadline = self._parse_deadline(payload.deadline)
        assigned_user_name = await self._resolve_assignee_name(payload.assigned_user)
        return _TaskFields(
            name=payload.name,
            description=payload.description,
            deadline=deadline,
            completed=payload.completed,
            assigned_user=payload.assigned_user or UNASSIGNED_USER_ID,
            assigned_user_name=assigned_user_name,
        )

    async def list_tasks(self, spec: ReadSpec) -> list[dict[str, Any]] | int:
        """Return the tasks matching ``spec``, or their number when ``spec.count`` is set."""
        if spec.count:
            return await self._repository.count(spec.mongo_filter)
        return await self._repository.find(spec)

    async def get_task(self, task_id: str, projection: Projection | None = None) -> dict[str, Any]:
        """Retrieve one task, optionally projected."""
        document = await self._repository.get_document(
            task_id,
            projection.to_mongo() if projection is not None else None,
        )
        if document is None:
            raise NotFoundError(TASK_NOT_FOUND)
        return document

    async def create_task(self, payload: TaskWrite) -> Task:
        """Create a task and add it to its assignee's pending list."""
        self._require_fields(payload)
        fields = await self._resolve_fields(payload)
        task = Task(
            name=fields.name,
            description=fields.description,
            deadline=fields.deadline,
            completed=fields.completed,
            assigned_user=fields.assigned_user,
            assigned_user_name=fields.assigned_user_name,
        )
        await self._repository.add(task)
        logger.info("Task created", extra={"task_id": task.id, "assigned_user": task.assigned_user})

        if task.is_pending:
            await self._user_repository.add_pending_task(task.assigned_user, task.id)
            logger.debug(
                "Added task to pending list",
                extra={"task_id": task.id, "user_id": task.assigned_user},
            )
        return task

    async def replace_task(self, task_id: str, payload: TaskWrite) -> Task:
        """Replace every writable field of a task and repair both users' pending lists."""
        self._require_fields(payload)
        current = await self._repository.get(task_id)
        if current is None:
            raise NotFoundError(TASK_NOT_FOUND)
        fields = await self._resolve_fields(payload)

        previous_user = current.assigned_user
        previous_completed = current.completed
        task = current.model_copy(
            update={
                "name": fields.name,
                "description": fields.description,
                "deadline": fields.deadline,
                "completed": fields.completed,
                "assigned_user": fields.assigned_user,
                "assigned_user_name": fields.assigned_user_name,
            }
        )
        await self._repository.replace(task)
        logger.info("Task replaced", extra={"task_id": task.id, "assigned_user": task.assigned_user})

        user_changed = previous_user != task.assigned_user
        newly_completed = not previous_completed and task.completed
        if previous_user and (user_changed or newly_completed):
            await self._user_repository.remove_pending_task(previous_user, task.id)
            logger.debug(
                "Removed task from previous assignee's pending list",
                extra={"task_id": task.id, "user_id": previous_user},
            )
        if task.is_pending:
            await self._user_repository.add_pending_task(task.assigned_user, task.id)
            logger.debug(
                "Added task to pending list",
                extra={"task_id": task.id, "user_id": task.assigned_user},
            )
        return task

    async def delete_task(self, task_id: str) -> None:
        """Remove a task from its assignee's pending list, then delete it."""
        task = await self._repository.get(task_id)
        if task is None:
            raise NotFoundError(TASK_NOT_FOUND)
        if task.is_assigned:
            await self._user_repository.remove_pending_task(task.assigned_user, task.id)
        await self._repository.delete(task.id)
        logger.info("Task deleted", extra={"task_id": task.id, "assigned_user": task.assigned_user})
