"""Task document model."""

from __future__ import annotations

from datetime import datetime
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .common import ensure_tzaware, parse_instant, to_object_id, utcnow

UNASSIGNED_USER_ID = ""
UNASSIGNED_USER_NAME = "unassigned"


def cast_object_id(value: Any) -> Any:
    """Turn ObjectId-shaped strings into ``ObjectId``; leave anything else untouched."""

    converted = to_object_id(value)
    return value if converted is None else converted


class Task(BaseModel):
    """A task as stored in the ``tasks`` collection."""

    collection_name: ClassVar[str] = "tasks"
    query_casts: ClassVar[dict[str, Any]] = {
        "_id": cast_object_id,
        "deadline": parse_instant,
        "dateCreated": parse_instant,
    }

    model_config = ConfigDict(populate_by_name=True)

    id: str | None = Field(default=None, alias="_id")
    name: str
    description: str = ""
    deadline: datetime
    completed: bool = False
    assigned_user: str = Field(default=UNASSIGNED_USER_ID, alias="assignedUser")
    assigned_user_name: str = Field(default=UNASSIGNED_USER_NAME, alias="assignedUserName")
    date_created: datetime = Field(default_factory=utcnow, alias="dateCreated")

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: object) -> str | None:
        return None if value is None else str(value)

    @field_validator("deadline", "date_created", mode="after")
    @classmethod
    def _ensure_utc(cls, value: datetime) -> datetime:
        return ensure_tzaware(value)

    @property
    def is_assigned(self) -> bool:
        return self.assigned_user != UNASSIGNED_USER_ID

    @property
    def is_pending(self) -> bool:
        """Whether the task belongs in its assignee's ``pendingTasks``."""
        return self.is_assigned and not self.completed

    def to_document(self) -> dict[str, Any]:
        """Return the stored representation, without the identifier."""
        return self.model_dump(by_alias=True, exclude={"id"})

    def to_public(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "Task":
        return cls.model_validate(document)


__all__ = ["Task", "UNASSIGNED_USER_ID", "UNASSIGNED_USER_NAME", "cast_object_id"]
