"""User document model."""

from __future__ import annotations

from datetime import datetime
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .common import ensure_tzaware, parse_instant, utcnow
from .task import cast_object_id


class User(BaseModel):
    """A user as stored in the ``users`` collection."""

    collection_name: ClassVar[str] = "users"
    query_casts: ClassVar[dict[str, Any]] = {
        "_id": cast_object_id,
        "dateCreated": parse_instant,
    }

    model_config = ConfigDict(populate_by_name=True)

    id: str | None = Field(default=None, alias="_id")
    name: str
    email: str
    pending_tasks: list[str] = Field(default_factory=list, alias="pendingTasks")
    date_created: datetime = Field(default_factory=utcnow, alias="dateCreated")

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: object) -> str | None:
        return None if value is None else str(value)

    @field_validator("date_created", mode="after")
    @classmethod
    def _ensure_utc(cls, value: datetime) -> datetime:
        return ensure_tzaware(value)

    def to_document(self) -> dict[str, Any]:
        """Return the stored representation, without the identifier."""
        return self.model_dump(by_alias=True, exclude={"id"})

    def to_public(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "User":
        return cls.model_validate(document)


__all__ = ["User"]
