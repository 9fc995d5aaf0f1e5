"""Task-related Pydantic schemas."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TaskWrite(BaseModel):
    """Body of a task create or full-replace request.

    Fields are read leniently; required-field and deadline checks are
    performed by the service so that they surface as 400 responses with
    specific messages.
    """

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "name": "Draft product documentation",
                "description": "Outline sections for the public API guide.",
                "deadline": "2024-06-01T17:00:00Z",
                "completed": False,
                "assignedUser": "65f1c0ffee0ddba11ad0cafe",
            }
        },
    )

    name: str = ""
    description: str = ""
    deadline: Any = None
    completed: bool = False
    assigned_user: str = Field(default="", alias="assignedUser")

    @field_validator("name", "description", "assigned_user", mode="before")
    @classmethod
    def _coerce_text(cls, value: object) -> str:
        if value is None or value is False:
            return ""
        return str(value)

    @field_validator("completed", mode="before")
    @classmethod
    def _coerce_completed(cls, value: object) -> bool:
        return value is True or str(value).strip().lower() == "true"

    @field_validator("deadline", mode="before")
    @classmethod
    def _blank_deadline_is_missing(cls, value: object) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


__all__ = ["TaskWrite"]
