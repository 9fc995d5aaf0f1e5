"""User-related Pydantic schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class UserWrite(BaseModel):
    """Body of a user create or full-replace request."""

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "name": "Ada Lovelace",
                "email": "ada@example.com",
                "pendingTasks": ["65f1c0ffee0ddba11ad0beef"],
            }
        },
    )

    name: str = ""
    email: str = ""
    pending_tasks: list[str] = Field(default_factory=list, alias="pendingTasks")

    @field_validator("name", "email", mode="before")
    @classmethod
    def _coerce_text(cls, value: object) -> str:
        if value is None:
            return ""
        return str(value).strip()

    @field_validator("pending_tasks", mode="before")
    @classmethod
    def _normalise_pending_tasks(cls, value: object) -> list[str]:
        """Accept a list or a single id, dropping blanks and repeated ids."""
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple)):
            return []
        seen: dict[str, None] = {}
        for item in value:
            if item is None:
                continue
            task_id = str(item).strip()
            if task_id and task_id not in seen:
                seen[task_id] = None
        return list(seen.keys())


__all__ = ["UserWrite"]
