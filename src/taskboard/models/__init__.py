"""Document models exposed by the taskboard service."""

from __future__ import annotations

from .common import ensure_tzaware, parse_instant, to_object_id, utcnow
from .task import UNASSIGNED_USER_ID, UNASSIGNED_USER_NAME, Task, cast_object_id
from .user import User

__all__ = [
    "Task",
    "UNASSIGNED_USER_ID",
    "UNASSIGNED_USER_NAME",
    "User",
    "cast_object_id",
    "ensure_tzaware",
    "parse_instant",
    "to_object_id",
    "utcnow",
]
