"""Domain service layer package."""

from __future__ import annotations

from .tasks import TaskService
from .users import UserService

__all__ = ["TaskService", "UserService"]
