"""Pydantic schemas for public interfaces."""

from __future__ import annotations

from .system import HealthCheckResponse, ResponseEnvelope, RootResponse
from .task import TaskWrite
from .user import UserWrite

__all__ = [
    "HealthCheckResponse",
    "ResponseEnvelope",
    "RootResponse",
    "TaskWrite",
    "UserWrite",
]
