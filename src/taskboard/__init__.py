"""Taskboard: tasks and users over HTTP with denormalized cross references."""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
