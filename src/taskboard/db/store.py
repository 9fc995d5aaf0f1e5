"""Explicit document store handle backed by a motor database."""

from __future__ import annotations

import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo import ASCENDING

from ..core.config import Settings
from ..models import Task, User

logger = logging.getLogger(__name__)


class DocumentStore:
    """Own a motor client and expose the collections the services work with.

    A single instance is created at application startup and handed to every
    service through request dependencies.
    """

    def __init__(self, client: AsyncIOMotorClient, database_name: str) -> None:
        self._client = client
        self._database: AsyncIOMotorDatabase = client[database_name]

    @classmethod
    def from_settings(cls, settings: Settings) -> "DocumentStore":
        client = AsyncIOMotorClient(settings.mongo_url, tz_aware=True, uuidRepresentation="standard")
        return cls(client, settings.mongo_database)

    def collection(self, name: str) -> AsyncIOMotorCollection:
        return self._database[name]

    async def ensure_indexes(self) -> None:
        """Create the indexes the reference protocol and email uniqueness rely on."""

        users = self.collection(User.collection_name)
        tasks = self.collection(Task.collection_name)
        await users.create_index([("email", ASCENDING)], unique=True, name="users_email_unique")
        await tasks.create_index([("assignedUser", ASCENDING)], name="tasks_assigned_user")
        await tasks.create_index([("completed", ASCENDING)], name="tasks_completed")
        logger.debug("Document store indexes ensured", extra={"database": self._database.name})

    async def ping(self) -> bool:
        await self._database.command("ping")
        return True

    def close(self) -> None:
        self._client.close()


__all__ = ["DocumentStore"]
