from __future__ import annotations

from collections.abc import AsyncIterator, Iterator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from taskboard.core.config import get_settings
from taskboard.db import DocumentStore
from taskboard.main import create_app
from taskboard.services import TaskService, UserService


@pytest.fixture(autouse=True)
def _test_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setenv("TASKBOARD_ENVIRONMENT", "test")
    get_settings.cache_clear()
    try:
        yield
    finally:
        get_settings.cache_clear()


@pytest_asyncio.fixture()
async def store() -> AsyncIterator[DocumentStore]:
    document_store = DocumentStore(AsyncMongoMockClient(), "taskboard_test")
    await document_store.ensure_indexes()
    try:
        yield document_store
    finally:
        document_store.close()


@pytest.fixture()
def task_service(store: DocumentStore) -> TaskService:
    return TaskService(store)


@pytest.fixture()
def user_service(store: DocumentStore) -> UserService:
    return UserService(store)


@pytest.fixture()
def app(store: DocumentStore) -> FastAPI:
    return create_app(store=store)


@pytest_asyncio.fixture()
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
