from __future__ import annotations

import pytest
from fastapi import status
from httpx import AsyncClient
from pymongo.errors import ServerSelectionTimeoutError

from taskboard.db import DocumentStore

pytestmark = pytest.mark.asyncio


async def test_service_metadata_is_served_at_api_root(client: AsyncClient) -> None:
    response = await client.get("/api")

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["message"] == "OK"
    assert body["data"]["name"] == "Taskboard"
    assert body["data"]["environment"] == "test"
    assert body["data"]["api_prefix"] == "/api"


async def test_health_reports_reachable_store(
    client: AsyncClient,
    store: DocumentStore,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    async def _ping() -> bool:
        return True

    monkeypatch.setattr(store, "ping", _ping)

    response = await client.get("/healthz")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "ok", "database": "ok"}


async def test_health_reports_unreachable_store(
    client: AsyncClient,
    store: DocumentStore,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    async def _ping() -> bool:
        raise ServerSelectionTimeoutError("no servers available")

    monkeypatch.setattr(store, "ping", _ping)

    response = await client.get("/healthz")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "degraded", "database": "unavailable"}


async def test_store_indexes_are_created(store: DocumentStore) -> None:
    user_indexes = await store.collection("users").index_information()
    task_indexes = await store.collection("tasks").index_information()

    assert user_indexes["users_email_unique"]["unique"] is True
    assert "tasks_assigned_user" in task_indexes
    assert "tasks_completed" in task_indexes


async def test_unsafe_request_ids_are_replaced(client: AsyncClient) -> None:
    response = await client.get("/api", headers={"X-Request-ID": "not safe\tid"})

    request_id = response.headers["X-Request-ID"]
    assert request_id != "not safe\tid"
    assert len(request_id) == 32
    int(request_id, 16)


async def test_generated_request_ids_differ_between_requests(client: AsyncClient) -> None:
    first = await client.get("/api")
    second = await client.get("/api")

    assert first.headers["X-Request-ID"] != second.headers["X-Request-ID"]
