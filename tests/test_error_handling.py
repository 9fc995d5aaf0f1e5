from __future__ import annotations

import logging

import pytest
from fastapi import FastAPI, status
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel
from pymongo.errors import OperationFailure

from taskboard.core.logging import RequestContextFilter
from taskboard.errors import ApplicationError, ServerError

pytestmark = pytest.mark.asyncio


class ExamplePayload(BaseModel):
    name: str


async def test_application_error_uses_envelope(app: FastAPI, client: AsyncClient) -> None:
    @app.get("/error/application")
    async def trigger_application_error() -> None:  # pragma: no cover - defined in test
        raise ApplicationError(
            "Example failure",
            code="example_error",
            status_code=status.HTTP_418_IM_A_TEAPOT,
            details={"foo": "bar"},
        )

    response = await client.get("/error/application")

    assert response.status_code == status.HTTP_418_IM_A_TEAPOT
    assert response.json() == {"message": "Example failure", "data": {}}
    assert response.headers["X-Request-ID"]


async def test_request_validation_error_is_400(app: FastAPI, client: AsyncClient) -> None:
    @app.post("/error/validation")
    async def create_item(_: ExamplePayload) -> None:  # pragma: no cover - defined in test
        return None

    response = await client.post("/error/validation", json={})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"message": "Invalid request", "data": {}}


async def test_store_error_hides_details(app: FastAPI, client: AsyncClient) -> None:
    @app.get("/error/store")
    async def trigger_store_error() -> None:  # pragma: no cover - defined in test
        raise OperationFailure("secret internal detail")

    response = await client.get("/error/store")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"message": "Server error", "data": {}}
    assert "secret" not in response.text


async def test_server_error_defaults_to_generic_message(app: FastAPI, client: AsyncClient) -> None:
    @app.get("/error/server")
    async def trigger_server_error() -> None:  # pragma: no cover - defined in test
        raise ServerError()

    response = await client.get("/error/server")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"message": "Server error", "data": {}}


async def test_unhandled_exception_is_500(app: FastAPI) -> None:
    @app.get("/error/unhandled")
    async def trigger_unhandled_error() -> None:  # pragma: no cover - defined in test
        raise RuntimeError("boom")

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/error/unhandled")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"message": "Server error", "data": {}}


async def test_unknown_route_uses_envelope(client: AsyncClient) -> None:
    response = await client.get("/api/nothing-here")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"message": "Not Found", "data": {}}


async def test_method_not_allowed_uses_envelope(client: AsyncClient) -> None:
    response = await client.patch("/api/tasks")

    assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED
    assert response.json()["data"] == {}


async def test_request_id_is_echoed(client: AsyncClient) -> None:
    response = await client.get("/api/tasks", headers={"X-Request-ID": "req-123"})

    assert response.status_code == status.HTTP_200_OK
    assert response.headers["X-Request-ID"] == "req-123"


async def test_error_logs_include_request_id(
    app: FastAPI,
    client: AsyncClient,
    caplog: pytest.LogCaptureFixture,
) -> None:
    @app.get("/error/logged")
    async def trigger_logged_error() -> None:  # pragma: no cover - defined in test
        raise ApplicationError("Logged failure", code="logged_error", status_code=status.HTTP_400_BAD_REQUEST)

    context_filter = RequestContextFilter()
    caplog.handler.addFilter(context_filter)
    try:
        with caplog.at_level(logging.WARNING, logger="taskboard.errors"):
            response = await client.get("/error/logged", headers={"X-Request-ID": "req-logged"})
    finally:
        caplog.handler.removeFilter(context_filter)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    records = [record for record in caplog.records if record.getMessage() == "Logged failure"]
    assert records
    assert records[0].request_id == "req-logged"
