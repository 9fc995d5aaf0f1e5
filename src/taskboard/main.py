"""Entry point for the taskboard FastAPI application."""

from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routers import api_router, health_router, read_service_metadata
from .core.config import Settings, get_settings
from .core.logging import configure_logging
from .core.middleware import CorrelationIdMiddleware
from .db import DocumentStore
from .errors import register_exception_handlers
from .schemas.system import ResponseEnvelope

logger = logging.getLogger(__name__)


def _normalise_prefix(raw_prefix: str) -> str:
    router_prefix = raw_prefix.strip()
    if router_prefix and not router_prefix.startswith("/"):
        router_prefix = f"/{router_prefix}"
    router_prefix = router_prefix.rstrip("/")
    return "" if router_prefix == "/" else router_prefix


def create_app(*, store: DocumentStore | None = None) -> FastAPI:
    """Instantiate and configure the FastAPI application.

    When ``store`` is supplied the application uses it as-is and leaves its
    lifecycle to the caller; otherwise a store is opened from settings at
    startup and closed at shutdown.
    """

    settings = get_settings()
    configure_logging(settings)

    router_prefix = _normalise_prefix(settings.api_prefix)
    openapi_url = "/openapi.json" if not router_prefix else f"{router_prefix}/openapi.json"

    application = FastAPI(
        title=settings.project_name,
        version=settings.version,
        summary="Task and user tracking API with query-string driven reads.",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url=openapi_url,
    )

    application.state.settings = settings
    application.state.store = store

    application.add_middleware(CorrelationIdMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    application.add_api_route(
        router_prefix or "/",
        read_service_metadata,
        methods=["GET"],
        response_model=ResponseEnvelope,
        summary="Service metadata",
        tags=["system"],
    )

    if router_prefix:
        application.include_router(api_router, prefix=router_prefix)
    else:
        application.include_router(api_router)

    application.include_router(health_router)

    register_exception_handlers(application)

    if store is None:

        @application.on_event("startup")
        async def _open_document_store() -> None:
            document_store = DocumentStore.from_settings(settings)
            await document_store.ensure_indexes()
            application.state.store = document_store
            logger.info("Document store opened", extra={"database": settings.mongo_database})

        @application.on_event("shutdown")
        async def _close_document_store() -> None:
            document_store: DocumentStore | None = application.state.store
            if document_store is not None:
                document_store.close()
                application.state.store = None
                logger.info("Document store closed")

    return application


app = create_app()


def run() -> None:
    """Convenience entry point for the ``taskboard`` console script."""

    settings: Settings = get_settings()
    uvicorn.run(
        "taskboard.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.reload,
        log_config=None,
    )
