"""Reusable FastAPI dependencies."""

from __future__ import annotations

import json
from typing import Annotated, Any

from fastapi import Depends, Query, Request

from .core.config import Settings, get_settings
from .db.store import DocumentStore
from .errors import ServerError, ValidationError
from .models import Task, User
from .query import Projection, ReadSpec, translate_projection, translate_query
from .services import TaskService, UserService

SettingsDependency = Annotated[Settings, Depends(get_settings)]

_FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")
_LIST_FIELDS = {"pendingTasks"}


def get_store(request: Request) -> DocumentStore:
    """Return the store handle opened for this application."""

    store = getattr(request.app.state, "store", None)
    if store is None:  # pragma: no cover - guarded by application startup
        raise ServerError()
    return store


StoreDependency = Annotated[DocumentStore, Depends(get_store)]


def get_task_service(store: StoreDependency) -> TaskService:
    return TaskService(store)


def get_user_service(store: StoreDependency) -> UserService:
    return UserService(store)


TaskServiceDependency = Annotated[TaskService, Depends(get_task_service)]
UserServiceDependency = Annotated[UserService, Depends(get_user_service)]


RawQueryParams = dict[str, Any]


def collection_query(
    where: Annotated[str | None, Query(description="JSON filter document.")] = None,
    sort: Annotated[str | None, Query(description="JSON sort document, e.g. {\"name\": 1}.")] = None,
    select: Annotated[str | None, Query(description="JSON projection document.")] = None,
    legacy_filter: Annotated[
        str | None,
        Query(alias="filter", description="Legacy alias for select."),
    ] = None,
    skip: Annotated[str | None, Query(description="Number of documents to skip.")] = None,
    limit: Annotated[str | None, Query(description="Maximum number of documents to return.")] = None,
    count: Annotated[str | None, Query(description="Return the number of matches when true.")] = None,
) -> RawQueryParams:
    """Collect the textual read parameters shared by both collections."""

    return {
        "where": where,
        "sort": sort,
        "select": select,
        "filter": legacy_filter,
        "skip": skip,
        "limit": limit,
        "count": count,
    }


def projection_query(
    select: Annotated[str | None, Query(description="JSON projection document.")] = None,
    legacy_filter: Annotated[
        str | None,
        Query(alias="filter", description="Legacy alias for select."),
    ] = None,
) -> RawQueryParams:
    return {"select": select, "filter": legacy_filter}


CollectionQueryDependency = Annotated[RawQueryParams, Depends(collection_query)]
ProjectionQueryDependency = Annotated[RawQueryParams, Depends(projection_query)]


def get_task_read_spec(params: CollectionQueryDependency, settings: SettingsDependency) -> ReadSpec:
    return translate_query(
        params,
        default_limit=settings.task_default_limit,
        casts=Task.query_casts,
    )


def get_user_read_spec(params: CollectionQueryDependency) -> ReadSpec:
    return translate_query(params, default_limit=None, casts=User.query_casts)


def get_projection(params: ProjectionQueryDependency) -> Projection | None:
    return translate_projection(params)


TaskReadSpecDependency = Annotated[ReadSpec, Depends(get_task_read_spec)]
UserReadSpecDependency = Annotated[ReadSpec, Depends(get_user_read_spec)]
ProjectionDependency = Annotated[Projection | None, Depends(get_projection)]


async def read_payload(request: Request) -> dict[str, Any]:
    """Decode a JSON object or form body into a plain mapping."""

    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if content_type in _FORM_CONTENT_TYPES:
        form = await request.form()
        payload: dict[str, Any] = {}
        for key in form.keys():
            values = form.getlist(key)
            payload[key] = values if key in _LIST_FIELDS else values[-1]
        return payload

    body = await request.body()
    if not body.strip():
        return {}
    try:
        decoded = json.loads(body)
    except ValueError as exc:
        raise ValidationError("Invalid request body") from exc
    if not isinstance(decoded, dict):
        raise ValidationError("Invalid request body")
    return decoded


PayloadDependency = Annotated[dict[str, Any], Depends(read_payload)]


__all__ = [
    "CollectionQueryDependency",
    "PayloadDependency",
    "ProjectionDependency",
    "ProjectionQueryDependency",
    "SettingsDependency",
    "StoreDependency",
    "TaskReadSpecDependency",
    "TaskServiceDependency",
    "UserReadSpecDependency",
    "UserServiceDependency",
    "collection_query",
    "get_projection",
    "get_store",
    "get_task_read_spec",
    "get_task_service",
    "get_user_read_spec",
    "get_user_service",
    "projection_query",
    "read_payload",
]
