"""Routes handling task CRUD operations."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...deps import (
    PayloadDependency,
    ProjectionDependency,
    TaskReadSpecDependency,
    TaskServiceDependency,
)
from ...schemas import ResponseEnvelope, TaskWrite

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("", response_model=ResponseEnvelope, summary="List tasks")
async def list_tasks(spec: TaskReadSpecDependency, service: TaskServiceDependency) -> ResponseEnvelope:
    """Return the tasks matching the query parameters, or their count."""
    result = await service.list_tasks(spec)
    return ResponseEnvelope(message="OK", data=result)


@router.post(
    "",
    response_model=ResponseEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create a task",
)
async def create_task(payload: PayloadDependency, service: TaskServiceDependency) -> ResponseEnvelope:
    task = await service.create_task(TaskWrite.model_validate(payload))
    return ResponseEnvelope(message="Task created", data=task.to_public())


@router.get("/{task_id}", response_model=ResponseEnvelope, summary="Retrieve a task")
async def read_task(
    task_id: str,
    projection: ProjectionDependency,
    service: TaskServiceDependency,
) -> ResponseEnvelope:
    document = await service.get_task(task_id, projection)
    return ResponseEnvelope(message="OK", data=document)


@router.put("/{task_id}", response_model=ResponseEnvelope, summary="Replace a task")
async def replace_task(
    task_id: str,
    payload: PayloadDependency,
    service: TaskServiceDependency,
) -> ResponseEnvelope:
    """Replace every writable field of the task; omitted optional fields reset to defaults."""
    task = await service.replace_task(task_id, TaskWrite.model_validate(payload))
    return ResponseEnvelope(message="Task updated", data=task.to_public())


@router.delete("/{task_id}", response_model=ResponseEnvelope, summary="Delete a task")
async def delete_task(task_id: str, service: TaskServiceDependency) -> ResponseEnvelope:
    await service.delete_task(task_id)
    return ResponseEnvelope(message="Task deleted", data={})
