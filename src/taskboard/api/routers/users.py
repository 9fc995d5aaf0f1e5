"""Routes handling user CRUD operations."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...deps import (
    PayloadDependency,
    ProjectionDependency,
    UserReadSpecDependency,
    UserServiceDependency,
)
from ...schemas import ResponseEnvelope, UserWrite

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=ResponseEnvelope, summary="List users")
async def list_users(spec: UserReadSpecDependency, service: UserServiceDependency) -> ResponseEnvelope:
    """Return the users matching the query parameters, or their count."""
    result = await service.list_users(spec)
    return ResponseEnvelope(message="OK", data=result)


@router.post(
    "",
    response_model=ResponseEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user",
)
async def create_user(payload: PayloadDependency, service: UserServiceDependency) -> ResponseEnvelope:
    user = await service.create_user(UserWrite.model_validate(payload))
    return ResponseEnvelope(message="User created", data=user.to_public())


@router.get("/{user_id}", response_model=ResponseEnvelope, summary="Retrieve a user")
async def read_user(
    user_id: str,
    projection: ProjectionDependency,
    service: UserServiceDependency,
) -> ResponseEnvelope:
    document = await service.get_user(user_id, projection)
    return ResponseEnvelope(message="OK", data=document)


@router.put("/{user_id}", response_model=ResponseEnvelope, summary="Replace a user")
async def replace_user(
    user_id: str,
    payload: PayloadDependency,
    service: UserServiceDependency,
) -> ResponseEnvelope:
    """Replace the user and re-point the tasks entering and leaving its pending list."""
    user = await service.replace_user(user_id, UserWrite.model_validate(payload))
    return ResponseEnvelope(message="User updated", data=user.to_public())


@router.delete("/{user_id}", response_model=ResponseEnvelope, summary="Delete a user")
async def delete_user(user_id: str, service: UserServiceDependency) -> ResponseEnvelope:
    await service.delete_user(user_id)
    return ResponseEnvelope(message="User deleted", data={})
