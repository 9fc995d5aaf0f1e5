from __future__ import annotations

from typing import Any

import pytest
from bson import ObjectId

from taskboard.db import DocumentStore
from taskboard.errors import NotFoundError, ValidationError
from taskboard.models import UNASSIGNED_USER_NAME
from taskboard.schemas import TaskWrite, UserWrite
from taskboard.services import TaskService, UserService

pytestmark = pytest.mark.asyncio


async def _task_document(store: DocumentStore, task_id: str) -> dict[str, Any]:
    document = await store.collection("tasks").find_one({"_id": ObjectId(task_id)})
    assert document is not None
    return document


async def _new_task(task_service: TaskService, **overrides: Any) -> str:
    payload: dict[str, Any] = {"name": "Review pull request", "deadline": "2030-03-01"}
    payload.update(overrides)
    task = await task_service.create_task(TaskWrite.model_validate(payload))
    assert task.id is not None
    return task.id


async def test_create_user_claims_pending_tasks(
    store: DocumentStore,
    task_service: TaskService,
    user_service: UserService,
) -> None:
    task_id = await _new_task(task_service, completed=True)

    user = await user_service.create_user(
        UserWrite.model_validate({"name": "Ada", "email": "ada@example.com", "pendingTasks": [task_id]})
    )

    assert user.pending_tasks == [task_id]
    document = await _task_document(store, task_id)
    assert document["assignedUser"] == user.id
    assert document["assignedUserName"] == "Ada"
    assert document["completed"] is False


async def test_create_user_does_not_validate_pending_task_ids(user_service: UserService) -> None:
    unknown = str(ObjectId())

    user = await user_service.create_user(
        UserWrite.model_validate({"name": "Ada", "email": "ada@example.com", "pendingTasks": unknown})
    )

    assert user.pending_tasks == [unknown]


@pytest.mark.parametrize(
    "payload",
    [
        {"name": "", "email": "ada@example.com"},
        {"name": "Ada"},
        {"email": "ada@example.com"},
    ],
)
async def test_create_user_requires_name_and_email(
    user_service: UserService,
    payload: dict[str, Any],
) -> None:
    with pytest.raises(ValidationError) as excinfo:
        await user_service.create_user(UserWrite.model_validate(payload))

    assert excinfo.value.message == "Name and email are required"


async def test_duplicate_email_is_rejected(store: DocumentStore, user_service: UserService) -> None:
    await user_service.create_user(UserWrite(name="Ada", email="ada@example.com"))

    with pytest.raises(ValidationError) as excinfo:
        await user_service.create_user(UserWrite(name="Imposter", email="ada@example.com"))

    assert excinfo.value.message == "Email already exists"
    assert await store.collection("users").count_documents({}) == 1


async def test_replace_user_rejects_unknown_pending_tasks(
    store: DocumentStore,
    task_service: TaskService,
    user_service: UserService,
) -> None:
    user = await user_service.create_user(UserWrite(name="Ada", email="ada@example.com"))
    task_id = await _new_task(task_service, assignedUser=user.id)

    with pytest.raises(ValidationError) as excinfo:
        await user_service.replace_user(
            user.id,
            UserWrite.model_validate(
                {"name": "Ada", "email": "ada@example.com", "pendingTasks": [str(ObjectId())]}
            ),
        )

    assert excinfo.value.message == "One or more pendingTasks IDs are invalid"
    document = await _task_document(store, task_id)
    assert document["assignedUser"] == user.id
    stored = await user_service.get_user(user.id)
    assert stored["pendingTasks"] == [task_id]


async def test_replace_user_releases_dropped_tasks_and_claims_new_ones(
    store: DocumentStore,
    task_service: TaskService,
    user_service: UserService,
) -> None:
    user = await user_service.create_user(UserWrite(name="Ada", email="ada@example.com"))
    dropped = await _new_task(task_service, assignedUser=user.id)
    kept = await _new_task(task_service, assignedUser=user.id)
    claimed = await _new_task(task_service)

    updated = await user_service.replace_user(
        user.id,
        UserWrite.model_validate(
            {"name": "Ada L.", "email": "ada@example.com", "pendingTasks": [kept, claimed]}
        ),
    )

    assert updated.pending_tasks == [kept, claimed]
    dropped_document = await _task_document(store, dropped)
    assert dropped_document["assignedUser"] == ""
    assert dropped_document["assignedUserName"] == UNASSIGNED_USER_NAME
    for task_id in (kept, claimed):
        document = await _task_document(store, task_id)
        assert document["assignedUser"] == user.id
        assert document["assignedUserName"] == "Ada L."


async def test_replace_user_releases_completed_tasks_missing_from_pending_list(
    store: DocumentStore,
    task_service: TaskService,
    user_service: UserService,
) -> None:
    user = await user_service.create_user(UserWrite(name="Ada", email="ada@example.com"))
    finished = await _new_task(task_service, assignedUser=user.id, completed=True)

    await user_service.replace_user(user.id, UserWrite(name="Ada", email="ada@example.com"))

    document = await _task_document(store, finished)
    assert document["assignedUser"] == ""


async def test_replace_user_email_conflict(user_service: UserService) -> None:
    await user_service.create_user(UserWrite(name="Ada", email="ada@example.com"))
    grace = await user_service.create_user(UserWrite(name="Grace", email="grace@example.com"))

    with pytest.raises(ValidationError) as excinfo:
        await user_service.replace_user(grace.id, UserWrite(name="Grace", email="ada@example.com"))

    assert excinfo.value.message == "Email already exists"


async def test_replace_user_may_keep_its_own_email(user_service: UserService) -> None:
    user = await user_service.create_user(UserWrite(name="Ada", email="ada@example.com"))

    updated = await user_service.replace_user(user.id, UserWrite(name="Ada King", email="ada@example.com"))

    assert updated.name == "Ada King"


async def test_replace_unknown_user_raises_not_found(user_service: UserService) -> None:
    with pytest.raises(NotFoundError):
        await user_service.replace_user(str(ObjectId()), UserWrite(name="Ada", email="ada@example.com"))


async def test_delete_user_unassigns_every_task(
    store: DocumentStore,
    task_service: TaskService,
    user_service: UserService,
) -> None:
    user = await user_service.create_user(UserWrite(name="Ada", email="ada@example.com"))
    open_task = await _new_task(task_service, assignedUser=user.id)
    done_task = await _new_task(task_service, assignedUser=user.id, completed=True)

    await user_service.delete_user(user.id)

    for task_id in (open_task, done_task):
        document = await _task_document(store, task_id)
        assert document["assignedUser"] == ""
        assert document["assignedUserName"] == UNASSIGNED_USER_NAME
    with pytest.raises(NotFoundError):
        await user_service.get_user(user.id)


async def test_delete_unknown_user_raises_not_found(user_service: UserService) -> None:
    with pytest.raises(NotFoundError):
        await user_service.delete_user(str(ObjectId()))
