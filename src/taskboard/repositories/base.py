"""Base repository implementation over motor collections."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Generic, Protocol, TypeVar

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection

from ..db.store import DocumentStore
from ..models import ensure_tzaware, to_object_id
from ..query import ReadSpec


class StoredModel(Protocol):
    collection_name: str
    id: str | None

    def to_document(self) -> dict[str, Any]: ...  # pragma: no cover - interface definition

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> Any: ...  # pragma: no cover - interface definition


ModelType = TypeVar("ModelType", bound=StoredModel)


def _normalise_value(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return ensure_tzaware(value)
    if isinstance(value, list):
        return [_normalise_value(item) for item in value]
    if isinstance(value, dict):
        return {key: _normalise_value(item) for key, item in value.items()}
    return value


def normalise_document(document: dict[str, Any]) -> dict[str, Any]:
    """Render identifiers as strings and timestamps as UTC-aware values."""

    return {key: _normalise_value(value) for key, value in document.items()}


class BaseRepository(Generic[ModelType]):
    """Provide shared persistence helpers for repositories."""

    def __init__(self, store: DocumentStore, model_type: type[ModelType]) -> None:
        self._model_type = model_type
        self._collection = store.collection(model_type.collection_name)

    @property
    def collection(self) -> AsyncIOMotorCollection:
        """Return the collection associated with the repository."""
        return self._collection

    async def find(self, spec: ReadSpec) -> list[dict[str, Any]]:
        """Return raw documents matching ``spec``, honouring projection and paging."""
        cursor = self._collection.find(
            spec.mongo_filter,
            spec.mongo_projection,
            sort=spec.mongo_sort,
            skip=spec.skip,
            limit=spec.limit or 0,
        )
        documents = await cursor.to_list(length=None)
        return [normalise_document(document) for document in documents]

    async def count(self, filter_document: dict[str, Any]) -> int:
        return int(await self._collection.count_documents(filter_document))

    async def get_document(
        self,
        entity_id: str,
        projection: dict[str, int] | None = None,
    ) -> dict[str, Any] | None:
        """Retrieve a raw, optionally projected document by identifier."""
        object_id = to_object_id(entity_id)
        if object_id is None:
            return None
        document = await self._collection.find_one({"_id": object_id}, projection)
        return None if document is None else normalise_document(document)

    async def get(self, entity_id: str) -> ModelType | None:
        """Retrieve a model instance by its identifier."""
        document = await self.get_document(entity_id)
        if document is None:
            return None
        return self._model_type.from_document(document)

    async def add(self, instance: ModelType) -> ModelType:
        """Insert a new document and record its store-assigned identifier."""
        result = await self._collection.insert_one(instance.to_document())
        instance.id = str(result.inserted_id)
        return instance

    async def replace(self, instance: ModelType) -> bool:
        """Overwrite the stored document with the instance's full state."""
        object_id = to_object_id(instance.id)
        if object_id is None:
            return False
        result = await self._collection.replace_one({"_id": object_id}, instance.to_document())
        return result.matched_count > 0

    async def delete(self, entity_id: str) -> bool:
        object_id = to_object_id(entity_id)
        if object_id is None:
            return False
        result = await self._collection.delete_one({"_id": object_id})
        return result.deleted_count > 0


def object_ids(values: list[str]) -> list[ObjectId]:
    """Convert the convertible identifiers in ``values``; others cannot match any document."""

    converted = (to_object_id(value) for value in values)
    return [value for value in converted if value is not None]


__all__ = ["BaseRepository", "normalise_document", "object_ids"]
