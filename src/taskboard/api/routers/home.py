"""Service metadata served at the API root."""

from __future__ import annotations

from ...deps import SettingsDependency
from ...schemas.system import ResponseEnvelope, RootResponse


async def read_service_metadata(settings: SettingsDependency) -> ResponseEnvelope:
    """Expose minimal service metadata for API clients."""

    metadata = RootResponse(
        name=settings.project_name,
        environment=settings.environment,
        version=settings.version,
        api_prefix=settings.api_prefix,
    )
    return ResponseEnvelope(message="OK", data=metadata.model_dump())
