"""Common system-level response models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class RootResponse(BaseModel):
    """Metadata describing the running service."""

    name: str = Field(description="Human-friendly service name")
    environment: str = Field(description="Deployment environment identifier")
    version: str = Field(description="Semantic version of the service")
    api_prefix: str = Field(description="Base path for API routes")


class HealthCheckResponse(BaseModel):
    """Payload returned by the health check endpoint."""

    status: str = Field(default="ok", description="Service health indicator")
    database: str = Field(default="ok", description="Document store reachability")


class ResponseEnvelope(BaseModel):
    """Envelope wrapping every API response, successful or not."""

    message: str = Field(description="Human-readable outcome of the request")
    data: Any = Field(
        default_factory=dict,
        description="Response payload; an empty object on errors and payload-less successes.",
    )


__all__ = ["HealthCheckResponse", "ResponseEnvelope", "RootResponse"]
