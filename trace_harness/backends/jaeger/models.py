"""Pydantic models for Jaeger query API responses."""

from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict


class JaegerTrace(BaseModel):
    """A trace as returned by the Jaeger query API. Only the id is modelled."""

    model_config = ConfigDict(extra="allow")

    traceID: str | None = None


class JaegerTracesResponse(BaseModel):
    """Response from GET /api/traces."""

    model_config = ConfigDict(extra="allow")

    data: Sequence[JaegerTrace] | None = None
