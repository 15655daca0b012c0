"""Abstract base classes for trace backends."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from trace_harness.models.resource import ResourceHandle, ResourceSpec


class TraceQuery(ABC):
    """Capability interface over a trace store's query API."""

    @abstractmethod
    async def query_traces(self, service_name: str) -> Any:
        """Return the raw JSON tree of traces recorded for ``service_name``."""

    @abstractmethod
    def trace_found(self, payload: Any) -> bool:
        """Check whether a query result contains at least one trace."""

    async def trace_visible(self, service_name: str) -> bool:
        """Query the store and report whether a trace for the service is visible."""
        return self.trace_found(await self.query_traces(service_name))


@dataclass(frozen=True, kw_only=True)
class PollSettings:
    """Timing for readiness and trace polls, in seconds."""

    timeout: float
    interval: float
    readiness_timeout: float


class TraceBackend(ABC):
    """A trace store that can be run as an ephemeral resource."""

    @property
    @abstractmethod
    def resource_name(self) -> str:
        """Unique name of the backend's resource."""

    @property
    @abstractmethod
    def service_name(self) -> str:
        """Service name spans are emitted and queried under."""

    @property
    @abstractmethod
    def query(self) -> TraceQuery:
        """Query client for the running backend."""

    @property
    @abstractmethod
    def poll_settings(self) -> PollSettings:
        """Timing used when waiting on this backend."""

    @abstractmethod
    def resource_spec(self) -> ResourceSpec:
        """Describe the resource to provision."""

    @abstractmethod
    def otlp_endpoint(self, handle: ResourceHandle) -> str:
        """OTLP endpoint spans should be exported to."""

    @abstractmethod
    async def is_ready(self, handle: ResourceHandle) -> bool:
        """Check whether the provisioned backend accepts traffic."""
