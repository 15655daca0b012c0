"""Abstract base class for container runtimes."""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from trace_harness.models.resource import ResourceSpec

SCOPE_LABEL = "trace_harness.scope"


@dataclass(frozen=True, kw_only=True)
class ResourceDescriptor:
    """A resource as reported by the runtime."""

    id: str
    name: str
    status: str
    labels: Mapping[str, str] = field(default_factory=dict)
    # "<port>/<protocol>" -> published host port
    published_ports: Mapping[str, int] = field(default_factory=dict)

    @property
    def running(self) -> bool:
        return self.status == "running"


class ContainerRuntime(ABC):
    """Capability interface over a container or process runtime.

    Implementations raise ``NameConflictError`` from ``create`` when the name
    is taken, and ``RuntimeError`` (or a subclass) for any other failure.
    """

    @abstractmethod
    async def list(
        self,
        name: str | None = None,
        labels: Mapping[str, str] | None = None,
    ) -> Sequence[ResourceDescriptor]:
        """List resources, optionally filtered by exact name and/or labels.

        Stopped resources are included.
        """

    @abstractmethod
    async def create(self, name: str, spec: ResourceSpec) -> str:
        """Create a resource without starting it and return its identifier."""

    @abstractmethod
    async def start(self, resource_id: str) -> None:
        """Start a created or stopped resource."""

    @abstractmethod
    async def stop(self, resource_id: str) -> None:
        """Stop a running resource. Stopping a stopped resource is a no-op."""

    @abstractmethod
    async def remove(self, resource_id: str) -> None:
        """Remove a resource, even one that could not be stopped."""
