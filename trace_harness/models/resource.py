"""Models describing provisioned backing resources."""

from collections.abc import Mapping, Sequence
from typing import Literal

from pydantic import Field

from trace_harness.models.base import Model


class PortBinding(Model):
    """A named network endpoint exposed by a resource.

    A spec publishes the port on the host under the same number. On a handle
    the port is the host port the resource is reachable on.
    """

    name: str = Field(..., min_length=1, description="Logical endpoint name")
    protocol: Literal["tcp", "udp"] = Field(default="tcp", description="Protocol")
    port: int = Field(..., ge=1, le=65535, description="Published port")


class ResourceSpec(Model):
    """Everything the runtime needs to create a resource."""

    image: str = Field(..., min_length=1, description="Container image reference")
    ports: Sequence[PortBinding] = Field(
        default_factory=tuple, description="Endpoints to expose, in order"
    )
    environment: Mapping[str, str] = Field(
        default_factory=dict, description="Environment variables"
    )
    labels: Mapping[str, str] = Field(
        default_factory=dict, description="Extra labels attached on creation"
    )


class ResourceHandle(Model):
    """A provisioned resource: runtime identifier plus declared endpoints."""

    id: str = Field(..., min_length=1, description="Runtime resource identifier")
    name: str = Field(..., min_length=1, description="Unique logical name")
    ports: Sequence[PortBinding] = Field(default_factory=tuple)

    def endpoint(self, name: str) -> PortBinding:
        """Return the port binding registered under ``name``."""
        for binding in self.ports:
            if binding.name == name:
                return binding
        raise KeyError(f"Resource {self.name} has no endpoint named '{name}'")
