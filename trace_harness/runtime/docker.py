"""Docker implementation of the container runtime."""

import asyncio
import logging
from collections.abc import AsyncGenerator, Mapping, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

import docker
from docker.errors import APIError, DockerException, ImageNotFound, NotFound
from docker.models.containers import Container

from trace_harness.errors import NameConflictError
from trace_harness.models.resource import ResourceSpec
from trace_harness.runtime.base import ContainerRuntime, ResourceDescriptor

log = logging.getLogger(__name__)


class DockerRuntimeError(RuntimeError):
    """Raised when the Docker daemon rejects a request or cannot be reached."""


def _descriptor(container: Container) -> ResourceDescriptor:
    return ResourceDescriptor(
        id=container.id,
        name=container.name,
        status=container.status,
        labels=dict(container.labels or {}),
        published_ports=_published_ports(container),
    )


def _published_ports(container: Container) -> dict[str, int]:
    bindings = container.attrs.get("HostConfig", {}).get("PortBindings") or {}
    return {
        key: int(hosts[0]["HostPort"])
        for key, hosts in bindings.items()
        if hosts and hosts[0].get("HostPort")
    }


@dataclass(frozen=True, kw_only=True)
class DockerRuntime(ContainerRuntime):
    """Container runtime backed by the Docker SDK.

    The SDK is blocking, so every call is moved to a worker thread.
    """

    client: docker.DockerClient = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def from_env(cls) -> AsyncGenerator["DockerRuntime", None]:
        """Create a runtime from DOCKER_HOST and friends, closing it on exit."""
        try:
            client = await asyncio.to_thread(docker.from_env)
            await asyncio.to_thread(client.ping)
        except DockerException as e:
            raise DockerRuntimeError(f"Docker daemon is not reachable: {e}") from e

        log.info("Docker connection established")
        try:
            yield cls(client=client)
        finally:
            client.close()

    async def list(
        self,
        name: str | None = None,
        labels: Mapping[str, str] | None = None,
    ) -> Sequence[ResourceDescriptor]:
        """List containers, including stopped ones."""
        filters: dict[str, str | list[str]] = {}
        if name is not None:
            filters["name"] = name
        if labels:
            filters["label"] = [f"{key}={value}" for key, value in labels.items()]

        try:
            containers = await asyncio.to_thread(
                self.client.containers.list, all=True, filters=filters
            )
        except DockerException as e:
            raise DockerRuntimeError(f"Failed to list containers: {e}") from e

        # The daemon's name filter matches substrings.
        return [
            _descriptor(container)
            for container in containers
            if name is None or container.name == name
        ]

    async def create(self, name: str, spec: ResourceSpec) -> str:
        """Create a container publishing every declared port on the same host port."""
        ports = {f"{p.port}/{p.protocol}": p.port for p in spec.ports}

        def _create() -> Container:
            kwargs = {
                "name": name,
                "ports": ports,
                "environment": dict(spec.environment),
                "labels": dict(spec.labels),
                "detach": True,
            }
            try:
                return self.client.containers.create(spec.image, **kwargs)
            except ImageNotFound:
                log.info("Pulling image %s", spec.image)
                self.client.images.pull(spec.image)
                return self.client.containers.create(spec.image, **kwargs)

        try:
            container = await asyncio.to_thread(_create)
        except APIError as e:
            if e.status_code == 409:
                raise NameConflictError(f"Container {name} already exists") from e
            raise DockerRuntimeError(f"Failed to create container {name}: {e}") from e
        except DockerException as e:
            raise DockerRuntimeError(f"Failed to create container {name}: {e}") from e

        log.info(
            "Created container %s (%s) from %s", name, container.short_id, spec.image
        )
        return str(container.id)

    async def start(self, resource_id: str) -> None:
        await self._call(resource_id, "start")

    async def stop(self, resource_id: str) -> None:
        await self._call(resource_id, "stop")

    async def remove(self, resource_id: str) -> None:
        """Force-remove a container, running or not. A missing one is not an error."""
        await self._call(resource_id, "remove", missing_ok=True, force=True)

    async def _call(
        self,
        resource_id: str,
        action: str,
        *,
        missing_ok: bool = False,
        **kwargs: Any,
    ) -> None:
        def _run() -> None:
            container = self.client.containers.get(resource_id)
            getattr(container, action)(**kwargs)

        try:
            await asyncio.to_thread(_run)
        except NotFound as e:
            if missing_ok:
                log.debug("Container %s already gone", resource_id)
                return
            raise DockerRuntimeError(f"Container {resource_id} not found") from e
        except DockerException as e:
            raise DockerRuntimeError(
                f"Failed to {action} container {resource_id}: {e}"
            ) from e
