"""Idempotent provisioning of named backing resources."""

import asyncio
import logging
from dataclasses import dataclass, field

from trace_harness.errors import NameConflictError, ProvisionError
from trace_harness.models.resource import PortBinding, ResourceHandle, ResourceSpec
from trace_harness.runtime.base import SCOPE_LABEL, ContainerRuntime, ResourceDescriptor

log = logging.getLogger(__name__)


def require_name(name: str) -> None:
    """Reject an empty resource name."""
    if not name:
        raise ValueError("Resource name must not be empty")


@dataclass(kw_only=True)
class ResourceProvisioner:
    """Ensures exactly one resource exists per name.

    Callers in this process are serialized per name with an ``asyncio.Lock``,
    dropped again once no caller holds or waits for it. Callers in other
    processes race on the runtime's name uniqueness: losing ``create`` with a
    conflict adopts the winner's resource.
    """

    runtime: ContainerRuntime
    scope: str = "trace-harness"
    _locks: dict[str, asyncio.Lock] = field(default_factory=dict, init=False, repr=False)
    _users: dict[str, int] = field(default_factory=dict, init=False, repr=False)

    async def ensure(self, name: str, spec: ResourceSpec) -> ResourceHandle:
        """Return a handle to the resource named ``name``, creating it if absent.

        Raises:
            ValueError: If ``name`` is empty
            ProvisionError: If the runtime is unreachable or creation fails

        """
        require_name(name)

        lock = self._locks.setdefault(name, asyncio.Lock())
        self._users[name] = self._users.get(name, 0) + 1
        try:
            async with lock:
                return await self._ensure(name, spec)
        except ProvisionError:
            raise
        except (RuntimeError, OSError) as e:
            raise ProvisionError(f"Failed to provision {name}: {e}") from e
        finally:
            self._users[name] -= 1
            if not self._users[name]:
                del self._users[name]
                del self._locks[name]

    async def _ensure(self, name: str, spec: ResourceSpec) -> ResourceHandle:
        if (existing := await self._find(name)) is not None:
            log.info("Reusing existing resource %s (%s)", name, existing.id)
            return await self._adopt(existing, spec)

        labels = {**spec.labels, SCOPE_LABEL: self.scope}
        try:
            resource_id = await self.runtime.create(
                name, spec.model_copy(update={"labels": labels})
            )
        except NameConflictError:
            log.info("Resource %s was created concurrently, adopting it", name)
            if (existing := await self._find(name)) is None:
                raise ProvisionError(
                    f"Resource {name} reported as existing but was not found"
                ) from None
            return await self._adopt(existing, spec)

        await self.runtime.start(resource_id)
        log.info("Provisioned resource %s (%s) from %s", name, resource_id, spec.image)
        return ResourceHandle(id=resource_id, name=name, ports=spec.ports)

    async def _find(self, name: str) -> ResourceDescriptor | None:
        matches = await self.runtime.list(name=name)
        return matches[0] if matches else None

    async def _adopt(
        self, existing: ResourceDescriptor, spec: ResourceSpec
    ) -> ResourceHandle:
        if not existing.running:
            log.info("Starting stopped resource %s (%s)", existing.name, existing.id)
            await self.runtime.start(existing.id)
        return ResourceHandle(
            id=existing.id,
            name=existing.name,
            ports=[_published(existing, binding) for binding in spec.ports],
        )


def _published(existing: ResourceDescriptor, binding: PortBinding) -> PortBinding:
    """Point a declared binding at the host port the resource actually publishes."""
    host_port = existing.published_ports.get(f"{binding.port}/{binding.protocol}")
    if host_port is None:
        log.warning(
            "Resource %s does not publish %s port %d/%s",
            existing.name,
            binding.name,
            binding.port,
            binding.protocol,
        )
        return binding
    if host_port != binding.port:
        log.warning(
            "Resource %s publishes %s port %d/%s on host port %d",
            existing.name,
            binding.name,
            binding.port,
            binding.protocol,
            host_port,
        )
        return binding.model_copy(update={"port": host_port})
    return binding
