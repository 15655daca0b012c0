"""Scoped acquisition and guaranteed teardown of provisioned resources."""

import inspect
import logging
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

from trace_harness.errors import TeardownError
from trace_harness.models.resource import ResourceHandle, ResourceSpec
from trace_harness.provisioner import ResourceProvisioner, require_name
from trace_harness.runtime.base import SCOPE_LABEL

log = logging.getLogger(__name__)


@dataclass(kw_only=True)
class LifecycleGuard:
    """Provisions a resource for the duration of a block and always tears down.

    Teardown covers every resource carrying the provisioner's scope label,
    plus the resource handed to the block (which may have been adopted
    without the label). Teardown failures are logged and collected in
    ``teardown_errors``; they never replace the block's own outcome.
    """

    provisioner: ResourceProvisioner
    teardown_errors: list[TeardownError] = field(default_factory=list)

    @asynccontextmanager
    async def acquire(
        self, name: str, spec: ResourceSpec
    ) -> AsyncGenerator[ResourceHandle, None]:
        """Provision ``name`` and yield its handle, tearing down on exit."""
        require_name(name)
        try:
            handle = await self.provisioner.ensure(name, spec)
        except BaseException:
            # A failed start can leave a created resource behind.
            await self.teardown()
            raise

        try:
            yield handle
        finally:
            await self.teardown(handle)

    async def with_resource[T](
        self,
        name: str,
        spec: ResourceSpec,
        body: Callable[[ResourceHandle], T | Awaitable[T]],
    ) -> T:
        """Run ``body`` with a provisioned resource and return its result."""
        async with self.acquire(name, spec) as handle:
            result = body(handle)
            if inspect.isawaitable(result):
                return await result
            return result

    async def teardown(self, handle: ResourceHandle | None = None) -> None:
        """Stop and remove every resource owned by this guard's scope."""
        runtime = self.provisioner.runtime
        scope = self.provisioner.scope
        resource_ids: list[str] = [handle.id] if handle is not None else []

        try:
            owned = await runtime.list(labels={SCOPE_LABEL: scope})
        except Exception as e:
            self._record(TeardownError(f"scope {scope}", f"listing failed: {e}"), e)
            owned = []

        for resource in owned:
            if resource.id not in resource_ids:
                resource_ids.append(resource.id)

        for resource_id in resource_ids:
            # A resource that refuses to stop is still removed.
            try:
                await runtime.stop(resource_id)
            except Exception as e:
                self._record(TeardownError(resource_id, f"stop failed: {e}"), e)

            try:
                await runtime.remove(resource_id)
            except Exception as e:
                self._record(TeardownError(resource_id, f"remove failed: {e}"), e)
            else:
                log.info("Removed resource %s", resource_id)

    def _record(self, error: TeardownError, cause: Exception) -> None:
        error.__cause__ = cause
        log.error("%s", error, exc_info=cause)
        self.teardown_errors.append(error)
