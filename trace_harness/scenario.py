"""Scenario orchestration: provision, act, poll for the effect, tear down."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Literal

from trace_harness.errors import ProvisionError
from trace_harness.guard import LifecycleGuard
from trace_harness.models.poll import PollOutcome, PollSpec, Predicate
from trace_harness.models.resource import ResourceHandle, ResourceSpec
from trace_harness.models.result import CONDITION_NOT_OBSERVED, ScenarioResult
from trace_harness.poller import ConditionPoller
from trace_harness.provisioner import ResourceProvisioner

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class Scenario:
    """A single end-to-end check against a provisioned resource.

    ``readiness`` and ``condition`` build predicates from the handle of the
    provisioned resource. A resource that never becomes ready is a setup
    failure, not a failed check.
    """

    name: str
    resource_name: str
    resource_spec: ResourceSpec
    action: Callable[[ResourceHandle], Awaitable[None]]
    condition: Callable[[ResourceHandle], Predicate]
    timeout: float = 30.0
    interval: float = 0.5
    readiness: Callable[[ResourceHandle], Predicate] | None = None
    readiness_timeout: float = 30.0


@dataclass(frozen=True, kw_only=True)
class ScenarioRunner:
    """Runs scenarios with guaranteed teardown of their resources."""

    provisioner: ResourceProvisioner
    poller: ConditionPoller = field(default_factory=ConditionPoller)

    async def run(self, scenario: Scenario) -> ScenarioResult:
        """Run ``scenario`` and report whether its condition was observed.

        Errors raised by the action-under-test propagate after teardown.
        """
        guard = LifecycleGuard(provisioner=self.provisioner)
        loop = asyncio.get_running_loop()
        started = loop.time()

        status: Literal["passed", "failed"]
        cause: str | None

        log.info("Running scenario %s", scenario.name)
        try:
            outcome = await guard.with_resource(
                scenario.resource_name,
                scenario.resource_spec,
                lambda handle: self._execute(scenario, handle),
            )
        except ProvisionError as e:
            log.error("Scenario %s setup failed: %s", scenario.name, e)
            status, cause = "failed", f"setup failed: {e}"
        else:
            if outcome.satisfied:
                status, cause = "passed", None
            else:
                status, cause = "failed", CONDITION_NOT_OBSERVED

        return ScenarioResult(
            scenario=scenario.name,
            status=status,
            duration=loop.time() - started,
            cause=cause,
            teardown_errors=tuple(str(error) for error in guard.teardown_errors),
        )

    async def _execute(self, scenario: Scenario, handle: ResourceHandle) -> PollOutcome:
        if scenario.readiness is not None:
            ready = await self.poller.wait(
                PollSpec(
                    predicate=scenario.readiness(handle),
                    timeout=scenario.readiness_timeout,
                    interval=scenario.interval,
                )
            )
            if not ready.satisfied:
                raise ProvisionError(
                    f"{scenario.resource_name} did not become ready within "
                    f"{scenario.readiness_timeout}s"
                )
            log.info("Resource %s is ready", scenario.resource_name)

        await scenario.action(handle)
        log.info("Action completed, waiting for the effect to be observed...")

        return await self.poller.wait(
            PollSpec(
                predicate=scenario.condition(handle),
                timeout=scenario.timeout,
                interval=scenario.interval,
            )
        )
