"""The trace smoke scenario: one span emitted, then seen in the trace store."""

import asyncio
import functools
import logging
from collections.abc import Callable
from contextlib import AbstractContextManager

from trace_harness.backends.base import TraceBackend
from trace_harness.models.poll import Predicate
from trace_harness.models.resource import ResourceHandle
from trace_harness.scenario import Scenario
from trace_harness.telemetry import OpenTelemetryEmitter

log = logging.getLogger(__name__)

type EmitterFactory = Callable[[str, str], AbstractContextManager[OpenTelemetryEmitter]]

DEFAULT_SPAN_NAME = "Test span"
DEFAULT_EVENT_NAME = "Test event"


def trace_smoke_scenario(
    backend: TraceBackend,
    *,
    span_name: str = DEFAULT_SPAN_NAME,
    event_name: str = DEFAULT_EVENT_NAME,
    emitter_factory: EmitterFactory = OpenTelemetryEmitter.for_otlp,
) -> Scenario:
    """Build a scenario that emits one span and waits for the backend to show it."""
    settings = backend.poll_settings

    def _emit(endpoint: str) -> None:
        with emitter_factory(backend.service_name, endpoint) as emitter:
            emitter.emit(span_name, event_name)
            emitter.flush()

    async def action(handle: ResourceHandle) -> None:
        endpoint = backend.otlp_endpoint(handle)
        log.info("Emitting span '%s' to %s", span_name, endpoint)
        # The SDK exports synchronously on flush and shutdown.
        await asyncio.to_thread(_emit, endpoint)

    def readiness(handle: ResourceHandle) -> Predicate:
        return functools.partial(backend.is_ready, handle)

    def condition(handle: ResourceHandle) -> Predicate:
        return functools.partial(backend.query.trace_visible, backend.service_name)

    return Scenario(
        name=f"{backend.resource_name}-trace-smoke",
        resource_name=backend.resource_name,
        resource_spec=backend.resource_spec(),
        action=action,
        condition=condition,
        timeout=settings.timeout,
        interval=settings.interval,
        readiness=readiness,
        readiness_timeout=settings.readiness_timeout,
    )
