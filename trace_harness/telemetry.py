"""Emission of traced units of work."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass, field

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SpanExporter
from opentelemetry.trace import Span, Status, StatusCode

log = logging.getLogger(__name__)


class SpanEmitter[H](ABC):
    """Capability interface over a tracing SDK.

    Generic type H is the SDK's span handle.
    """

    @abstractmethod
    def start_span(self, name: str) -> H:
        """Start a span and return its handle."""

    @abstractmethod
    def add_event(self, handle: H, name: str) -> None:
        """Record a named event on an open span."""

    @abstractmethod
    def end(self, handle: H) -> None:
        """End a span."""

    def record_exception(self, handle: H, error: Exception) -> None:
        """Attach an error to an open span. Emitters may ignore it."""

    def emit(self, span_name: str, event_name: str) -> None:
        """Emit one span carrying one event.

        An error while recording the event is attached to the span and
        re-raised; the span is ended either way.
        """
        span = self.start_span(span_name)
        try:
            self.add_event(span, event_name)
        except Exception as e:
            self.record_exception(span, e)
            raise
        finally:
            self.end(span)


@dataclass(frozen=True, kw_only=True)
class OpenTelemetryEmitter(SpanEmitter[Span]):
    """Emits spans through an OpenTelemetry SDK tracer provider.

    The emitter owns its provider, the process-wide provider is never set.
    """

    provider: TracerProvider = field(repr=False)
    instrumentation_name: str = "trace_harness"

    @classmethod
    @contextmanager
    def with_exporter(
        cls, service_name: str, exporter: SpanExporter
    ) -> Generator["OpenTelemetryEmitter", None, None]:
        """Create an emitter exporting to ``exporter``, shut down on exit."""
        resource = Resource(attributes={SERVICE_NAME: service_name})
        provider = TracerProvider(resource=resource)
        provider.add_span_processor(BatchSpanProcessor(exporter))
        try:
            yield cls(provider=provider)
        finally:
            provider.shutdown()

    @classmethod
    @contextmanager
    def for_otlp(
        cls, service_name: str, endpoint: str
    ) -> Generator["OpenTelemetryEmitter", None, None]:
        """Create an emitter exporting over OTLP/gRPC to ``endpoint``."""
        log.info("Exporting spans for %s to %s", service_name, endpoint)
        exporter = OTLPSpanExporter(endpoint=endpoint, insecure=True)
        with cls.with_exporter(service_name, exporter) as emitter:
            yield emitter

    def start_span(self, name: str) -> Span:
        tracer = self.provider.get_tracer(self.instrumentation_name)
        return tracer.start_span(name)

    def add_event(self, handle: Span, name: str) -> None:
        with trace.use_span(
            handle,
            end_on_exit=False,
            record_exception=False,
            set_status_on_exception=False,
        ):
            handle.add_event(name)

    def end(self, handle: Span) -> None:
        handle.end()

    def record_exception(self, handle: Span, error: Exception) -> None:
        handle.record_exception(error)
        handle.set_status(Status(StatusCode.ERROR, str(error)))

    def flush(self, timeout_millis: int = 30000) -> bool:
        """Export every finished span now. Returns False on timeout."""
        flushed = self.provider.force_flush(timeout_millis)
        if not flushed:
            log.warning("Span export did not finish within %dms", timeout_millis)
        return flushed
