"""Jaeger trace backend."""

from trace_harness.backends.jaeger.backend import JaegerBackend
from trace_harness.backends.jaeger.config import JaegerConfig
from trace_harness.backends.jaeger.manifest import jaeger_manifest
from trace_harness.backends.jaeger.query import JaegerTraceQuery

__all__ = ["JaegerBackend", "JaegerConfig", "JaegerTraceQuery", "jaeger_manifest"]
