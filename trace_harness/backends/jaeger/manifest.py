"""Jaeger backend manifest."""

from trace_harness.backends.jaeger.backend import JaegerBackend
from trace_harness.backends.jaeger.config import JaegerConfig
from trace_harness.backends.manifest import BackendManifest

jaeger_manifest = BackendManifest(
    config_cls=JaegerConfig,
    backend_factory=JaegerBackend.from_config,
)
