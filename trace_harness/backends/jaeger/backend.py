"""Jaeger backend implementation."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

import aiohttp

from trace_harness.backends.base import PollSettings, TraceBackend
from trace_harness.backends.jaeger.config import JaegerConfig
from trace_harness.backends.jaeger.query import JaegerTraceQuery
from trace_harness.models.resource import PortBinding, ResourceHandle, ResourceSpec

log = logging.getLogger(__name__)

QUERY_ENDPOINT = "query"
OTLP_GRPC_ENDPOINT = "otlp-grpc"
ADMIN_ENDPOINT = "admin"


@dataclass(frozen=True, kw_only=True)
class JaegerBackend(TraceBackend):
    """Jaeger all-in-one run as a single container."""

    config: JaegerConfig
    session: aiohttp.ClientSession = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: JaegerConfig
    ) -> AsyncGenerator["JaegerBackend", None]:
        """Create backend with managed session lifecycle."""
        timeout = aiohttp.ClientTimeout(total=config.request_timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            yield cls(config=config, session=session)

    @property
    def resource_name(self) -> str:
        return self.config.container_name

    @property
    def service_name(self) -> str:
        return self.config.service_name

    @property
    def query(self) -> JaegerTraceQuery:
        return JaegerTraceQuery(
            base_url=f"http://{self.config.host}:{self.config.query_port}",
            session=self.session,
        )

    @property
    def poll_settings(self) -> PollSettings:
        return PollSettings(
            timeout=self.config.timeout,
            interval=self.config.interval,
            readiness_timeout=self.config.readiness_timeout,
        )

    def resource_spec(self) -> ResourceSpec:
        return ResourceSpec(
            image=self.config.image,
            ports=(
                PortBinding(name=QUERY_ENDPOINT, port=self.config.query_port),
                PortBinding(name=OTLP_GRPC_ENDPOINT, port=self.config.otlp_grpc_port),
                PortBinding(name=ADMIN_ENDPOINT, port=self.config.admin_port),
            ),
            environment={"COLLECTOR_OTLP_ENABLED": "true"},
        )

    def otlp_endpoint(self, handle: ResourceHandle) -> str:
        port = handle.endpoint(OTLP_GRPC_ENDPOINT).port
        return f"http://{self.config.host}:{port}"

    async def is_ready(self, handle: ResourceHandle) -> bool:
        """Check the admin port's health endpoint."""
        port = handle.endpoint(ADMIN_ENDPOINT).port
        url = f"http://{self.config.host}:{port}/"

        async with self.session.get(url) as response:
            if response.status != 200:
                log.info("Jaeger health check returned status=%s", response.status)
                return False
        return True
