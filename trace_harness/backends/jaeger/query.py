"""Jaeger query API client."""

import logging
from dataclasses import dataclass, field
from typing import Any

import aiohttp
from pydantic import ValidationError

from trace_harness.backends.base import TraceQuery
from trace_harness.backends.jaeger.models import JaegerTracesResponse

log = logging.getLogger(__name__)

JSON_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


@dataclass(frozen=True, kw_only=True)
class JaegerTraceQuery(TraceQuery):
    """Queries traces from the Jaeger HTTP API."""

    base_url: str
    session: aiohttp.ClientSession = field(repr=False)

    async def query_traces(self, service_name: str) -> Any:
        """Fetch traces for a service from /api/traces."""
        url = f"{self.base_url}/api/traces"
        params = {"service": service_name}

        async with self.session.get(
            url, params=params, headers=JSON_HEADERS
        ) as response:
            if response.status != 200:
                text = await response.text()
                raise RuntimeError(
                    f"Failed to query traces: {response.status} {text}"
                )
            return await response.json()

    def trace_found(self, payload: Any) -> bool:
        """True when the first trace in ``data`` carries a traceID."""
        try:
            traces = JaegerTracesResponse.model_validate(payload)
        except ValidationError:
            log.debug("Unexpected trace query payload: %r", payload)
            return False

        if not traces.data:
            return False
        return traces.data[0].traceID is not None
