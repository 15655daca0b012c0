"""Module test: the trace smoke scenario against a real Jaeger container."""

import json

import docker
import pytest

from trace_harness.cli import run
from trace_harness.runtime.base import SCOPE_LABEL

pytestmark = pytest.mark.docker

CONTAINER_NAME = "trace-harness-module-jaeger"


async def test_span_reaches_jaeger_and_container_is_removed(
    docker_client: docker.DockerClient,
    scope: str,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Provisions Jaeger, emits a span, sees it in the query API, then cleans up."""
    config = json.dumps(
        {
            "container_name": CONTAINER_NAME,
            "service_name": "trace-harness-module",
            "timeout": 60,
            "interval": 1,
            "readiness_timeout": 120,
        }
    )

    exit_code = await run(backend_key="jaeger", backend_config_json=config, scope=scope)

    output = json.loads(capsys.readouterr().out)
    assert output["status"] == "passed", output
    assert output["teardown_errors"] == []
    assert exit_code == 0

    leftovers = docker_client.containers.list(
        all=True, filters={"label": f"{SCOPE_LABEL}={scope}"}
    )
    assert leftovers == []
    named = docker_client.containers.list(all=True, filters={"name": CONTAINER_NAME})
    assert named == []
