"""Fixtures for module tests against a real Docker daemon."""

from collections.abc import Generator

import docker
import pytest
from docker.errors import DockerException


@pytest.fixture(scope="session")
def docker_client() -> Generator[docker.DockerClient, None, None]:
    """Docker client, skipping the module tests when no daemon is reachable."""
    try:
        client = docker.from_env()
        client.ping()
    except DockerException as e:
        pytest.skip(f"Docker is not available: {e}")

    yield client
    client.close()


@pytest.fixture
def scope(request: pytest.FixtureRequest) -> str:
    """Ownership scope unique to the test."""
    return f"module-{request.node.name}"
