"""Tests for LifecycleGuard."""

import logging

import pytest

from trace_harness.errors import ProvisionError
from trace_harness.guard import LifecycleGuard
from trace_harness.models.resource import ResourceHandle, ResourceSpec
from trace_harness.provisioner import ResourceProvisioner
from trace_harness.runtime.base import SCOPE_LABEL
from trace_harness.testing.factories import ResourceSpecFactory
from trace_harness.testing.runtime import InMemoryRuntime


@pytest.fixture
def runtime() -> InMemoryRuntime:
    """Create an empty in-memory runtime."""
    return InMemoryRuntime()


@pytest.fixture
def guard(runtime: InMemoryRuntime) -> LifecycleGuard:
    """Create guard over the in-memory runtime."""
    provisioner = ResourceProvisioner(runtime=runtime, scope="unit")
    return LifecycleGuard(provisioner=provisioner)


@pytest.fixture
def spec() -> ResourceSpec:
    """Create a resource spec."""
    return ResourceSpecFactory.build()


async def test_returns_body_result_and_tears_down(
    guard: LifecycleGuard, runtime: InMemoryRuntime, spec: ResourceSpec
) -> None:
    """Returns the body's value and removes the resource afterwards."""
    seen: list[ResourceHandle] = []

    def _body(handle: ResourceHandle) -> str:
        seen.append(handle)
        assert handle.id in runtime.resources
        return "done"

    result = await guard.with_resource("svc", spec, _body)

    assert result == "done"
    assert runtime.resources == {}
    assert runtime.calls_for("stop") == [seen[0].id]
    assert runtime.calls_for("remove") == [seen[0].id]


async def test_awaits_async_body(
    guard: LifecycleGuard, runtime: InMemoryRuntime, spec: ResourceSpec
) -> None:
    """Coroutine bodies are awaited before teardown."""

    async def _body(handle: ResourceHandle) -> str:
        return handle.name

    assert await guard.with_resource("svc", spec, _body) == "svc"
    assert runtime.resources == {}


async def test_tears_down_exactly_once_when_body_raises(
    guard: LifecycleGuard, runtime: InMemoryRuntime, spec: ResourceSpec
) -> None:
    """Body errors propagate and the resource is removed once."""

    def _body(handle: ResourceHandle) -> None:
        raise AssertionError("scenario failed")

    with pytest.raises(AssertionError, match="scenario failed"):
        await guard.with_resource("svc", spec, _body)

    assert runtime.resources == {}
    assert len(runtime.calls_for("stop")) == 1
    assert len(runtime.calls_for("remove")) == 1


async def test_removes_every_resource_in_scope(
    guard: LifecycleGuard, runtime: InMemoryRuntime, spec: ResourceSpec
) -> None:
    """Leftovers carrying the scope label are removed too, others are kept."""
    leftover = runtime.add("old", labels={SCOPE_LABEL: "unit"})
    unrelated = runtime.add("db", labels={SCOPE_LABEL: "other"})

    await guard.with_resource("svc", spec, lambda handle: None)

    assert leftover.id not in runtime.resources
    assert set(runtime.resources) == {unrelated.id}


async def test_removes_adopted_resource_without_label(
    guard: LifecycleGuard, runtime: InMemoryRuntime, spec: ResourceSpec
) -> None:
    """A pre-existing resource used by the body is removed even without the label."""
    existing = runtime.add("svc")

    await guard.with_resource("svc", spec, lambda handle: None)

    assert existing.id not in runtime.resources
    assert runtime.calls_for("remove") == [existing.id]


async def test_teardown_failure_does_not_mask_result(
    guard: LifecycleGuard,
    runtime: InMemoryRuntime,
    spec: ResourceSpec,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Teardown errors are logged and recorded, the body's result still returns."""
    runtime.failures["stop"] = RuntimeError("daemon went away")

    with caplog.at_level(logging.ERROR):
        result = await guard.with_resource("svc", spec, lambda handle: 42)

    assert result == 42
    assert len(guard.teardown_errors) == 1
    assert "daemon went away" in str(guard.teardown_errors[0])
    assert "Failed to tear down" in caplog.text


async def test_teardown_failure_does_not_mask_body_error(
    guard: LifecycleGuard, runtime: InMemoryRuntime, spec: ResourceSpec
) -> None:
    """The body's own error wins over teardown errors."""
    runtime.failures["remove"] = RuntimeError("remove failed")

    def _body(handle: ResourceHandle) -> None:
        raise ValueError("primary")

    with pytest.raises(ValueError, match="primary"):
        await guard.with_resource("svc", spec, _body)

    assert len(guard.teardown_errors) == 1


async def test_continues_teardown_after_one_failure(
    guard: LifecycleGuard, runtime: InMemoryRuntime, spec: ResourceSpec
) -> None:
    """A failing resource does not stop the others from being removed."""
    runtime.add("old", labels={SCOPE_LABEL: "unit"})
    original_stop = runtime.stop
    failed: list[str] = []

    async def _stop(resource_id: str) -> None:
        if not failed:
            failed.append(resource_id)
            raise RuntimeError("stuck")
        await original_stop(resource_id)

    runtime.stop = _stop  # type: ignore[method-assign]

    await guard.with_resource("svc", spec, lambda handle: None)

    assert len(guard.teardown_errors) == 1
    assert len(failed) == 1
    assert failed[0] in runtime.calls_for("remove")
    assert len(runtime.calls_for("remove")) == 2
    assert runtime.resources == {}


async def test_tears_down_when_provisioning_fails(
    guard: LifecycleGuard, runtime: InMemoryRuntime, spec: ResourceSpec
) -> None:
    """A resource created before a failed start is still removed."""
    runtime.failures["start"] = RuntimeError("port already allocated")
    body_called = False

    def _body(handle: ResourceHandle) -> None:
        nonlocal body_called
        body_called = True

    with pytest.raises(ProvisionError, match="port already allocated"):
        await guard.with_resource("svc", spec, _body)

    assert not body_called
    assert runtime.resources == {}


async def test_removes_resource_whose_stop_fails(spec: ResourceSpec) -> None:
    """A resource that cannot be stopped is still removed."""
    runtime = InMemoryRuntime(failures={"stop": RuntimeError("stuck")})
    guard = LifecycleGuard(provisioner=ResourceProvisioner(runtime=runtime))
    seen: list[ResourceHandle] = []

    await guard.with_resource("X", spec, seen.append)

    assert runtime.calls_for("remove") == [seen[0].id]
    assert runtime.resources == {}
    assert len(guard.teardown_errors) == 1
    assert "stop failed" in str(guard.teardown_errors[0])


async def test_empty_name_leaves_scope_untouched(
    guard: LifecycleGuard, runtime: InMemoryRuntime, spec: ResourceSpec
) -> None:
    """An invalid name fails before anything in the scope is torn down."""
    leftover = runtime.add("old", labels={SCOPE_LABEL: "unit"})

    with pytest.raises(ValueError, match="must not be empty"):
        await guard.with_resource("", spec, lambda handle: None)

    assert leftover.id in runtime.resources
    assert runtime.calls_for("stop") == []
    assert runtime.calls_for("remove") == []
