"""Loading of trace backends from entry points."""

from importlib.metadata import entry_points
from typing import Any

from trace_harness.backends.manifest import BackendManifest
from trace_harness.errors import HarnessError

ENTRY_POINT_GROUP = "trace_harness.backends"


class BackendNotFoundError(HarnessError):
    """Raised when no backend is registered under a key."""


def load_backend_manifest(key: str) -> BackendManifest[Any]:
    """Load a backend manifest by key.

    Args:
        key: The backend key as registered in pyproject.toml (e.g., "jaeger")

    Raises:
        BackendNotFoundError: If no backend with the given key is found

    """
    entries = entry_points(group=ENTRY_POINT_GROUP)

    for entry in entries:
        if entry.name == key:
            manifest: BackendManifest[Any] = entry.load()
            return manifest

    available = sorted(e.name for e in entries)
    raise BackendNotFoundError(
        f"Backend '{key}' not found. Available backends: {available}"
    )
