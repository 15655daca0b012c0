"""Backend manifest definition for the plugin system."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass

from pydantic import BaseModel

from trace_harness.backends.base import TraceBackend


@dataclass(frozen=True, kw_only=True)
class BackendManifest[ConfigT: BaseModel]:
    """Manifest describing a trace backend plugin.

    Holds the configuration class used to validate user input and the
    factory that turns a validated config into a running backend client.
    """

    config_cls: type[ConfigT]
    backend_factory: Callable[[ConfigT], AbstractAsyncContextManager[TraceBackend]]
