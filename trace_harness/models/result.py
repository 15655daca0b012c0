"""Models for scenario results."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Literal

CONDITION_NOT_OBSERVED = "condition not observed within deadline"


@dataclass(frozen=True, kw_only=True)
class ScenarioResult:
    """Outcome of a single scenario run.

    ``cause`` is set on failure and tells setup problems apart from a
    condition that was never observed. Teardown problems are reported
    separately and never change ``status``.
    """

    scenario: str
    status: Literal["passed", "failed"]
    duration: float
    cause: str | None = None
    teardown_errors: Sequence[str] = field(default_factory=tuple)

    @property
    def passed(self) -> bool:
        return self.status == "passed"
