"""Models for condition polling."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Literal

type Predicate = Callable[[], bool | Awaitable[bool]]


@dataclass(frozen=True, kw_only=True)
class PollSpec:
    """What to poll and for how long.

    The predicate may be a plain function or a coroutine function. Any
    exception it raises counts as "not yet satisfied".
    """

    predicate: Predicate
    timeout: float
    interval: float

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if self.interval <= 0:
            raise ValueError(f"interval must be positive, got {self.interval}")
        if self.interval >= self.timeout:
            raise ValueError(
                f"interval ({self.interval}) must be shorter than "
                f"timeout ({self.timeout})"
            )


@dataclass(frozen=True, kw_only=True)
class PollOutcome:
    """Terminal result of a poll."""

    status: Literal["satisfied", "timed_out"]
    attempts: int
    elapsed: float

    @property
    def satisfied(self) -> bool:
        return self.status == "satisfied"
