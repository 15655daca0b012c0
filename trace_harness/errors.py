"""Exception types raised by the harness."""


class HarnessError(Exception):
    """Base class for all harness errors."""


class ProvisionError(HarnessError):
    """Raised when a backing resource cannot be provisioned or never gets ready."""


class PredicateEvaluationError(HarnessError):
    """Wraps an exception raised while evaluating a poll predicate.

    The poller builds these for logging only; they never escape a poll.
    """


class TeardownError(HarnessError):
    """Raised when stopping or removing a provisioned resource fails."""

    def __init__(self, resource_id: str, message: str) -> None:
        super().__init__(f"Failed to tear down {resource_id}: {message}")
        self.resource_id = resource_id


class NameConflictError(HarnessError):
    """Raised by a runtime when a resource with the requested name already exists."""
