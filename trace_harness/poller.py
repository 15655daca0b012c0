"""Bounded polling of an eventually-consistent condition."""

import asyncio
import inspect
import logging
from dataclasses import dataclass

from trace_harness.errors import PredicateEvaluationError
from trace_harness.models.poll import PollOutcome, PollSpec, Predicate

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class ConditionPoller:
    """Evaluates a predicate until it holds or the deadline passes.

    An exception raised by the predicate is treated as "not yet satisfied"
    for that attempt. External systems that are still starting up fail in
    all sorts of ways, so the poll keeps going until the deadline decides.
    Cancellation is not an ``Exception`` and still propagates.
    """

    async def wait(self, spec: PollSpec) -> PollOutcome:
        """Poll ``spec.predicate`` every ``spec.interval`` seconds.

        Args:
            spec: Predicate, timeout and interval to poll with

        Returns:
            ``satisfied`` as soon as the predicate returns true, ``timed_out``
            once ``spec.timeout`` seconds have elapsed without that

        """
        loop = asyncio.get_running_loop()
        started = loop.time()
        deadline = started + spec.timeout
        attempts = 0

        while True:
            attempts += 1
            if await self._evaluate(spec.predicate, attempts):
                elapsed = loop.time() - started
                log.debug("Condition satisfied after %d attempt(s)", attempts)
                return PollOutcome(
                    status="satisfied", attempts=attempts, elapsed=elapsed
                )

            now = loop.time()
            if now >= deadline:
                log.info(
                    "Condition not satisfied within %.1fs (%d attempt(s))",
                    spec.timeout,
                    attempts,
                )
                return PollOutcome(
                    status="timed_out", attempts=attempts, elapsed=now - started
                )

            await asyncio.sleep(min(spec.interval, deadline - now))

    async def _evaluate(self, predicate: Predicate, attempt: int) -> bool:
        try:
            result = predicate()
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            error = PredicateEvaluationError(f"{type(e).__name__}: {e}")
            log.debug("Attempt %d: %s", attempt, error)
            return False
        return bool(result)
