"""CLI entry point for the trace smoke scenario."""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from trace_harness.backends.loading import load_backend_manifest
from trace_harness.models.result import ScenarioResult
from trace_harness.provisioner import ResourceProvisioner
from trace_harness.runtime.docker import DockerRuntime, DockerRuntimeError
from trace_harness.scenario import ScenarioRunner
from trace_harness.smoke import (
    DEFAULT_EVENT_NAME,
    DEFAULT_SPAN_NAME,
    trace_smoke_scenario,
)

STATUS_SYMBOLS = {
    "passed": "✓",
    "failed": "✗",
}


def log_result_summary(log: logging.Logger, result: ScenarioResult) -> None:
    """Log a formatted summary of a scenario result."""
    log.info("=" * 80)
    log.info("Scenario Result:")
    log.info("=" * 80)

    symbol = STATUS_SYMBOLS.get(result.status, "?")
    log.info(
        "%s %s: %s (%.2fs)", symbol, result.scenario, result.status, result.duration
    )
    if result.cause:
        log.info("  Cause: %s", result.cause)
    for error in result.teardown_errors:
        log.warning("  Teardown: %s", error)


def format_output(result: ScenarioResult) -> dict[str, Any]:
    """Format a scenario result for JSON output."""
    return {
        "scenario": result.scenario,
        "status": result.status,
        "duration": result.duration,
        "cause": result.cause,
        "teardown_errors": list(result.teardown_errors),
    }


async def run(
    backend_key: str,
    backend_config_json: str,
    scope: str = "trace-harness",
    span_name: str = DEFAULT_SPAN_NAME,
    event_name: str = DEFAULT_EVENT_NAME,
) -> int:
    """Run the trace smoke scenario and return exit code."""
    log = logging.getLogger("trace_harness")

    log.info("Loading backend: %s", backend_key)
    manifest = load_backend_manifest(backend_key)

    config_dict = json.loads(backend_config_json)
    config = manifest.config_cls(**config_dict)

    try:
        async with (
            DockerRuntime.from_env() as runtime,
            manifest.backend_factory(config) as backend,
        ):
            scenario = trace_smoke_scenario(
                backend, span_name=span_name, event_name=event_name
            )
            runner = ScenarioRunner(
                provisioner=ResourceProvisioner(runtime=runtime, scope=scope)
            )
            result = await runner.run(scenario)
    except DockerRuntimeError as e:
        log.error("Container runtime unavailable: %s", e)
        result = ScenarioResult(
            scenario=f"{backend_key}-trace-smoke",
            status="failed",
            duration=0.0,
            cause=f"setup failed: {e}",
        )

    log_result_summary(log, result)
    print(json.dumps(format_output(result), indent=2))

    return 0 if result.passed else 1


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Provision a trace backend, emit a span and wait until it is seen"
    )
    parser.add_argument(
        "--backend",
        default="jaeger",
        help="Backend key (default: jaeger)",
    )
    parser.add_argument(
        "--backend-config",
        default="{}",
        help="JSON configuration for the backend",
    )
    parser.add_argument(
        "--scope",
        default="trace-harness",
        help="Ownership label value; every resource carrying it is removed on exit",
    )
    parser.add_argument(
        "--span-name",
        default=DEFAULT_SPAN_NAME,
        help="Name of the emitted span",
    )
    parser.add_argument(
        "--event-name",
        default=DEFAULT_EVENT_NAME,
        help="Name of the event recorded on the span",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    exit_code = asyncio.run(
        run(
            backend_key=args.backend,
            backend_config_json=args.backend_config,
            scope=args.scope,
            span_name=args.span_name,
            event_name=args.event_name,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
