"""CLI entry point for running test suites."""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from suite_engine.config import ConfigError, RunnerConfig, load_config
from suite_engine.models.result import FileResult
from suite_engine.reporters.loading import ReporterNotFoundError, load_reporter
from suite_engine.reporters.log import STATUS_SYMBOLS
from suite_engine.runner import Runner


def log_results_summary(
    log: logging.Logger, file_results: Sequence[FileResult | None]
) -> None:
    """Log a formatted summary of class verdicts per file."""
    log.info("=" * 80)
    log.info("Test Results Summary:")
    log.info("=" * 80)

    for file_result in file_results:
        if file_result is None:
            continue
        log.info(
            "%s %s: %s",
            STATUS_SYMBOLS[file_result.status],
            file_result.path,
            file_result.status,
        )
        for class_result in file_result.results:
            log.info(
                "  %s %s: %s (%.2fs)",
                STATUS_SYMBOLS[class_result.status],
                class_result.name,
                class_result.status,
                class_result.duration,
            )
            for test_result in class_result.tests:
                if test_result.error:
                    log.info(
                        "    %s: %s",
                        test_result.name,
                        test_result.error.strip().splitlines()[-1],
                    )


def format_output(file_results: Sequence[FileResult | None]) -> dict[str, Any]:
    """Format file results for JSON output, one entry per test."""
    all_results: list[dict[str, Any]] = []
    for file_result in file_results:
        if file_result is None:
            continue
        for class_result in file_result.results:
            for test_result in class_result.tests:
                all_results.append(
                    {
                        "file": str(file_result.path),
                        "class": class_result.name,
                        "test": test_result.name,
                        "status": test_result.status,
                        "duration": test_result.duration,
                        "error": test_result.error,
                    }
                )

    return {
        "total": len(all_results),
        "passed": sum(1 for r in all_results if r["status"] == "passed"),
        "failed": sum(1 for r in all_results if r["status"] == "failed"),
        "broken": sum(1 for r in all_results if r["status"] == "broken"),
        "skipped": sum(1 for r in all_results if r["status"] == "skipped"),
        "results": all_results,
    }


def resolve_config(
    config_path: Path | None,
    timeout: float | None,
    patterns: Sequence[str],
    reporters: Sequence[str],
) -> RunnerConfig:
    """Merge a configuration file with command line overrides."""
    config = load_config(config_path) if config_path else RunnerConfig()
    overrides: dict[str, Any] = {}
    if timeout is not None:
        overrides["timeout"] = timeout
    if patterns:
        overrides["files"] = list(patterns)
    if reporters:
        overrides["reporters"] = list(reporters)
    return RunnerConfig.model_validate({**config.model_dump(), **overrides})


async def run(config: RunnerConfig, cwd: Path) -> int:
    """Run the configured test files and return exit code."""
    log = logging.getLogger("suite_engine")

    runner = Runner(cwd, config=config)
    for key in config.reporters:
        log.info("Loading reporter: %s", key)
        load_reporter(key)().attach(runner.events)

    for pattern in config.files:
        runner.add_glob(pattern)

    if not runner.paths:
        log.info("No test files found")
        print(json.dumps({"total": 0, "results": []}))
        return 0

    file_results = await runner.run()
    await runner.events.drain()

    log_results_summary(log, file_results)

    output = format_output(file_results)
    print(json.dumps(output, indent=2))

    has_failures = any(
        file_result.status in {"failed", "broken"}
        for file_result in file_results
        if file_result is not None
    )

    return 1 if has_failures else 0


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Run declared test suites")
    parser.add_argument(
        "patterns",
        nargs="*",
        help="Glob patterns of test files, relative to --cwd",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML configuration file",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds each test or hook may run (default: 5)",
    )
    parser.add_argument(
        "--reporter",
        action="append",
        default=[],
        help="Reporter key to attach, may be repeated (default: log)",
    )
    parser.add_argument(
        "--cwd",
        type=Path,
        default=Path.cwd(),
        help="Directory patterns are resolved against",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        config = resolve_config(args.config, args.timeout, args.patterns, args.reporter)
    except (ConfigError, ValueError) as e:
        logging.getLogger("suite_engine").error("%s", e)
        sys.exit(2)

    try:
        exit_code = asyncio.run(run(config, args.cwd))
    except ReporterNotFoundError as e:
        logging.getLogger("suite_engine").error("%s", e)
        sys.exit(2)
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
