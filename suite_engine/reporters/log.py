"""Reporter writing engine events to the standard logging system."""

import logging
from collections.abc import Mapping
from typing import Any

from suite_engine.events import Event, Handler
from suite_engine.models.definition import (
    ClassDefinition,
    HookDefinition,
    TestDefinition,
)
from suite_engine.models.result import ClassResult, FileResult, TestResult
from suite_engine.reporters.base import Reporter

STATUS_SYMBOLS = {
    "passed": "✓",
    "failed": "✗",
    "broken": "!",
    "skipped": "-",
    "pending": "?",
}


class LogReporter(Reporter):
    """Logs every test, hook, class and file verdict."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.log = logger or logging.getLogger("suite_engine.report")

    def subscriptions(self) -> Mapping[Event, Handler]:
        return {
            Event.RUNNER_INIT: self.on_runner_init,
            Event.RUN_CLASS: self.on_run_class,
            Event.CLASS_HOOK_RESULT: self.on_hook_result,
            Event.CLASS_EACH_HOOK_RESULT: self.on_each_hook_result,
            Event.CLASS_METHOD_RESULT: self.on_test_result,
            Event.CLASS_RESULT: self.on_class_result,
            Event.FILE_RESULT: self.on_file_result,
        }

    def on_runner_init(self, runner: Any) -> None:
        self.log.info("Runner started (timeout=%gs)", runner.timeout)

    def on_run_class(self, runner: Any, class_def: ClassDefinition) -> None:
        self.log.info(
            "Running %s (%d test(s), %d hook(s))",
            class_def.name,
            len(class_def.tests),
            len(class_def.hooks),
        )

    def on_hook_result(
        self,
        runner: Any,
        class_def: ClassDefinition,
        hook: HookDefinition,
        result: TestResult,
    ) -> None:
        self._log_result(f"{class_def.name} [{hook.kind}] {hook.name}", result)

    def on_each_hook_result(
        self,
        runner: Any,
        class_def: ClassDefinition,
        test: TestDefinition,
        hook: HookDefinition,
        result: TestResult,
    ) -> None:
        self._log_result(
            f"{class_def.name}.{test.name} [{hook.kind}] {hook.name}", result
        )

    def on_test_result(
        self,
        runner: Any,
        class_def: ClassDefinition,
        test: TestDefinition,
        result: TestResult,
    ) -> None:
        self._log_result(f"{class_def.name}.{test.name}", result)

    def on_class_result(
        self, runner: Any, class_def: ClassDefinition, result: ClassResult
    ) -> None:
        self.log.info(
            "%s %s: %s (%.2fs)",
            STATUS_SYMBOLS[result.status],
            class_def.name,
            result.status,
            result.duration,
        )

    def on_file_result(self, runner: Any, result: FileResult) -> None:
        self.log.info(
            "%s %s: %s", STATUS_SYMBOLS[result.status], result.path, result.status
        )

    def _log_result(self, label: str, result: TestResult) -> None:
        failed = result.status in {"failed", "broken"}
        level = logging.WARNING if failed else logging.INFO
        self.log.log(
            level,
            "%s %s: %s (%.2fs)",
            STATUS_SYMBOLS[result.status],
            label,
            result.status,
            result.duration,
        )
        if result.error:
            self.log.log(level, "  Error: %s", result.error.strip().splitlines()[-1])
