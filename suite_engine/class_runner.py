"""Orchestration of a single suite class."""

import asyncio
import logging
import traceback
from dataclasses import dataclass

from suite_engine.aggregation import class_status, method_status
from suite_engine.events import Emitter, Event
from suite_engine.execution.guard import TimeoutGuard, now
from suite_engine.execution.hooks import HookExecutor, skipped_hook_result
from suite_engine.execution.method import TestExecutor
from suite_engine.models.definition import ClassDefinition, TestDefinition
from suite_engine.models.result import ClassResult, TestResult
from suite_engine.registry import Registry

log = logging.getLogger(__name__)


def skipped_test_result(test: TestDefinition) -> TestResult:
    """Placeholder for a skipped test, its each-hooks recorded as skipped."""
    return TestResult(
        name=test.name,
        kind="test",
        status="skipped",
        hooks=[
            *(skipped_hook_result(hook) for hook in test.hooks_of("before_each")),
            *(skipped_hook_result(hook) for hook in test.hooks_of("after_each")),
        ],
    )


def skipped_class_result(definition: ClassDefinition) -> ClassResult:
    """Result of a skipped class: placeholders only, nothing is executed."""
    return ClassResult(
        name=definition.name,
        ctor=definition.ctor,
        status="skipped",
        results=[skipped_test_result(test) for test in definition.tests],
    )


def constructor_failure_result(error: Exception) -> TestResult:
    """Failed pseudo-hook standing for a constructor that raised."""
    return TestResult(
        name="__init__",
        kind="hook",
        status="failed",
        start=now(),
        stop=now(),
        error="".join(traceback.format_exception(error)),
        exception=error,
    )


def unconstructed_test_result(test: TestDefinition, error: Exception) -> TestResult:
    """A test that could not run because its class was never constructed."""
    if test.skip:
        return skipped_test_result(test)
    return TestResult(
        name=test.name,
        kind="test",
        status="broken",
        error="".join(traceback.format_exception_only(error)).strip(),
        exception=error,
    )


@dataclass(frozen=True, kw_only=True)
class ClassRunner:
    """Runs one class: before_all hooks, its tests, then after_all hooks.

    Every hook and test of the class shares one instance, built on first use
    and cached in the registry. Tests run concurrently, each sequencing its
    own each-hooks around its body.
    """

    registry: Registry
    emit: Emitter
    guard: TimeoutGuard

    @property
    def hooks(self) -> HookExecutor:
        return HookExecutor(guard=self.guard, emit=self.emit)

    @property
    def executor(self) -> TestExecutor:
        return TestExecutor(guard=self.guard)

    def acquire_instance(self, definition: ClassDefinition) -> object:
        """Return the shared instance of a class, constructing it once."""
        if (instance := self.registry.get_instance(definition.ctor)) is not None:
            return instance

        log.debug("Constructing %s", definition.name)
        instance = definition.ctor()
        self.registry.set_instance(definition.ctor, instance)
        self.emit(Event.CLASS_CONSTRUCTOR, definition, instance)
        return instance

    async def run(self, definition: ClassDefinition) -> ClassResult:
        """Run a class end to end and aggregate its verdict."""
        self.emit(Event.RUN_CLASS, definition)

        if definition.skip:
            log.info("Skipping %s", definition.name)
            result = skipped_class_result(definition)
        else:
            result = await self._run_class(definition)

        self.emit(Event.CLASS_RESULT, definition, result)
        return result

    async def _run_class(self, definition: ClassDefinition) -> ClassResult:
        start = now()
        try:
            instance = self.acquire_instance(definition)
        except Exception as e:
            log.warning("Could not construct %s: %s", definition.name, e)
            results = [
                constructor_failure_result(e),
                *(unconstructed_test_result(test, e) for test in definition.tests),
            ]
            return ClassResult(
                name=definition.name,
                ctor=definition.ctor,
                status=class_status(results),
                results=results,
                start=start,
                stop=now(),
            )

        before_all = await self.hooks.run_class_hooks(
            definition, instance, "before_all"
        )
        tests = await asyncio.gather(
            *(self.run_test(definition, test) for test in definition.tests)
        )
        after_all = await self.hooks.run_class_hooks(definition, instance, "after_all")

        results = [*before_all, *tests, *after_all]
        return ClassResult(
            name=definition.name,
            ctor=definition.ctor,
            status=class_status(results),
            results=results,
            start=start,
            stop=now(),
        )

    async def run_test(
        self, definition: ClassDefinition, test: TestDefinition
    ) -> TestResult:
        """Run one test with its before_each and after_each hooks."""
        try:
            instance = self.acquire_instance(definition)
        except Exception as e:
            log.warning("Could not construct %s: %s", definition.name, e)
            self.emit(Event.CLASS_METHOD, definition, test)
            result = unconstructed_test_result(test, e)
            self.emit(Event.CLASS_METHOD_RESULT, definition, test, result)
            return result

        self.emit(Event.CLASS_METHOD, definition, test)
        if test.skip:
            result = skipped_test_result(test)
        else:
            result = await self._run_test(definition, test, instance)

        self.emit(Event.CLASS_METHOD_RESULT, definition, test, result)
        return result

    async def _run_test(
        self, definition: ClassDefinition, test: TestDefinition, instance: object
    ) -> TestResult:
        start = now()
        before_each = await self.hooks.run_each_hooks(
            definition, test, instance, "before_each"
        )
        outcome = await self.executor.execute(test, instance)
        after_each = await self.hooks.run_each_hooks(
            definition, test, instance, "after_each"
        )

        hooks = [*before_each, *after_each]
        return TestResult(
            name=test.name,
            kind="test",
            status=method_status(outcome.status, hooks),
            start=start,
            stop=now(),
            error=outcome.error,
            exception=outcome.exception,
            timed_out=outcome.timed_out,
            hooks=hooks,
        )
