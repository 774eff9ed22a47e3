"""Execution of class hooks and per-test hooks."""

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass

from suite_engine.events import Emitter, Event
from suite_engine.execution.guard import Outcome, TimeoutGuard
from suite_engine.models.definition import (
    ClassDefinition,
    HookDefinition,
    HookKind,
    TestDefinition,
)
from suite_engine.models.result import TestResult


def skipped_hook_result(hook: HookDefinition) -> TestResult:
    return TestResult(
        name=hook.name, kind="hook", hook_kind=hook.kind, status="skipped"
    )


def hook_result(hook: HookDefinition, outcome: Outcome) -> TestResult:
    return TestResult(
        name=hook.name,
        kind="hook",
        hook_kind=hook.kind,
        status=outcome.status,
        start=outcome.start,
        stop=outcome.stop,
        error=outcome.error,
        exception=outcome.exception,
        timed_out=outcome.timed_out,
    )


@dataclass(frozen=True, kw_only=True)
class HookExecutor:
    """Runs every hook of one kind concurrently against the shared instance.

    Skipped hooks are recorded without being called and come first in the
    returned results; the others follow in declaration order. A failing hook
    does not stop its siblings.
    """

    guard: TimeoutGuard
    emit: Emitter

    async def run_class_hooks(
        self,
        definition: ClassDefinition,
        instance: object,
        kind: HookKind,
    ) -> Sequence[TestResult]:
        """Run the before_all or after_all hooks of a class."""
        hooks = definition.hooks_of(kind)
        skipped = [skipped_hook_result(hook) for hook in hooks if hook.skip]
        executed = await asyncio.gather(
            *(
                self._run_class_hook(definition, hook, instance)
                for hook in hooks
                if not hook.skip
            )
        )
        return [*skipped, *executed]

    async def run_each_hooks(
        self,
        definition: ClassDefinition,
        test: TestDefinition,
        instance: object,
        kind: HookKind,
    ) -> Sequence[TestResult]:
        """Run the before_each or after_each hooks attached to a test."""
        hooks = test.hooks_of(kind)
        skipped = [skipped_hook_result(hook) for hook in hooks if hook.skip]
        executed = await asyncio.gather(
            *(
                self._run_each_hook(definition, test, hook, instance)
                for hook in hooks
                if not hook.skip
            )
        )
        return [*skipped, *executed]

    async def _run_class_hook(
        self, definition: ClassDefinition, hook: HookDefinition, instance: object
    ) -> TestResult:
        self.emit(Event.CLASS_HOOK, definition, hook)
        result = hook_result(hook, await self.guard.run_function(hook.fn, instance))
        self.emit(Event.CLASS_HOOK_RESULT, definition, hook, result)
        return result

    async def _run_each_hook(
        self,
        definition: ClassDefinition,
        test: TestDefinition,
        hook: HookDefinition,
        instance: object,
    ) -> TestResult:
        self.emit(Event.CLASS_EACH_HOOK, definition, test, hook)
        result = hook_result(hook, await self.guard.run_function(hook.fn, instance))
        self.emit(Event.CLASS_EACH_HOOK_RESULT, definition, test, hook, result)
        return result
