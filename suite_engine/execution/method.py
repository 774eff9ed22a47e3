"""Execution of a single test body."""

from dataclasses import dataclass, replace

from suite_engine.execution.guard import Outcome, TimeoutGuard
from suite_engine.models.definition import TestDefinition


@dataclass(frozen=True, kw_only=True)
class TestExecutor:
    """Runs a test body once, or once per argument set."""

    __test__ = False

    guard: TimeoutGuard

    async def execute(self, test: TestDefinition, instance: object) -> Outcome:
        """Run the body of a test against the shared instance.

        Argument sets run sequentially and the first failing set ends the
        test. The outcome spans from the first call to the last one made.
        """
        if not test.data:
            return await self.guard.run_function(test.fn, instance)

        outcomes: list[Outcome] = []
        for args in test.data:
            outcomes.append(await self.guard.run_function(test.fn, instance, args))
            if outcomes[-1].status == "failed":
                break

        return replace(outcomes[-1], start=outcomes[0].start)
