"""Tests for the test executor."""

from suite_engine.execution.guard import TimeoutGuard
from suite_engine.execution.method import TestExecutor
from suite_engine.models.definition import TestDefinition


class Calculator:
    def __init__(self) -> None:
        self.seen: list[tuple[int, int]] = []

    async def add(self, a: int, b: int) -> None:
        self.seen.append((a, b))
        if a + b < 0:
            raise ValueError("negative")

    def plain(self) -> None:
        self.seen.append((0, 0))


def executor() -> TestExecutor:
    return TestExecutor(guard=TimeoutGuard(timeout=1))


async def test_runs_once_without_data() -> None:
    instance = Calculator()
    test = TestDefinition(name="plain", fn=Calculator.plain)

    outcome = await executor().execute(test, instance)

    assert outcome.status == "passed"
    assert instance.seen == [(0, 0)]


async def test_runs_once_per_argument_set() -> None:
    """Each argument set is passed to the body in order."""
    instance = Calculator()
    test = TestDefinition(name="add", fn=Calculator.add, data=[(1, 2), (3, 4)])

    outcome = await executor().execute(test, instance)

    assert outcome.status == "passed"
    assert instance.seen == [(1, 2), (3, 4)]


async def test_stops_at_first_failing_argument_set() -> None:
    """A failing argument set fails the test and ends it."""
    instance = Calculator()
    test = TestDefinition(
        name="add", fn=Calculator.add, data=[(1, 2), (-5, 1), (3, 4)]
    )

    outcome = await executor().execute(test, instance)

    assert outcome.status == "failed"
    assert outcome.error is not None
    assert "negative" in outcome.error
    assert instance.seen == [(1, 2), (-5, 1)]
