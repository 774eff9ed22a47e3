"""Tests for verdict aggregation rules."""

import pytest

from suite_engine.aggregation import class_status, file_status, method_status
from suite_engine.models.result import Status
from suite_engine.testing.factories import (
    ClassResultFactory,
    HookResultFactory,
    TestResultFactory,
)


def test_class_passes_when_all_tests_pass() -> None:
    """All passed tests and hooks give a passed class."""
    results = [
        HookResultFactory.build(),
        TestResultFactory.build(),
        TestResultFactory.build(),
    ]

    assert class_status(results) == "passed"


def test_class_ignores_skipped_tests_when_passing() -> None:
    """Skipped tests do not prevent a passed verdict."""
    results = [TestResultFactory.build(), TestResultFactory.build(status="skipped")]

    assert class_status(results) == "passed"


def test_class_without_tests_passes() -> None:
    assert class_status([]) == "passed"


def test_class_with_only_skipped_tests_passes() -> None:
    """Rule 1 is checked first and holds vacuously."""
    results = [TestResultFactory.build(status="skipped")] * 2

    assert class_status(results) == "passed"


@pytest.mark.parametrize("hook_kind", ["before_all", "after_all"])
def test_class_is_broken_when_class_hook_fails(hook_kind: str) -> None:
    """A failing class hook breaks an otherwise passing class."""
    results = [
        HookResultFactory.build(hook_kind=hook_kind, status="failed"),
        TestResultFactory.build(),
    ]

    assert class_status(results) == "broken"


def test_class_is_broken_when_each_hook_fails() -> None:
    """A failing each-hook breaks the class through its test."""
    results = [
        TestResultFactory.build(
            status="broken",
            hooks=[HookResultFactory.build(hook_kind="before_each", status="failed")],
        ),
        TestResultFactory.build(),
    ]

    assert class_status(results) == "broken"


def test_class_with_failed_test_falls_back_to_broken() -> None:
    """Failed tests without hook failures end on the fallback rule."""
    results = [
        TestResultFactory.build(),
        TestResultFactory.build(status="failed"),
        TestResultFactory.build(status="skipped"),
    ]

    assert class_status(results) == "broken"


def test_class_is_skipped_when_tests_skipped_and_no_hook_failed() -> None:
    """A non-passing hook that did not fail leaves the skipped rule."""
    results = [
        HookResultFactory.build(status="broken"),
        TestResultFactory.build(status="skipped"),
    ]

    assert class_status(results) == "skipped"


def test_method_status_is_broken_on_failed_hook() -> None:
    hooks = [HookResultFactory.build(hook_kind="after_each", status="failed")]

    assert method_status("passed", hooks) == "broken"
    assert method_status("failed", hooks) == "broken"


def test_method_status_keeps_body_status() -> None:
    hooks = [HookResultFactory.build(hook_kind="after_each", status="skipped")]

    assert method_status("failed", hooks) == "failed"
    assert method_status("passed", []) == "passed"


@pytest.mark.parametrize(
    ("statuses", "expected"),
    [
        (["passed", "passed"], "passed"),
        (["passed", "broken"], "broken"),
        (["passed", "failed", "broken"], "failed"),
        (["skipped", "skipped"], "skipped"),
        (["passed", "skipped"], "broken"),
        (["broken", "skipped"], "broken"),
    ],
)
def test_file_status(statuses: list[Status], expected: Status) -> None:
    """File verdicts follow failed > passed > broken > skipped > broken."""
    results = [ClassResultFactory.build(status=status) for status in statuses]

    assert file_status(results) == expected
