"""Verdict rules turning child results into a composite status."""

from collections.abc import Sequence

from suite_engine.models.result import ClassResult, Status, TestResult


def has_failed_hook(results: Sequence[TestResult]) -> bool:
    """Check class hooks and the per-test each-hooks for a failure."""
    return any(
        (result.is_hook and result.status == "failed")
        or any(hook.status == "failed" for hook in result.hooks)
        for result in results
    )


def class_status(results: Sequence[TestResult]) -> Status:
    """Compute the verdict of a class from its hook and test results.

    The rules are evaluated in order and the first match wins:

    1. ``passed`` when every non-skipped result is ``passed``
    2. ``broken`` when any hook (class or each-hook) failed
    3. ``skipped`` when every test is ``skipped``
    4. ``broken`` otherwise
    """
    tests = [result for result in results if not result.is_hook]
    executed = [result for result in results if result.status != "skipped"]

    if all(result.status == "passed" for result in executed):
        return "passed"
    if has_failed_hook(results):
        return "broken"
    if all(result.status == "skipped" for result in tests):
        return "skipped"
    return "broken"


def method_status(body: Status, hooks: Sequence[TestResult]) -> Status:
    """A test whose each-hook failed is broken regardless of its body."""
    if any(hook.status == "failed" for hook in hooks):
        return "broken"
    return body


def file_status(results: Sequence[ClassResult]) -> Status:
    """Compute the verdict of a file from its class results.

    Class verdicts never produce ``failed`` themselves; the first rule only
    applies to results built elsewhere.
    """
    if any(result.status == "failed" for result in results):
        return "failed"
    if all(result.status == "passed" for result in results):
        return "passed"
    if any(result.status == "broken" for result in results):
        return "broken"
    if all(result.status == "skipped" for result in results):
        return "skipped"
    return "broken"
