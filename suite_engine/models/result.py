"""Models for execution results."""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Literal

from suite_engine.models.definition import HookKind

Status = Literal["pending", "passed", "failed", "broken", "skipped"]


@dataclass(frozen=True, kw_only=True)
class TestResult:
    """Result of a single test or hook execution.

    ``error`` holds the formatted traceback of a failure while ``exception``
    keeps the raised object itself. Skipped entries carry no timestamps.
    """

    __test__ = False

    name: str
    kind: Literal["test", "hook"]
    status: Status
    hook_kind: HookKind | None = None
    start: datetime | None = None
    stop: datetime | None = None
    error: str | None = None
    exception: BaseException | None = None
    timed_out: bool = False
    hooks: Sequence["TestResult"] = ()

    @property
    def is_hook(self) -> bool:
        return self.kind == "hook"

    @property
    def duration(self) -> float:
        """Seconds between start and stop, zero when not executed."""
        if self.start is None or self.stop is None:
            return 0.0
        return (self.stop - self.start).total_seconds()


@dataclass(frozen=True, kw_only=True)
class ClassResult:
    """Result of a suite class: hook and test results in run order."""

    name: str
    ctor: type
    status: Status
    results: Sequence[TestResult] = ()
    start: datetime | None = None
    stop: datetime | None = None

    @property
    def tests(self) -> Sequence[TestResult]:
        return [result for result in self.results if not result.is_hook]

    @property
    def hooks(self) -> Sequence[TestResult]:
        return [result for result in self.results if result.is_hook]

    @property
    def duration(self) -> float:
        if self.start is None or self.stop is None:
            return 0.0
        return (self.stop - self.start).total_seconds()


@dataclass(frozen=True, kw_only=True)
class FileResult:
    """Result of a test file, one entry per exported suite class."""

    path: Path
    status: Status
    results: Sequence[ClassResult] = ()
