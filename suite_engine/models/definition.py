"""Declarative models describing suites, tests and hooks."""

from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Any, Literal

from pydantic import Field

from suite_engine.models.base import Model

HookKind = Literal["before_all", "after_all", "before_each", "after_each"]

CLASS_HOOK_KINDS: frozenset[HookKind] = frozenset({"before_all", "after_all"})
EACH_HOOK_KINDS: frozenset[HookKind] = frozenset({"before_each", "after_each"})


class HookDefinition(Model):
    """A function run around tests at class or per-test scope."""

    name: str = Field(..., description="Hook name, usually the method name")
    kind: HookKind = Field(..., description="Scope and position of the hook")
    fn: Callable[..., Any] = Field(..., description="Function called with the instance")
    skip: bool = Field(default=False, description="Record as skipped, never invoke")
    metadata: Mapping[str, Any] = Field(default_factory=dict)


class TestDefinition(Model):
    """A single declared test of a suite class."""

    __test__ = False

    name: str = Field(..., description="Test name, unique within its class")
    fn: Callable[..., Any] = Field(..., description="Function called with the instance")
    skip: bool = Field(default=False, description="Skip the test and its each-hooks")
    data: Sequence[Sequence[Any]] | None = Field(
        default=None,
        description="Argument sets; the body is invoked once per set",
    )
    hooks: Sequence[HookDefinition] = Field(
        default_factory=list,
        description="before_each/after_each hooks run around this test",
    )
    metadata: Mapping[str, Any] = Field(default_factory=dict)

    def hooks_of(self, kind: HookKind) -> Sequence[HookDefinition]:
        """Return the each-hooks of the given kind in declaration order."""
        return [hook for hook in self.hooks if hook.kind == kind]


class ClassDefinition(Model):
    """A suite: a class together with its hooks and tests."""

    ctor: type = Field(..., description="Class whose instance hooks and tests share")
    name: str = Field(..., description="Display name of the suite")
    hooks: Sequence[HookDefinition] = Field(default_factory=list)
    tests: Sequence[TestDefinition] = Field(default_factory=list)
    skip: bool = Field(
        default=False,
        description="Skip every test without running any hook",
    )
    metadata: Mapping[str, Any] = Field(default_factory=dict)

    def hooks_of(self, kind: HookKind) -> Sequence[HookDefinition]:
        """Return the class hooks of the given kind in declaration order."""
        return [hook for hook in self.hooks if hook.kind == kind]

    def get_test(self, name: str) -> TestDefinition | None:
        """Return the declared test with the given name, if any."""
        return next((test for test in self.tests if test.name == name), None)


class FileDefinition(Model):
    """A resolved test file and the suites it exports."""

    path: Path = Field(..., description="Resolved path of the test file")
    classes: Sequence[ClassDefinition] = Field(default_factory=list)
