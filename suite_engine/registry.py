"""Association between suite classes and their declarations."""

from collections.abc import Callable, Mapping, Sequence
from typing import Any

from suite_engine.models.definition import (
    EACH_HOOK_KINDS,
    ClassDefinition,
    HookDefinition,
    HookKind,
    TestDefinition,
)


class ClassNotRegisteredError(LookupError):
    """Raised when a class has no registered definition."""


class TestNotDeclaredError(LookupError):
    """Raised when a test name is not declared on a class."""

    __test__ = False


class Registry:
    """Maps class identities to their definitions and shared instances.

    Declaration modules populate it once at import time through
    ``register_class``, ``register_test`` and ``register_hook``. The runner
    only reads definitions and caches the one instance built per class.
    """

    def __init__(self) -> None:
        self._definitions: dict[type, ClassDefinition] = {}
        self._instances: dict[type, object] = {}

    def get_class_definition(self, ctor: type) -> ClassDefinition | None:
        return self._definitions.get(ctor)

    def set_class_definition(self, ctor: type, definition: ClassDefinition) -> None:
        self._definitions[ctor] = definition

    def get_instance(self, ctor: type) -> object | None:
        return self._instances.get(ctor)

    def set_instance(self, ctor: type, instance: object) -> None:
        self._instances[ctor] = instance

    def require_class_definition(self, ctor: type) -> ClassDefinition:
        """Return the definition of a class.

        Raises:
            ClassNotRegisteredError: If the class was never registered

        """
        if (definition := self.get_class_definition(ctor)) is None:
            name = getattr(ctor, "__name__", repr(ctor))
            raise ClassNotRegisteredError(f"{name} is not registered as a test class")
        return definition

    def register_class(
        self,
        ctor: type,
        *,
        skip: bool = False,
        metadata: Mapping[str, Any] | None = None,
    ) -> ClassDefinition:
        """Declare a suite class, keeping tests and hooks registered so far."""
        current = self.get_class_definition(ctor)
        definition = ClassDefinition(
            ctor=ctor,
            name=ctor.__name__,
            hooks=current.hooks if current else [],
            tests=current.tests if current else [],
            skip=skip,
            metadata={**(current.metadata if current else {}), **(metadata or {})},
        )
        self.set_class_definition(ctor, definition)
        return definition

    def register_test(
        self,
        ctor: type,
        name: str,
        fn: Callable[..., Any],
        *,
        skip: bool = False,
        data: Sequence[Sequence[Any]] | None = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> TestDefinition:
        """Declare a test on a class.

        The test picks up every each-hook already declared on the class;
        each-hooks declared later are attached by ``register_hook``.
        """
        definition = self._ensure_class(ctor)
        test = TestDefinition(
            name=name,
            fn=fn,
            skip=skip,
            data=data,
            hooks=[hook for hook in definition.hooks if hook.kind in EACH_HOOK_KINDS],
            metadata=metadata or {},
        )
        if definition.get_test(name) is None:
            tests = [*definition.tests, test]
        else:
            tests = [
                test if existing.name == name else existing
                for existing in definition.tests
            ]
        self.set_class_definition(ctor, definition.model_copy(update={"tests": tests}))
        return test

    def register_hook(
        self,
        ctor: type,
        name: str,
        kind: HookKind,
        fn: Callable[..., Any],
        *,
        skip: bool = False,
        metadata: Mapping[str, Any] | None = None,
    ) -> HookDefinition:
        """Declare a hook on a class.

        ``before_each`` and ``after_each`` hooks are attached to every test of
        the class.
        """
        definition = self._ensure_class(ctor)
        hook = HookDefinition(
            name=name, kind=kind, fn=fn, skip=skip, metadata=metadata or {}
        )
        update: dict[str, Any] = {"hooks": [*definition.hooks, hook]}
        if kind in EACH_HOOK_KINDS:
            update["tests"] = [
                test.model_copy(update={"hooks": [*test.hooks, hook]})
                for test in definition.tests
            ]
        self.set_class_definition(ctor, definition.model_copy(update=update))
        return hook

    def define_class_metadata(
        self, ctor: type, metadata: Mapping[str, Any]
    ) -> ClassDefinition:
        """Merge metadata into a class declaration, registering it if needed."""
        definition = self._ensure_class(ctor)
        definition = definition.model_copy(
            update={"metadata": {**definition.metadata, **metadata}}
        )
        self.set_class_definition(ctor, definition)
        return definition

    def define_method_metadata(
        self, ctor: type, name: str, metadata: Mapping[str, Any]
    ) -> ClassDefinition:
        """Merge metadata into the tests and hooks of a class named ``name``.

        Each-hooks are updated on the class and on every test carrying them.

        Raises:
            ClassNotRegisteredError: If the class was never registered
            TestNotDeclaredError: If no test or hook has that name

        """
        definition = self.require_class_definition(ctor)
        if definition.get_test(name) is None and not any(
            hook.name == name for hook in definition.hooks
        ):
            raise TestNotDeclaredError(
                f"{definition.name} declares no test or hook named '{name}'"
            )

        def merge(item: Any) -> Any:
            if item.name != name:
                return item
            return item.model_copy(update={"metadata": {**item.metadata, **metadata}})

        definition = definition.model_copy(
            update={
                "hooks": [merge(hook) for hook in definition.hooks],
                "tests": [
                    merge(test).model_copy(
                        update={"hooks": [merge(hook) for hook in test.hooks]}
                    )
                    for test in definition.tests
                ],
            }
        )
        self.set_class_definition(ctor, definition)
        return definition

    def clear(self) -> None:
        """Forget every definition and cached instance."""
        self._definitions.clear()
        self._instances.clear()

    def _ensure_class(self, ctor: type) -> ClassDefinition:
        if (definition := self.get_class_definition(ctor)) is None:
            definition = self.register_class(ctor)
        return definition


default_registry = Registry()
