"""Top-level runner driving files, classes and single tests."""

import asyncio
import logging
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from suite_engine.class_runner import ClassRunner
from suite_engine.config import DEFAULT_TIMEOUT, RunnerConfig
from suite_engine.events import Event, EventBus, Handler
from suite_engine.execution.guard import TimeoutGuard
from suite_engine.file_runner import FileRunner
from suite_engine.loader import Loader, ModuleLoader, discover_files
from suite_engine.models.result import ClassResult, FileResult, TestResult
from suite_engine.registry import Registry, TestNotDeclaredError, default_registry

log = logging.getLogger(__name__)


class Runner:
    """Runs registered test files, classes and tests.

    The runner owns its configuration and its event bus and is the only
    emitter on that bus; every payload starts with the runner itself.
    ``runner_init`` is emitted once, before the first execution.
    """

    def __init__(
        self,
        cwd: Path | None = None,
        *,
        registry: Registry = default_registry,
        loader: Loader | None = None,
        config: RunnerConfig | None = None,
    ) -> None:
        self.cwd = (cwd or Path.cwd()).resolve()
        self.registry = registry
        self.loader: Loader = loader or ModuleLoader()
        self.config = config or RunnerConfig()
        self.events = EventBus()
        self._paths: list[Path] = []
        self._initialized = False

    @property
    def timeout(self) -> float:
        return self.config.timeout

    def set_default_timeout(self, timeout: float) -> None:
        """Set the timeout, in seconds, for guards created from now on."""
        self.config = RunnerConfig.model_validate(
            {**self.config.model_dump(), "timeout": timeout}
        )

    def reset_timeout(self) -> None:
        self.set_default_timeout(DEFAULT_TIMEOUT)

    @property
    def paths(self) -> list[Path]:
        return list(self._paths)

    def add_file(self, path: str | Path) -> None:
        self._paths.append(self._resolve(path))

    def add_files(self, paths: Iterable[str | Path]) -> None:
        for path in paths:
            self.add_file(path)

    def add_glob(self, pattern: str) -> None:
        """Register every file matching a glob pattern."""
        matches = discover_files(pattern, self.cwd)
        if not matches:
            log.warning("Pattern %s matched no files", pattern)
        self.add_files(matches)

    def subscribe(self, event: str, handler: Handler) -> Callable[[], None]:
        return self.events.subscribe(event, handler)

    def unsubscribe(self, event: str, handler: Handler) -> None:
        self.events.unsubscribe(event, handler)

    async def run(self) -> list[FileResult | None]:
        """Run every registered file concurrently.

        Returns:
            One entry per registered path, in registration order; None for
            files without registered test classes

        """
        self._init()
        if not self._paths:
            log.info("No test files registered")
            return []

        log.info("Running %d file(s)...", len(self._paths))
        results = await asyncio.gather(*(self.run_file(path) for path in self._paths))
        return list(results)

    async def run_file(self, path: str | Path) -> FileResult | None:
        self._init()
        return await self._file_runner().run(self._resolve(path))

    async def run_class(self, ctor: type) -> ClassResult:
        """Run a registered class end to end, outside of any file.

        Raises:
            ClassNotRegisteredError: If the class has no definition

        """
        self._init()
        definition = self.registry.require_class_definition(ctor)
        return await self._class_runner().run(definition)

    async def run_class_test(self, ctor: type, name: str) -> TestResult:
        """Run exactly one declared test of a class with its each-hooks.

        Raises:
            ClassNotRegisteredError: If the class has no definition
            TestNotDeclaredError: If the class declares no test with that name

        """
        self._init()
        definition = self.registry.require_class_definition(ctor)
        if (test := definition.get_test(name)) is None:
            raise TestNotDeclaredError(
                f"{definition.name} declares no test named '{name}'"
            )
        return await self._class_runner().run_test(definition, test)

    def _emit(self, event: Event, *payload: Any) -> None:
        self.events.emit(event, self, *payload)

    def _init(self) -> None:
        if self._initialized:
            return
        self._initialized = True
        self._emit(Event.RUNNER_INIT)

    def _resolve(self, path: str | Path) -> Path:
        return (self.cwd / path).resolve()

    def _class_runner(self) -> ClassRunner:
        return ClassRunner(
            registry=self.registry,
            emit=self._emit,
            guard=TimeoutGuard(timeout=self.config.timeout),
        )

    def _file_runner(self) -> FileRunner:
        return FileRunner(
            registry=self.registry,
            loader=self.loader,
            emit=self._emit,
            class_runner=self._class_runner(),
        )
