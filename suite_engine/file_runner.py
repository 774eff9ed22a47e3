"""Orchestration of a single test file."""

import asyncio
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from suite_engine.aggregation import file_status
from suite_engine.class_runner import ClassRunner, skipped_class_result
from suite_engine.events import Emitter, Event
from suite_engine.loader import Loader
from suite_engine.models.definition import ClassDefinition, FileDefinition
from suite_engine.models.result import ClassResult, FileResult
from suite_engine.registry import Registry

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class FileRunner:
    """Runs every registered class a test file exports."""

    registry: Registry
    loader: Loader
    emit: Emitter
    class_runner: ClassRunner

    async def run(self, path: Path) -> FileResult | None:
        """Load a file, run its classes concurrently and aggregate a verdict.

        Args:
            path: Resolved path of the test file

        Returns:
            The file result, or None when the file exports no registered class

        """
        exports = await self.loader.load_module(path)
        self.emit(Event.RUN_FILE, FileDefinition(path=path))

        classes = self.find_classes(exports)
        if not classes:
            log.warning("No registered test classes found in %s", path)
            return None

        file = FileDefinition(path=path, classes=classes)
        self.emit(Event.FILE_PARSED, file)

        log.info("Running %d class(es) from %s", len(classes), path)
        results = await asyncio.gather(*(self._run_class(cls) for cls in classes))

        result = FileResult(path=path, status=file_status(results), results=results)
        self.emit(Event.FILE_RESULT, result)
        return result

    def find_classes(self, exports: Mapping[str, Any]) -> Sequence[ClassDefinition]:
        """Select exported classes that carry a definition, in export order."""
        seen: set[type] = set()
        classes: list[ClassDefinition] = []
        for value in exports.values():
            if not isinstance(value, type) or value in seen:
                continue
            if (definition := self.registry.get_class_definition(value)) is not None:
                seen.add(value)
                classes.append(definition)
        return classes

    async def _run_class(self, definition: ClassDefinition) -> ClassResult:
        if definition.skip:
            return skipped_class_result(definition)
        return await self.class_runner.run(definition)
