"""Loading of test modules and discovery of test files."""

import hashlib
import importlib.util
import logging
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path
from types import ModuleType
from typing import Any, Protocol

log = logging.getLogger(__name__)


class Loader(Protocol):
    """Turns a file path into the names the file exports."""

    async def load_module(self, path: Path) -> Mapping[str, Any]: ...


class ModuleLoader:
    """Imports test files as modules, once per resolved path."""

    async def load_module(self, path: Path) -> Mapping[str, Any]:
        """Import the file at path and return its public names.

        Raises:
            FileNotFoundError: If the path does not exist
            ImportError: If the file cannot be imported as a module

        """
        module = self._import(path.resolve())
        return {
            name: value
            for name, value in vars(module).items()
            if not name.startswith("_")
        }

    def _import(self, path: Path) -> ModuleType:
        if not path.is_file():
            raise FileNotFoundError(f"Test file not found: {path}")

        name = module_name_for(path)
        if (module := sys.modules.get(name)) is not None:
            return module

        spec = importlib.util.spec_from_file_location(name, path)
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot import {path} as a module")

        log.debug("Importing %s as %s", path, name)
        module = importlib.util.module_from_spec(spec)
        sys.modules[name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            del sys.modules[name]
            raise
        return module


def module_name_for(path: Path) -> str:
    """Derive a stable, unique module name for a test file."""
    digest = hashlib.sha1(str(path).encode(), usedforsecurity=False).hexdigest()
    return f"suite_engine_tests_{path.stem}_{digest[:12]}"


def discover_files(pattern: str, cwd: Path) -> Sequence[Path]:
    """Expand a glob pattern into resolved file paths.

    Args:
        pattern: Glob pattern, absolute or relative to cwd (``**`` recurses)
        cwd: Directory relative patterns are resolved against

    Returns:
        Matching files sorted by path

    """
    candidate = Path(pattern)
    if candidate.is_absolute():
        anchor = Path(candidate.anchor)
        relative = str(candidate.relative_to(anchor))
    else:
        anchor, relative = cwd, pattern

    if not relative or relative == ".":
        return []

    return sorted(path.resolve() for path in anchor.glob(relative) if path.is_file())
