"""Loading of reporters from entry points."""

from collections.abc import Callable
from importlib.metadata import entry_points

from suite_engine.reporters.base import Reporter

ENTRY_POINT_GROUP = "suite_engine.reporters"


class ReporterNotFoundError(Exception):
    """Raised when a reporter is not found."""


def load_reporter(key: str) -> Callable[[], Reporter]:
    """Load a reporter factory by key.

    Args:
        key: The reporter key as registered in pyproject.toml (e.g., "log")

    Returns:
        A callable building the reporter

    Raises:
        ReporterNotFoundError: If no reporter with the given key is found

    """
    entries = entry_points(group=ENTRY_POINT_GROUP)

    for entry in entries:
        if entry.name == key:
            factory: Callable[[], Reporter] = entry.load()
            return factory

    available = [e.name for e in entries]
    raise ReporterNotFoundError(
        f"Reporter '{key}' not found. Available reporters: {available}"
    )
