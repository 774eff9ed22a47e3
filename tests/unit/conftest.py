"""Shared fixtures for unit tests."""

from pathlib import Path
from unittest.mock import Mock

import pytest

from suite_engine.events import Event
from suite_engine.registry import Registry
from suite_engine.runner import Runner


@pytest.fixture
def registry() -> Registry:
    """Create an empty registry isolated from the default one."""
    return Registry()


@pytest.fixture
def runner(registry: Registry, tmp_path: Path) -> Runner:
    """Create a runner rooted in a temporary directory."""
    return Runner(tmp_path, registry=registry)


@pytest.fixture
def recorder(runner: Runner) -> Mock:
    """Subscribe a mock to every event; calls are recorded as (event, args)."""
    mock = Mock()
    for event in Event:
        runner.subscribe(
            event, lambda *payload, event=event: mock(event, *payload)
        )
    return mock