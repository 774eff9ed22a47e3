"""Tests for the event bus."""

import asyncio
import logging
from unittest.mock import Mock

import pytest

from suite_engine.events import PAYLOADS, Event, EventBus, UnknownEventError


def test_catalog_covers_every_event() -> None:
    """Every event declares its payload fields, starting with the runner."""
    assert set(PAYLOADS) == set(Event)
    assert all(fields[0] == "runner" for fields in PAYLOADS.values())


def test_delivers_payload_in_subscription_order() -> None:
    """Handlers receive the payload in the order they subscribed."""
    bus = EventBus()
    calls: list[tuple[str, tuple[object, ...]]] = []
    bus.subscribe(Event.RUN_FILE, lambda *p: calls.append(("first", p)))
    bus.subscribe("run_file", lambda *p: calls.append(("second", p)))

    bus.emit(Event.RUN_FILE, "runner", "file")

    assert calls == [("first", ("runner", "file")), ("second", ("runner", "file"))]


def test_only_subscribed_event_is_delivered() -> None:
    """Handlers are not called for other events."""
    bus = EventBus()
    handler = Mock()
    bus.subscribe(Event.CLASS_RESULT, handler)

    bus.emit(Event.RUNNER_INIT, "runner")

    handler.assert_not_called()


def test_unsubscribe_stops_delivery() -> None:
    """Removed handlers no longer receive events."""
    bus = EventBus()
    handler = Mock()
    remove = bus.subscribe(Event.RUNNER_INIT, handler)

    bus.emit(Event.RUNNER_INIT, "runner")
    remove()
    bus.emit(Event.RUNNER_INIT, "runner")

    handler.assert_called_once_with("runner")
    assert bus.handlers(Event.RUNNER_INIT) == ()


def test_unsubscribe_unknown_handler_is_ignored() -> None:
    """Removing a handler that never subscribed does nothing."""
    bus = EventBus()

    bus.unsubscribe(Event.RUNNER_INIT, Mock())

    assert bus.handlers(Event.RUNNER_INIT) == ()


def test_unknown_event_raises() -> None:
    """Names outside the catalog are rejected."""
    bus = EventBus()

    with pytest.raises(UnknownEventError) as exc_info:
        bus.subscribe("class_metadata", Mock())

    assert "class_metadata" in str(exc_info.value)
    assert "Available events" in str(exc_info.value)


def test_wrong_payload_arity_raises() -> None:
    """Payloads must match the declared fields of the event."""
    bus = EventBus()

    with pytest.raises(TypeError, match="expects 2 argument"):
        bus.emit(Event.RUN_FILE, "runner")


def test_failing_handler_does_not_stop_delivery(
    caplog: pytest.LogCaptureFixture,
) -> None:
    """A raising handler is logged and later handlers still run."""
    bus = EventBus()
    after = Mock()
    bus.subscribe(Event.RUNNER_INIT, Mock(side_effect=RuntimeError("boom")))
    bus.subscribe(Event.RUNNER_INIT, after)

    with caplog.at_level(logging.ERROR):
        bus.emit(Event.RUNNER_INIT, "runner")

    after.assert_called_once_with("runner")
    assert "failed for event runner_init" in caplog.text


async def test_async_handler_is_not_awaited() -> None:
    """Emission returns before an asynchronous handler completes."""
    bus = EventBus()
    release = asyncio.Event()
    finished: list[str] = []

    async def handler(runner: str) -> None:
        await release.wait()
        finished.append(runner)

    bus.subscribe(Event.RUNNER_INIT, handler)
    bus.emit(Event.RUNNER_INIT, "runner")

    assert finished == []

    release.set()
    await bus.drain()

    assert finished == ["runner"]


async def test_async_handler_failure_is_logged(
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Errors of scheduled handlers are logged, not raised."""
    bus = EventBus()

    async def handler(runner: str) -> None:
        raise ValueError("async boom")

    bus.subscribe(Event.RUNNER_INIT, handler)

    with caplog.at_level(logging.ERROR):
        bus.emit(Event.RUNNER_INIT, "runner")
        await bus.drain()

    assert "Async handler failed for event runner_init" in caplog.text
