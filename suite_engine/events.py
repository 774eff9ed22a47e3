"""Publish/subscribe channel for engine lifecycle events."""

import asyncio
import inspect
import logging
from collections.abc import Callable, Mapping, Sequence
from enum import StrEnum
from typing import Any

log = logging.getLogger(__name__)


class Event(StrEnum):
    """Fixed catalog of events emitted by the runner."""

    RUNNER_INIT = "runner_init"
    RUN_FILE = "run_file"
    FILE_PARSED = "file_parsed"
    FILE_RESULT = "file_result"
    RUN_CLASS = "run_class"
    CLASS_CONSTRUCTOR = "class_constructor"
    CLASS_RESULT = "class_result"
    CLASS_HOOK = "class_hook"
    CLASS_HOOK_RESULT = "class_hook_result"
    CLASS_EACH_HOOK = "class_each_hook"
    CLASS_EACH_HOOK_RESULT = "class_each_hook_result"
    CLASS_METHOD = "class_method"
    CLASS_METHOD_RESULT = "class_method_result"


PAYLOADS: Mapping[Event, Sequence[str]] = {
    Event.RUNNER_INIT: ("runner",),
    Event.RUN_FILE: ("runner", "file"),
    Event.FILE_PARSED: ("runner", "file"),
    Event.FILE_RESULT: ("runner", "file_result"),
    Event.RUN_CLASS: ("runner", "class_def"),
    Event.CLASS_CONSTRUCTOR: ("runner", "class_def", "instance"),
    Event.CLASS_RESULT: ("runner", "class_def", "class_result"),
    Event.CLASS_HOOK: ("runner", "class_def", "hook"),
    Event.CLASS_HOOK_RESULT: ("runner", "class_def", "hook", "result"),
    Event.CLASS_EACH_HOOK: ("runner", "class_def", "test", "hook"),
    Event.CLASS_EACH_HOOK_RESULT: ("runner", "class_def", "test", "hook", "result"),
    Event.CLASS_METHOD: ("runner", "class_def", "test"),
    Event.CLASS_METHOD_RESULT: ("runner", "class_def", "test", "result"),
}

Handler = Callable[..., Any]
# Emits on behalf of a runner: emit(event, *payload without the runner)
Emitter = Callable[..., None]


class UnknownEventError(ValueError):
    """Raised when an event name is not part of the catalog."""


def resolve_event(name: str) -> Event:
    """Return the catalog entry for a name.

    Raises:
        UnknownEventError: If the name is not in the catalog

    """
    try:
        return Event(name)
    except ValueError:
        available = [event.value for event in Event]
        raise UnknownEventError(
            f"Unknown event '{name}'. Available events: {available}"
        ) from None


class EventBus:
    """Synchronous, ordered delivery of catalog events to subscribers.

    Handlers are called in subscription order. A handler returning an
    awaitable has it scheduled on the running loop; the bus never waits for
    it. A handler that raises is logged and the remaining handlers still run.
    """

    def __init__(self) -> None:
        self._handlers: dict[Event, list[Handler]] = {event: [] for event in Event}
        self._pending: set[asyncio.Future[Any]] = set()

    def subscribe(self, event: str, handler: Handler) -> Callable[[], None]:
        """Register a handler and return a callable that removes it."""
        resolved = resolve_event(event)
        self._handlers[resolved].append(handler)
        return lambda: self.unsubscribe(resolved, handler)

    def unsubscribe(self, event: str, handler: Handler) -> None:
        """Remove a handler; unknown handlers are ignored."""
        handlers = self._handlers[resolve_event(event)]
        if handler in handlers:
            handlers.remove(handler)

    def handlers(self, event: str) -> Sequence[Handler]:
        return tuple(self._handlers[resolve_event(event)])

    def emit(self, event: str, *payload: Any) -> None:
        """Deliver an event to every handler subscribed at call time.

        Raises:
            UnknownEventError: If the event is not in the catalog
            TypeError: If the payload does not match the event's fields

        """
        resolved = resolve_event(event)
        fields = PAYLOADS[resolved]
        if len(payload) != len(fields):
            raise TypeError(
                f"Event '{resolved}' expects {len(fields)} argument(s) "
                f"({', '.join(fields)}), got {len(payload)}"
            )

        for handler in tuple(self._handlers[resolved]):
            try:
                outcome = handler(*payload)
            except Exception:
                log.exception("Handler %r failed for event %s", handler, resolved)
                continue
            if inspect.isawaitable(outcome):
                self._schedule(resolved, outcome)

    def _schedule(self, event: Event, awaitable: Any) -> None:
        future = asyncio.ensure_future(awaitable)
        self._pending.add(future)

        def _done(done: asyncio.Future[Any]) -> None:
            self._pending.discard(done)
            if not done.cancelled() and (error := done.exception()) is not None:
                log.error(
                    "Async handler failed for event %s: %s",
                    event,
                    error,
                    exc_info=error,
                )

        future.add_done_callback(_done)

    async def drain(self) -> None:
        """Wait for scheduled asynchronous handlers to finish."""
        while self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)