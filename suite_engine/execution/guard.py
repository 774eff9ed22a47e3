"""Racing test and hook functions against a deadline."""

import asyncio
import inspect
import logging
import traceback
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Literal

log = logging.getLogger(__name__)

# Tasks that kept running after being cancelled on timeout. Exceeding
# MAX_ORPHANS only logs a warning.
MAX_ORPHANS = 64
_orphans: set[asyncio.Task[Any]] = set()


class TestTimeoutError(TimeoutError):
    """Raised when a function does not settle before its deadline."""

    __test__ = False


@dataclass(frozen=True, kw_only=True)
class Outcome:
    """Outcome of one guarded function call."""

    status: Literal["passed", "failed"]
    start: datetime
    stop: datetime
    error: str | None = None
    exception: BaseException | None = None
    timed_out: bool = False


def now() -> datetime:
    return datetime.now(timezone.utc)


def describe_function(fn: Callable[..., Any]) -> str:
    return getattr(fn, "__qualname__", None) or repr(fn)


@dataclass(frozen=True, kw_only=True)
class TimeoutGuard:
    """Runs functions against a shared instance with a deadline.

    Coroutine functions are raced against ``timeout`` seconds. When the timer
    wins, the call is cancelled and reported as failed; code that suppresses
    the cancellation keeps running in the background. It is tracked, never
    awaited, and a warning is logged once more than ``MAX_ORPHANS`` of them
    are alive; nothing caps their number. Plain functions run inline on the
    event loop and cannot be interrupted.

    Anything a function raises is captured except cancellation of the caller,
    ``KeyboardInterrupt`` and ``GeneratorExit``.
    """

    timeout: float

    async def run_function(
        self,
        fn: Callable[..., Any],
        instance: object,
        args: Sequence[Any] = (),
    ) -> Outcome:
        """Call ``fn(instance, *args)`` and report how it settled."""
        start = now()
        try:
            returned = fn(instance, *args)
            if inspect.isawaitable(returned):
                await self._race(fn, returned)
        except TestTimeoutError as e:
            log.warning("%s", e)
            return Outcome(
                status="failed",
                start=start,
                stop=now(),
                error="".join(traceback.format_exception_only(e)).strip(),
                exception=e,
                timed_out=True,
            )
        except (asyncio.CancelledError, KeyboardInterrupt, GeneratorExit):
            raise
        except BaseException as e:
            log.debug("%s failed: %s", describe_function(fn), e, exc_info=e)
            return Outcome(
                status="failed",
                start=start,
                stop=now(),
                error="".join(traceback.format_exception(e)),
                exception=e,
            )

        return Outcome(status="passed", start=start, stop=now())

    async def _race(self, fn: Callable[..., Any], awaitable: Any) -> None:
        task = asyncio.ensure_future(awaitable)
        try:
            done, _ = await asyncio.wait({task}, timeout=self.timeout)
        except asyncio.CancelledError:
            task.cancel()
            raise

        if task in done:
            if task.cancelled():
                raise RuntimeError(f"{describe_function(fn)} was cancelled")
            task.result()
            return

        task.cancel()
        _track_orphan(task)
        raise TestTimeoutError(
            f"{describe_function(fn)} did not finish within {self.timeout:g}s"
        )


def _track_orphan(task: asyncio.Task[Any]) -> None:
    _orphans.add(task)
    task.add_done_callback(_orphans.discard)
    if len(_orphans) > MAX_ORPHANS:
        log.warning(
            "%d timed-out functions are still running after cancellation",
            len(_orphans),
        )
