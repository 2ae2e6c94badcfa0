"""Query debouncer for the UI boundary.

Typing produces a burst of queries; only the last one after a quiet period
should reach the engine, and only the newest call's result should be
applied to visible state. The engine itself stays synchronous.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable

from .config import SearchConfig

logger = logging.getLogger(__name__)


@dataclass
class PendingCall:
    """Tracks a pending debounced call."""

    task: asyncio.Task[None]
    fn: Callable[..., Any]
    args: tuple[Any, ...]
    generation: int


class SearchDebouncer:
    """Debounces calls per key with last-call-wins delivery.

    Each scheduled call cancels the pending call for the same key and
    receives a new generation number. When a call completes, its result is
    passed to `on_result` only if no newer call was scheduled for that key
    in the meantime; stale results are dropped.

    Attributes:
        delay_ms: Quiet period before a call runs (default: 300ms)
    """

    def __init__(
        self,
        delay_ms: int = 300,
        on_result: Callable[[str, Any], None] | None = None,
    ) -> None:
        """Initialize the debouncer.

        Args:
            delay_ms: Quiet period in milliseconds.
            on_result: Receives (key, result) for every non-stale call.
        """
        self._delay = delay_ms / 1000
        self._on_result = on_result

        # key -> PendingCall
        self._pending: dict[str, PendingCall] = {}

        # key -> latest issued generation
        self._generations: dict[str, int] = {}

    @classmethod
    def from_config(
        cls,
        config: SearchConfig,
        on_result: Callable[[str, Any], None] | None = None,
    ) -> SearchDebouncer:
        """Create a debouncer using `config.debounce_ms` as the quiet period."""
        return cls(delay_ms=config.debounce_ms, on_result=on_result)

    def _next_generation(self, key: str) -> int:
        generation = self._generations.get(key, 0) + 1
        self._generations[key] = generation
        return generation

    def is_current(self, key: str, generation: int) -> bool:
        """Check whether a generation is still the newest for its key."""
        return self._generations.get(key) == generation

    async def _run(self, key: str, fn: Callable[..., Any], args: tuple[Any, ...], generation: int) -> None:
        try:
            result = fn(*args)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            logger.warning("Debounced call for %s failed: %s", key, e)
            return

        if not self.is_current(key, generation):
            logger.debug("Discarded stale result for %s (generation %d)", key, generation)
            return

        if self._on_result is not None:
            self._on_result(key, result)

    async def _cancel(self, pending: PendingCall) -> None:
        pending.task.cancel()
        try:
            await pending.task
        except asyncio.CancelledError:
            pass

    async def schedule(self, key: str, fn: Callable[..., Any], *args: Any) -> int:
        """Schedule a debounced call.

        If a call is already pending for this key, it is cancelled and
        replaced.

        Args:
            key: Debounce channel (e.g. one per search box).
            fn: Function or coroutine function to call after the delay.
            *args: Arguments for fn.

        Returns:
            The generation number assigned to this call.
        """
        if key in self._pending:
            await self._cancel(self._pending.pop(key))
            logger.debug("Cancelled pending call for %s", key)

        generation = self._next_generation(key)

        async def _delayed() -> None:
            await asyncio.sleep(self._delay)
            pending = self._pending.get(key)
            if pending is not None and pending.generation == generation:
                del self._pending[key]
            await self._run(key, fn, args, generation)

        task = asyncio.create_task(_delayed())
        self._pending[key] = PendingCall(task=task, fn=fn, args=args, generation=generation)
        logger.debug(
            "Scheduled debounced call for %s (generation %d, delay: %.2fs)",
            key,
            generation,
            self._delay,
        )
        return generation

    async def flush(self) -> None:
        """Run all pending calls immediately."""
        if not self._pending:
            return

        to_execute = list(self._pending.items())
        self._pending.clear()

        for key, pending in to_execute:
            await self._cancel(pending)
            await self._run(key, pending.fn, pending.args, pending.generation)

    async def cancel_all(self) -> None:
        """Cancel all pending calls without running them."""
        for key, pending in list(self._pending.items()):
            await self._cancel(pending)
            logger.debug("Cancelled call for %s (shutdown)", key)
        self._pending.clear()

    def invalidate(self, key: str) -> None:
        """Mark any in-flight result for key as stale without scheduling."""
        self._next_generation(key)

    def pending_count(self) -> int:
        """Return the number of pending calls."""
        return len(self._pending)

    def has_pending(self, key: str) -> bool:
        return key in self._pending
