"""MockActionContext - an in-memory game session for running scripts offline.

Scripts executed against it send into a list instead of a socket and read
"game output" from a queue the test (or the ``wayto run`` command) fills.
Time is virtual by default: sleeps, roundtime and bounded waits on an empty
queue complete immediately while a virtual clock advances.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any

from ..config import get_settings

logger = logging.getLogger(__name__)


class MockActionContext:
    """Scriptable stand-in for a live session.

    Example:
        ctx = MockActionContext(responses={"join leader": ["Bob is inviting you."]})
        result = await ScriptExecutor().execute(transition, ctx)
        assert ctx.sent == ["join leader", "go portal"]

    Attributes:
        sent: Every line sent, in order
        slept: Durations passed to ``sleep``
        seen: Incoming lines consumed by pattern waits
        external_vars: Backing store of the external key/value interface
        statuses: Statuses reported by ``has_status``
        roundtime: Remaining roundtime in seconds
        instant_mode: If True, time is virtual
        elapsed: Virtual seconds consumed so far
    """

    def __init__(
        self,
        incoming: Iterable[str] = (),
        responses: Mapping[str, Iterable[str]] | None = None,
        external_vars: Mapping[str, Any] | None = None,
        statuses: Iterable[str] = (),
        roundtime: float = 0.0,
        instant_mode: bool = True,
        fail_on_send: BaseException | None = None,
    ) -> None:
        """Initialize the mock session.

        Args:
            incoming: Lines queued before the script starts
            responses: Lines to enqueue whenever the exact command is sent
            external_vars: Initial external variables
            statuses: Statuses the character has ("hidden", "stunned", ...)
            roundtime: Initial roundtime in seconds
            instant_mode: If True, sleeps and timeouts do not really wait
            fail_on_send: Exception raised by every ``send`` (connection loss)
        """
        self._queue: asyncio.Queue[str] = asyncio.Queue()
        self.responses = {command: list(lines) for command, lines in (responses or {}).items()}
        self.external_vars: dict[str, Any] = dict(external_vars or {})
        self.statuses = {status.rstrip("?") for status in statuses}
        self.roundtime = roundtime
        self.instant_mode = instant_mode
        self.fail_on_send = fail_on_send

        self.sent: list[str] = []
        self.slept: list[float] = []
        self.seen: list[str] = []
        self.elapsed = 0.0

        self.feed(*incoming)

    def feed(self, *lines: str) -> None:
        """Inject incoming game lines."""
        for line in lines:
            self._queue.put_nowait(line)

    @property
    def pending(self) -> int:
        """Number of incoming lines not yet consumed."""
        return self._queue.qsize()

    async def send(self, line: str) -> None:
        if self.fail_on_send is not None:
            raise self.fail_on_send
        logger.debug(f"MockActionContext.send: {line}")
        self.sent.append(line)
        self.feed(*self.responses.get(line, ()))
        await asyncio.sleep(0)

    async def wait_for_pattern(self, pattern: re.Pattern[str], timeout: float | None = None) -> str | None:
        """Consume incoming lines until one matches ``pattern``.

        Non-matching lines are discarded, as a live session scrolls past
        them. In instant mode a bounded wait on an empty queue times out
        at once; an unbounded wait always blocks until a matching line is
        fed.
        """
        loop = asyncio.get_running_loop()
        deadline = None if timeout is None else loop.time() + timeout

        while True:
            if self._queue.empty():
                # Let concurrently running producers feed the queue first
                await asyncio.sleep(0)

            if timeout is not None and self.instant_mode and self._queue.empty():
                logger.debug(f"MockActionContext: {pattern.pattern!r} timed out (virtual)")
                self.elapsed += timeout
                return None

            try:
                if deadline is None or self.instant_mode:
                    line = await self._queue.get()
                else:
                    remaining = deadline - loop.time()
                    if remaining <= 0:
                        return None
                    line = await asyncio.wait_for(self._queue.get(), remaining)
            except asyncio.TimeoutError:
                return None

            self.seen.append(line)
            if pattern.search(line):
                return line

    async def sleep(self, seconds: float) -> None:
        self.slept.append(seconds)
        self.elapsed += seconds
        await asyncio.sleep(0 if self.instant_mode else seconds)

    def is_action_delay_active(self) -> bool:
        return self.roundtime > 0

    async def wait_for_action_delay_clear(self) -> None:
        """Wait out the remaining roundtime."""
        poll_interval = get_settings().roundtime_poll_interval
        while self.roundtime > 0:
            step = min(poll_interval, self.roundtime)
            if not self.instant_mode:
                await asyncio.sleep(step)
            self.roundtime = max(0.0, self.roundtime - step)
            self.elapsed += step
        await asyncio.sleep(0)

    def get_external_var(self, key: str) -> Any:
        return self.external_vars.get(key)

    def set_external_var(self, key: str, value: Any) -> None:
        self.external_vars[key] = value

    def has_status(self, name: str) -> bool:
        return name.rstrip("?") in self.statuses
