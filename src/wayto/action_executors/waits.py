"""Wait action executors: WAIT_FOR_PATTERN, WAIT_ROUNDTIME and SLEEP.

These are the suspension points of a script. All of them await the action
context, so other scripts on the event loop keep running.
"""

import logging

from ..exceptions import ExecutionFailureError, PatternTimeoutError
from ..model.actions import Action, Sleep, WaitForPattern, WaitRoundtime
from .base import ActionExecutorBase
from .expression_evaluator import combine_patterns
from .registry import register_executor

logger = logging.getLogger(__name__)


@register_executor
class WaitActionExecutor(ActionExecutorBase):
    """Executor for waits and sleeps.

    Supported actions:
        - WAIT_FOR_PATTERN: block until an incoming line matches; bounded
          waits raise PatternTimeoutError when the bound elapses
        - WAIT_ROUNDTIME: block until the session's action delay clears
        - SLEEP: suspend for a fixed number of seconds
    """

    def get_supported_action_types(self) -> list[str]:
        return ["WAIT_FOR_PATTERN", "WAIT_ROUNDTIME", "SLEEP"]

    async def execute(self, action: Action) -> None:
        if isinstance(action, WaitForPattern):
            await self._wait_for_pattern(action)
        elif isinstance(action, WaitRoundtime):
            await self._wait_roundtime()
        elif isinstance(action, Sleep):
            await self._sleep(action)

    async def _wait_for_pattern(self, action: WaitForPattern) -> None:
        evaluator = self.context.evaluator
        patterns = [await evaluator.evaluate_pattern(p) for p in action.patterns]
        pattern = combine_patterns(patterns)
        timeout = action.timeout
        if timeout is None:
            timeout = self.context.settings.default_wait_timeout

        logger.debug(f"Waiting for {pattern.pattern!r} (timeout={timeout})")
        line = await self.context.primitive("wait_for_pattern", pattern, timeout)
        if line is None:
            if timeout is None:
                raise ExecutionFailureError(
                    "Action context returned no line from an unbounded wait",
                    action_type=action.action_type,
                )
            raise PatternTimeoutError(pattern.pattern, timeout, action.action_type)
        logger.debug(f"Matched: {line}")

    async def _wait_roundtime(self) -> None:
        if await self.context.primitive("is_action_delay_active"):
            logger.debug("Waiting for roundtime to clear")
            await self.context.primitive("wait_for_action_delay_clear")

    async def _sleep(self, action: Sleep) -> None:
        seconds = await self.context.evaluator.evaluate(action.seconds)
        if isinstance(seconds, bool) or not isinstance(seconds, (int, float)) or seconds < 0:
            raise ExecutionFailureError(
                f"Invalid sleep duration: {seconds!r}", action_type=action.action_type
            )
        await self.context.primitive("sleep", float(seconds))
