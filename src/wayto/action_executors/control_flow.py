"""Control flow action executors.

Supported actions:
    - NOOP: does nothing
    - CONDITIONAL: ``stmt if cond`` / ``stmt unless cond``
    - LOOP: ``stmt while cond`` / ``stmt until cond``
    - REPEAT: ``N.times{ ... }``

Conditions are evaluated once per check. Nothing here retries on failure;
an error in a nested action propagates out of the loop.
"""

import asyncio
import logging

from ..model.actions import Action, Conditional, Loop, Repeat
from .base import ActionExecutorBase
from .expression_evaluator import truthy
from .registry import register_executor

logger = logging.getLogger(__name__)


@register_executor
class ControlFlowActionExecutor(ActionExecutorBase):
    """Executor for branching and looping actions."""

    def get_supported_action_types(self) -> list[str]:
        return ["NOOP", "CONDITIONAL", "LOOP", "REPEAT"]

    async def execute(self, action: Action) -> None:
        if isinstance(action, Conditional):
            await self._execute_conditional(action)
        elif isinstance(action, Loop):
            await self._execute_loop(action)
        elif isinstance(action, Repeat):
            await self._execute_repeat(action)

    async def _execute_conditional(self, action: Conditional) -> None:
        holds = truthy(await self.context.evaluator.evaluate(action.condition))
        if holds != action.negate:
            await self._run_body(action.body)
        else:
            logger.debug("Condition not met, skipping")

    async def _execute_loop(self, action: Loop) -> None:
        iterations = 0
        while truthy(await self.context.evaluator.evaluate(action.condition)) != action.until:
            await self._run_body(action.body)
            iterations += 1
            # one event loop turn per iteration
            await asyncio.sleep(0)
        logger.debug(f"Loop finished after {iterations} iterations")

    async def _execute_repeat(self, action: Repeat) -> None:
        for _ in range(action.count):
            await self._run_body(action.body)
