"""Command action executors: SEND and MULTI_SEND."""

import logging

from ..model.actions import Action, MultiSend, Send
from .base import ActionExecutorBase
from .registry import register_executor

logger = logging.getLogger(__name__)


@register_executor
class CommandActionExecutor(ActionExecutorBase):
    """Executor for actions that emit command lines to the session.

    Supported actions:
        - SEND: one line (``fput``, ``put``, ``move``)
        - MULTI_SEND: a fixed ordered list of lines (``multifput``)

    Sends do not wait for any reply.
    """

    def get_supported_action_types(self) -> list[str]:
        return ["SEND", "MULTI_SEND"]

    async def execute(self, action: Action) -> None:
        if isinstance(action, Send):
            await self._send(await self.context.evaluator.evaluate_text(action.command), action.move)
        elif isinstance(action, MultiSend):
            lines = [await self.context.evaluator.evaluate_text(c) for c in action.commands]
            for line in lines:
                await self._send(line, move=False)

    async def _send(self, line: str, move: bool) -> None:
        logger.debug(f"{'Moving' if move else 'Sending'}: {line}")
        await self.context.primitive("send", line)
