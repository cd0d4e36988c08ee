"""Data action executors: ASSIGN, SET_EXTERNAL_VAR and EVALUATE."""

import logging

from ..model.actions import Action, Assign, Evaluate, SetExternalVar
from .base import ActionExecutorBase
from .registry import register_executor

logger = logging.getLogger(__name__)


@register_executor
class DataOperationsExecutor(ActionExecutorBase):
    """Executor for variable writes and side-effect expressions.

    Local variables live in the execution context and vanish with the
    script. ``UserVars`` writes go through the action context's key/value
    interface so the session owns that state.
    """

    def get_supported_action_types(self) -> list[str]:
        return ["ASSIGN", "SET_EXTERNAL_VAR", "EVALUATE"]

    async def execute(self, action: Action) -> None:
        if isinstance(action, Assign):
            value = await self.context.evaluator.evaluate(action.value)
            self.context.variables[action.name] = value
        elif isinstance(action, SetExternalVar):
            value = await self.context.evaluator.evaluate(action.value)
            logger.debug(f"Setting external variable {action.key} = {value!r}")
            await self.context.primitive("set_external_var", action.key, value)
        elif isinstance(action, Evaluate):
            await self.context.evaluator.evaluate(action.expression)
