"""Navigation action executor: CROSS_CALL.

``Map[7].wayto['3668'].call`` runs the transition registered on another
origin. The callee is looked up in the registry injected into the execution
context; tables never reference each other directly.
"""

import logging

from ..exceptions import ExecutionFailureError
from ..model.actions import Action, CrossCall, Send
from ..model.expressions import Literal
from ..model.transition import Direction
from .base import ActionExecutorBase
from .registry import register_executor

logger = logging.getLogger(__name__)


@register_executor
class NavigationActionExecutor(ActionExecutorBase):
    """Executor for calls into another origin's wayto table."""

    def get_supported_action_types(self) -> list[str]:
        return ["CROSS_CALL"]

    async def execute(self, action: Action) -> None:
        if not isinstance(action, CrossCall):
            return

        registry = self.context.registry
        if registry is None:
            raise ExecutionFailureError(
                f"Cannot call Map[{action.map_id}].wayto[{action.target_id!r}] without a map registry",
                action_type=action.action_type,
            )

        max_depth = self.context.settings.max_call_depth
        if self.context.call_depth >= max_depth:
            raise ExecutionFailureError(
                f"Cross-map calls nested deeper than {max_depth} "
                f"(at Map[{action.map_id}].wayto[{action.target_id!r}])",
                action_type=action.action_type,
            )

        transition = registry.lookup_foreign(action.map_id, action.target_id)
        logger.debug(
            f"Calling {action.map_id} -> {action.target_id} from {self.context.origin} "
            f"(depth {self.context.call_depth + 1})"
        )

        child = self.context.child(action.map_id, action.target_id)
        if isinstance(transition, Direction):
            body = (Send(Literal(transition.token), move=True),)
        else:
            body = transition.actions
        await child.execute_actions(body, child)
