"""Action execution for crmflow workflows."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Sequence

from .actions import DEFAULT_ACTIONS, ActionDependencies, ActionRegistry, Delegate
from .contracts import ActionResult, ActionSpec, PipelineResult
from .store import EntityStore

logger = logging.getLogger(__name__)


class ActionExecutor:
    """Executes a single workflow action by dispatching on its type."""

    def __init__(
        self,
        store: EntityStore,
        registry: ActionRegistry | None = None,
        delegate: Optional[Delegate] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._registry = registry or DEFAULT_ACTIONS
        deps = ActionDependencies(store=store, delegate=delegate)
        if clock is not None:
            deps.clock = clock
        self._deps = deps

    @property
    def registry(self) -> ActionRegistry:
        return self._registry

    async def execute(
        self,
        action: ActionSpec,
        context: Dict[str, Any],
        execution_id: Optional[str] = None,
    ) -> ActionResult:
        """Run ``action`` against ``context``.

        Unknown action types produce a failure result instead of raising.
        """
        handler = self._registry.get(action.type)
        if handler is None:
            logger.warning(
                f"Unknown action type {action.type} in execution {execution_id}"
            )
            return ActionResult(
                success=False,
                action_type=action.type,
                error=f"Unknown action type: {action.type}",
            )

        result = await handler(action.config, context, self._deps)
        result = result.model_copy(update={"action_type": action.type})
        if result.success:
            logger.info(f"Action {action.type} succeeded in execution {execution_id}")
        else:
            logger.warning(
                f"Action {action.type} failed in execution {execution_id}: {result.error}"
            )
        return result


class ActionPipeline:
    """Runs a workflow's actions in order, halting on critical failures."""

    def __init__(self, executor: ActionExecutor) -> None:
        self._executor = executor

    async def run(
        self,
        actions: Sequence[ActionSpec],
        context: Dict[str, Any],
        execution_id: Optional[str] = None,
    ) -> PipelineResult:
        """Execute ``actions`` sequentially.

        The run succeeds unless a critical action fails; failures of
        non-critical actions are only reported in ``results``.
        """
        results: list[ActionResult] = []
        for action in actions:
            try:
                result = await self._executor.execute(action, context, execution_id)
            except Exception as e:
                logger.exception(
                    f"Action {action.type} raised in execution {execution_id}"
                )
                result = ActionResult(
                    success=False, action_type=action.type, error=str(e)
                )
            results.append(result)

            if not result.success and action.critical:
                logger.warning(
                    f"Critical action {action.type} failed; halting execution {execution_id}"
                )
                return PipelineResult(
                    success=False,
                    results=results,
                    error=f"Critical action failed: {action.type}",
                )

        return PipelineResult(success=True, results=results)
