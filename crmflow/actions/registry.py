"""Registry mapping action types to their handlers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional

from ..contracts import ActionResult
from ..store import EntityStore

Delegate = Callable[[str, Dict[str, Any], Dict[str, Any]], Awaitable[Any]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ActionDependencies:
    """Collaborators available to every action handler.

    ``delegate`` receives effects this engine does not perform itself
    (sending email, assignment, list membership, meetings) as
    ``(action_type, config, context)``.
    """

    store: EntityStore
    delegate: Optional[Delegate] = None
    clock: Callable[[], datetime] = field(default=_utcnow)


ActionHandler = Callable[
    [Dict[str, Any], Dict[str, Any], ActionDependencies], Awaitable[ActionResult]
]


class ActionRegistry:
    """Maps action type names to async handlers."""

    def __init__(self) -> None:
        self._handlers: Dict[str, ActionHandler] = {}

    def register(self, action_type: str) -> Callable[[ActionHandler], ActionHandler]:
        """Decorator registering ``handler`` for ``action_type``.

        Registering an existing type replaces its handler.
        """

        def decorator(handler: ActionHandler) -> ActionHandler:
            self._handlers[action_type] = handler
            return handler

        return decorator

    def get(self, action_type: str) -> Optional[ActionHandler]:
        return self._handlers.get(action_type)

    def types(self) -> list[str]:
        return sorted(self._handlers)

    def copy(self) -> "ActionRegistry":
        clone = ActionRegistry()
        clone._handlers = dict(self._handlers)
        return clone

    def __contains__(self, action_type: str) -> bool:
        return action_type in self._handlers


DEFAULT_ACTIONS = ActionRegistry()
