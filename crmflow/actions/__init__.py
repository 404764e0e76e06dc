"""Action handlers and their registry."""

from . import builtin  # noqa: F401  registers the built-in handlers
from .registry import (
    DEFAULT_ACTIONS,
    ActionDependencies,
    ActionHandler,
    ActionRegistry,
    Delegate,
)

__all__ = [
    "DEFAULT_ACTIONS",
    "ActionDependencies",
    "ActionHandler",
    "ActionRegistry",
    "Delegate",
]
