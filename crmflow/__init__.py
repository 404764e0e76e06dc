"""crmflow: CRM workflow definitions and execution."""

from .actions import DEFAULT_ACTIONS, ActionRegistry
from .contracts import (
    ActionResult,
    ActionSpec,
    PipelineResult,
    Workflow,
    WorkflowAnalytics,
    WorkflowDefinition,
    WorkflowExecution,
)
from .engine import WorkflowEngine, validate_workflow
from .errors import (
    CRMFlowError,
    InactiveWorkflowError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from .execute import ActionExecutor, ActionPipeline
from .history import ExecutionHistory
from .store import get_store

__version__ = "0.1.0"
__all__ = [
    "ActionExecutor",
    "ActionPipeline",
    "ActionRegistry",
    "ActionResult",
    "ActionSpec",
    "CRMFlowError",
    "DEFAULT_ACTIONS",
    "ExecutionHistory",
    "InactiveWorkflowError",
    "NotFoundError",
    "PersistenceError",
    "PipelineResult",
    "ValidationError",
    "Workflow",
    "WorkflowAnalytics",
    "WorkflowDefinition",
    "WorkflowEngine",
    "WorkflowExecution",
    "get_store",
    "validate_workflow",
]
