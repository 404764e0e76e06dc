"""Exceptions raised by the workflow engine."""

from __future__ import annotations

from typing import Iterable


class CRMFlowError(Exception):
    """Base class for all crmflow errors."""


class ValidationError(CRMFlowError):
    """A workflow definition violates one or more structural rules.

    All violated rules are reported together so a caller can show the
    complete list at once.
    """

    def __init__(self, errors: Iterable[str]) -> None:
        self.errors = list(errors)
        super().__init__("Workflow validation failed: " + "; ".join(self.errors))


class NotFoundError(CRMFlowError):
    """A referenced workflow does not exist."""

    def __init__(self, workflow_id: str) -> None:
        self.workflow_id = workflow_id
        super().__init__(f"Workflow {workflow_id} not found")


class InactiveWorkflowError(CRMFlowError):
    """Execution was requested for a workflow that is not active."""

    def __init__(self, workflow_id: str) -> None:
        self.workflow_id = workflow_id
        super().__init__(f"Workflow {workflow_id} is not active")


class PersistenceError(CRMFlowError):
    """The entity store failed while serving an engine-level operation."""

    def __init__(self, operation: str, entity: str, reason: str) -> None:
        self.operation = operation
        self.entity = entity
        super().__init__(f"Failed to {operation} {entity}: {reason}")
