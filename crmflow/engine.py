"""Workflow engine: definition management and execution orchestration."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from .constants import DEFAULT_DATE_RANGE, EXECUTION_ENTITY, WORKFLOW_ENTITY
from .contracts import (
    PipelineResult,
    ValidationReport,
    Workflow,
    WorkflowAnalytics,
    WorkflowDefinition,
    WorkflowExecution,
)
from .errors import (
    InactiveWorkflowError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from .execute import ActionExecutor, ActionPipeline
from .history import ExecutionHistory
from .serialization import (
    execution_completion,
    execution_from_record,
    execution_to_record,
    utcnow,
    workflow_from_record,
    workflow_to_record,
)
from .store import EntityStore, RecordNotFound

DefinitionInput = Union[WorkflowDefinition, Mapping]


def validate_workflow(definition: DefinitionInput) -> ValidationReport:
    """Check the structural rules of a workflow definition.

    Accepts a :class:`WorkflowDefinition` or a plain mapping with camelCase
    or snake_case keys. Never raises; every violated rule adds one message.
    """
    if isinstance(definition, WorkflowDefinition):
        data: Mapping = definition.model_dump()
    elif isinstance(definition, Mapping):
        data = definition
    else:
        data = {}

    errors = []

    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        errors.append("Workflow name is required")

    trigger_type = data.get("triggerType") or data.get("trigger_type")
    if not trigger_type:
        errors.append("Trigger type is required")

    actions = data.get("actions")
    if not isinstance(actions, (list, tuple)) or len(actions) == 0:
        errors.append("At least one action is required")

    return ValidationReport(is_valid=not errors, errors=errors)


def _coerce(definition: DefinitionInput) -> WorkflowDefinition:
    report = validate_workflow(definition)
    if not report.is_valid:
        raise ValidationError(report.errors)
    if isinstance(definition, WorkflowDefinition):
        return definition
    try:
        return WorkflowDefinition.model_validate(dict(definition))
    except PydanticValidationError as e:
        raise ValidationError(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in e.errors()
        ) from e


class WorkflowEngine:
    """Service managing workflow definitions and their execution.

    All persistence goes through the injected entity store.
    """

    def __init__(
        self,
        store: EntityStore,
        executor: ActionExecutor | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._store = store
        self._logger = logger or logging.getLogger(__name__)
        self._executor = executor or ActionExecutor(store)
        self._pipeline = ActionPipeline(self._executor)
        self.history = ExecutionHistory(store, logger=self._logger)

    # ------------------------------------------------------------------
    # Store access
    async def _call(self, operation: str, entity: str, method, *args: Any) -> Any:
        try:
            return await method(entity, *args)
        except RecordNotFound:
            raise
        except Exception as e:
            self._logger.error(f"Failed to {operation} {entity}: {e}")
            raise PersistenceError(operation, entity, str(e)) from e

    # ------------------------------------------------------------------
    # Definitions
    @staticmethod
    def validate_workflow(definition: DefinitionInput) -> ValidationReport:
        return validate_workflow(definition)

    async def create_workflow(self, definition: DefinitionInput) -> Workflow:
        """Validate and persist a new workflow."""
        definition = _coerce(definition)
        record = await self._call(
            "create", WORKFLOW_ENTITY, self._store.create, workflow_to_record(definition)
        )
        self._logger.info(f"Created workflow {record['id']} ({definition.name})")
        return workflow_from_record(record, self._logger)

    async def update_workflow(
        self, workflow_id: str, definition: DefinitionInput
    ) -> Workflow:
        """Validate and persist changes to an existing workflow."""
        definition = _coerce(definition)
        fields = workflow_to_record(definition, partial=True)
        fields["updated_at"] = utcnow().isoformat()
        try:
            record = await self._call(
                "update", WORKFLOW_ENTITY, self._store.update, workflow_id, fields
            )
        except RecordNotFound as e:
            raise NotFoundError(workflow_id) from e
        self._logger.info(f"Updated workflow {workflow_id}")
        return workflow_from_record(record, self._logger)

    async def get_workflow(self, workflow_id: str) -> Workflow:
        record = await self._call("get", WORKFLOW_ENTITY, self._store.get, workflow_id)
        if record is None:
            raise NotFoundError(workflow_id)
        return workflow_from_record(record, self._logger)

    async def list_workflows(self) -> list[Workflow]:
        """Return all workflows, newest first."""
        records = await self._call(
            "list", WORKFLOW_ENTITY, self._store.list, None, "-created_date"
        )
        return [workflow_from_record(r, self._logger) for r in records]

    async def delete_workflow(self, workflow_id: str) -> bool:
        """Delete a workflow. Its execution history is left in place."""
        await self._call("delete", WORKFLOW_ENTITY, self._store.delete, workflow_id)
        self._logger.info(f"Deleted workflow {workflow_id}")
        return True

    # ------------------------------------------------------------------
    # Execution
    async def execute_workflow(
        self, workflow_id: str, context: Optional[Dict[str, Any]] = None
    ) -> WorkflowExecution:
        """Run a workflow against ``context`` and record the execution.

        A workflow whose stored actions could not be read still gets an
        execution record, finalized as ``failed``.

        Raises:
            NotFoundError: The workflow does not exist.
            InactiveWorkflowError: The workflow is not active.
            PersistenceError: The execution record could not be written.
        """
        context = dict(context or {})
        workflow = await self.get_workflow(workflow_id)
        if not workflow.is_active:
            raise InactiveWorkflowError(workflow_id)

        record = await self._call(
            "create",
            EXECUTION_ENTITY,
            self._store.create,
            execution_to_record(workflow_id, context, utcnow()),
        )
        execution_id = record["id"]
        self._logger.info(
            f"Started execution {execution_id} of workflow {workflow_id}"
        )

        if workflow.actions:
            result = await self._pipeline.run(workflow.actions, context, execution_id)
        else:
            self._logger.warning(
                f"Workflow {workflow_id} has no executable actions; "
                f"failing execution {execution_id}"
            )
            result = PipelineResult(
                success=False, error="Workflow has no executable actions"
            )

        try:
            record = await self._call(
                "update",
                EXECUTION_ENTITY,
                self._store.update,
                execution_id,
                execution_completion(result, utcnow()),
            )
        except RecordNotFound as e:
            raise PersistenceError("update", EXECUTION_ENTITY, str(e)) from e

        execution = execution_from_record(record, self._logger)
        self._logger.info(
            f"Execution {execution_id} of workflow {workflow_id} {execution.status}"
        )
        return execution

    # ------------------------------------------------------------------
    # History
    async def get_executions(self, workflow_id: str) -> list[WorkflowExecution]:
        return await self.history.get_executions(workflow_id)

    async def get_analytics(
        self, workflow_id: str, date_range: str = DEFAULT_DATE_RANGE
    ) -> WorkflowAnalytics:
        return await self.history.get_analytics(workflow_id, date_range)
