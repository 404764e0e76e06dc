"""Core data contracts for crmflow workflows."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .constants import DEFAULT_CATEGORY

ExecutionStatus = Literal["running", "completed", "failed"]


class CamelModel(BaseModel):
    """Accepts both snake_case and the camelCase names used by CRM clients."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ActionSpec(CamelModel):
    """Defines one action in a workflow."""

    type: str
    config: Dict[str, Any] = Field(default_factory=dict)
    critical: bool = False


class WorkflowDefinition(CamelModel):
    """Caller-supplied workflow definition for create and update."""

    name: str = ""
    description: Optional[str] = None
    trigger_type: Optional[str] = None
    trigger_conditions: Dict[str, Any] = Field(default_factory=dict)
    actions: List[ActionSpec] = Field(default_factory=list)
    nodes: List[Any] = Field(default_factory=list)
    connections: List[Any] = Field(default_factory=list)
    is_active: bool = False
    category: str = DEFAULT_CATEGORY
    created_by: Optional[str] = None


class Workflow(WorkflowDefinition):
    """Persisted workflow in structured form."""

    id: str
    created_date: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ValidationReport(BaseModel):
    """Outcome of validating a workflow definition."""

    is_valid: bool
    errors: List[str] = Field(default_factory=list)


class ActionResult(BaseModel):
    """Uniform result of executing a single action."""

    success: bool
    action_type: Optional[str] = None
    data: Any = None
    message: Optional[str] = None
    error: Optional[str] = None


class PipelineResult(BaseModel):
    """Aggregated result of running a workflow's actions."""

    success: bool
    results: List[ActionResult] = Field(default_factory=list)
    error: Optional[str] = None


class WorkflowExecution(BaseModel):
    """One recorded run of a workflow."""

    id: str
    workflow_id: str
    status: ExecutionStatus = "running"
    context_data: Dict[str, Any] = Field(default_factory=dict)
    result_data: Optional[PipelineResult] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def duration(self) -> Optional[float]:
        """Wall-clock seconds between start and completion, if both known."""
        if self.started_at is None or self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()


class WorkflowAnalytics(BaseModel):
    """Summary statistics over a workflow's executions."""

    total_executions: int = 0
    successful_executions: int = 0
    failed_executions: int = 0
    success_rate: Union[str, int] = 0
    average_execution_time: float = 0
    executions_by_day: Dict[str, int] = Field(default_factory=dict)
