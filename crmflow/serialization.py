"""Conversion between structured models and entity store records.

Workflow and execution records keep their structured fields as JSON text.
This module is the only place that knows about that representation: the
engine works with :mod:`crmflow.contracts` models and hands records to the
store.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError
from pydantic_core import to_jsonable_python

from .constants import SERIALIZED_WORKFLOW_FIELDS
from .contracts import (
    ActionSpec,
    PipelineResult,
    Workflow,
    WorkflowDefinition,
    WorkflowExecution,
)

logger = logging.getLogger(__name__)


@dataclass
class Parsed:
    """Outcome of reading one serialized field."""

    value: Any
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def dump_json(value: Any) -> str:
    """Encode ``value`` as JSON text.

    Dates, UUIDs and models go through pydantic's encoder; anything it does
    not know is written as its ``str()``.
    """
    return json.dumps(to_jsonable_python(value, fallback=str))


def parse_json(raw: Any, expected: type) -> Parsed:
    """Parse ``raw`` into an instance of ``expected`` (``dict`` or ``list``).

    Empty values yield an empty ``expected``. Values that are already
    structured (e.g. from a JSONB column) are accepted as-is.
    """
    if raw is None or raw == "":
        return Parsed(expected())
    if isinstance(raw, (bytes, str)):
        try:
            value = json.loads(raw)
        except ValueError as e:
            return Parsed(expected(), error=f"malformed JSON: {e}")
    else:
        value = raw
    if not isinstance(value, expected):
        return Parsed(
            expected(),
            error=f"expected {expected.__name__}, got {type(value).__name__}",
        )
    return Parsed(value)


def _read_field(
    record: dict, field: str, expected: type, log: logging.Logger
) -> Any:
    parsed = parse_json(record.get(field), expected)
    if not parsed.ok:
        log.warning(
            f"Failed to parse {field} of record {record.get('id')}: {parsed.error}"
        )
    return parsed.value


def workflow_to_record(definition: WorkflowDefinition, partial: bool = False) -> dict:
    """Build the store representation of ``definition``.

    With ``partial`` set, ``is_active`` and ``category`` are only written
    when the caller set them explicitly, so an update leaves them untouched
    otherwise.
    """
    record = {
        "name": definition.name,
        "description": definition.description,
        "trigger_type": definition.trigger_type,
        "trigger_conditions": dump_json(definition.trigger_conditions),
        "actions": dump_json([a.model_dump() for a in definition.actions]),
        "nodes": dump_json(definition.nodes),
        "connections": dump_json(definition.connections),
    }
    if not partial or "is_active" in definition.model_fields_set:
        record["is_active"] = definition.is_active
    if not partial or "category" in definition.model_fields_set:
        record["category"] = definition.category
    if not partial:
        record["created_by"] = definition.created_by
    return record


def _read_actions(raw: list, record_id: Any, log: logging.Logger) -> list[ActionSpec]:
    actions = []
    for index, item in enumerate(raw):
        try:
            actions.append(ActionSpec.model_validate(item))
        except PydanticValidationError as e:
            log.warning(f"Skipping unreadable action {index} of workflow {record_id}: {e}")
    return actions


def workflow_from_record(record: dict, log: logging.Logger | None = None) -> Workflow:
    """Deserialize a stored workflow record.

    Unreadable structured fields degrade to their empty value.
    """
    log = log or logger
    data = dict(record)
    for field, expected in SERIALIZED_WORKFLOW_FIELDS.items():
        data[field] = _read_field(record, field, expected, log)
    data["actions"] = _read_actions(data["actions"], record.get("id"), log)
    data["name"] = data.get("name") or ""
    if data.get("is_active") is None:
        data["is_active"] = False
    if data.get("category") is None:
        data.pop("category", None)
    return Workflow.model_validate(data)


def execution_to_record(
    workflow_id: str, context: dict, started_at: datetime
) -> dict:
    return {
        "workflow_id": workflow_id,
        "status": "running",
        "context_data": dump_json(context),
        "started_at": started_at.isoformat(),
    }


def execution_completion(result: PipelineResult, completed_at: datetime) -> dict:
    """Fields written when an execution reaches its terminal state."""
    return {
        "status": "completed" if result.success else "failed",
        "completed_at": completed_at.isoformat(),
        "result_data": dump_json(result.model_dump()),
    }


def execution_from_record(
    record: dict, log: logging.Logger | None = None
) -> WorkflowExecution:
    log = log or logger
    data = dict(record)
    data["context_data"] = _read_field(record, "context_data", dict, log)

    result_data = None
    if record.get("result_data"):
        raw = _read_field(record, "result_data", dict, log)
        if raw:
            try:
                result_data = PipelineResult.model_validate(raw)
            except PydanticValidationError as e:
                log.warning(
                    f"Failed to parse result_data of record {record.get('id')}: {e}"
                )
    data["result_data"] = result_data
    return WorkflowExecution.model_validate(data)
