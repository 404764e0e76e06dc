import logging
import uuid
from datetime import datetime

from crmflow.contracts import ActionSpec, PipelineResult, WorkflowDefinition
from crmflow.serialization import (
    dump_json,
    execution_completion,
    execution_from_record,
    execution_to_record,
    parse_json,
    utcnow,
    workflow_from_record,
    workflow_to_record,
)


def test_parse_json_outcomes():
    assert parse_json('{"a": 1}', dict).value == {"a": 1}
    assert parse_json("", list).ok
    assert parse_json(None, dict).value == {}
    assert parse_json([1, 2], list).value == [1, 2]

    bad = parse_json("{not json", dict)
    assert not bad.ok
    assert bad.value == {}

    wrong_type = parse_json("[1]", dict)
    assert not wrong_type.ok
    assert wrong_type.value == {}


class _Badge:
    def __str__(self):
        return "gold"


def test_dump_json_encodes_rich_values():
    record_id = uuid.UUID("12345678-1234-5678-1234-567812345678")
    text = dump_json(
        {"when": datetime(2024, 1, 1), "id": record_id, "badge": _Badge()}
    )
    assert text == (
        '{"when": "2024-01-01T00:00:00", '
        '"id": "12345678-1234-5678-1234-567812345678", "badge": "gold"}'
    )


def test_workflow_record_stores_structured_fields_as_text():
    definition = WorkflowDefinition(
        name="wf",
        trigger_type="manual",
        trigger_conditions={"stage": "New"},
        actions=[ActionSpec(type="add_note", config={"content": "hi"}, critical=True)],
        nodes=[{"id": "n1"}],
    )
    record = workflow_to_record(definition)
    assert record["trigger_conditions"] == '{"stage": "New"}'
    assert isinstance(record["actions"], str)
    assert record["connections"] == "[]"
    assert record["is_active"] is False
    assert record["category"] == "General"

    record["id"] = "wf-1"
    workflow = workflow_from_record(record)
    assert workflow.trigger_conditions == {"stage": "New"}
    assert workflow.actions[0].config == {"content": "hi"}
    assert workflow.actions[0].critical is True
    assert workflow.nodes == [{"id": "n1"}]


def test_partial_record_omits_unset_flags():
    definition = WorkflowDefinition(name="wf", trigger_type="manual")
    record = workflow_to_record(definition, partial=True)
    assert "is_active" not in record
    assert "category" not in record
    assert "created_by" not in record

    definition = WorkflowDefinition(name="wf", trigger_type="manual", is_active=True)
    assert workflow_to_record(definition, partial=True)["is_active"] is True


def test_corrupt_fields_degrade_and_warn(caplog):
    record = {
        "id": "wf-2",
        "name": "broken",
        "trigger_type": "manual",
        "trigger_conditions": "{oops",
        "actions": '[{"type": "add_note"}, {"config": {}}]',
        "nodes": '{"not": "a list"}',
        "connections": None,
    }
    with caplog.at_level(logging.WARNING):
        workflow = workflow_from_record(record)

    assert workflow.trigger_conditions == {}
    assert [a.type for a in workflow.actions] == ["add_note"]
    assert workflow.nodes == []
    assert workflow.connections == []
    assert "trigger_conditions" in caplog.text
    assert "nodes" in caplog.text


def test_injected_logger_receives_warnings(caplog):
    log = logging.getLogger("crmflow.test.injected")
    with caplog.at_level(logging.WARNING, logger="crmflow.test.injected"):
        workflow_from_record({"id": "x", "actions": "???"}, log)
    assert any(r.name == "crmflow.test.injected" for r in caplog.records)


def test_execution_record_roundtrip():
    started = utcnow()
    record = execution_to_record("wf-1", {"userId": "u1"}, started)
    record["id"] = "ex-1"
    assert record["status"] == "running"

    execution = execution_from_record(record)
    assert execution.context_data == {"userId": "u1"}
    assert execution.result_data is None
    assert execution.started_at == started

    record.update(execution_completion(PipelineResult(success=False, error="boom"), utcnow()))
    execution = execution_from_record(record)
    assert execution.status == "failed"
    assert execution.result_data.error == "boom"
    assert execution.duration >= 0


def test_unreadable_result_data_is_dropped():
    execution = execution_from_record(
        {"id": "ex", "workflow_id": "wf", "status": "completed", "result_data": "garbage"}
    )
    assert execution.result_data is None
