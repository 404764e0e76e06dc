import asyncio
import json

from typer.testing import CliRunner

import crmflow.store as store_module
from crmflow import WorkflowEngine
from crmflow.cli import app
from crmflow.store import InMemoryEntityStore

runner = CliRunner()


def _setup_store() -> InMemoryEntityStore:
    store = InMemoryEntityStore()
    store_module._store_instance = store
    return store


def _create(store, **overrides):
    definition = {
        "name": "Lead Nurture",
        "triggerType": "manual",
        "isActive": True,
        "actions": [
            {"type": "create_task", "config": {"title": "Call lead"}, "critical": True},
            {"type": "add_note", "config": {"content": "Created from workflow"}},
        ],
    }
    definition.update(overrides)
    return asyncio.run(WorkflowEngine(store).create_workflow(definition))


def test_workflow_list():
    store = _setup_store()
    result = runner.invoke(app, ["workflow", "list"])
    assert result.exit_code == 0
    assert "No workflows found" in result.stdout

    wf = _create(store)
    result = runner.invoke(app, ["workflow", "list"])
    assert result.exit_code == 0
    assert wf.id in result.stdout
    assert "Lead Nurture" in result.stdout
    assert "active" in result.stdout


def test_workflow_show_and_missing():
    store = _setup_store()
    wf = _create(store)

    result = runner.invoke(app, ["workflow", "show", wf.id])
    assert result.exit_code == 0
    assert "Trigger: manual" in result.stdout
    assert "1. create_task (critical)" in result.stdout
    assert "2. add_note" in result.stdout

    result = runner.invoke(app, ["workflow", "show", "missing-id"])
    assert result.exit_code == 1
    assert "Workflow not found" in result.stdout


def test_workflow_create_from_file(tmp_path):
    store = _setup_store()
    path = tmp_path / "wf.yaml"
    path.write_text(
        """
name: Deal follow-up
triggerType: record_created
actions:
  - type: create_deal
    config:
      dealName: Inbound
"""
    )
    result = runner.invoke(app, ["workflow", "create", str(path)])
    assert result.exit_code == 0
    assert "Created workflow" in result.stdout
    assert len(asyncio.run(store.list("Workflow"))) == 1


def test_workflow_create_reports_validation_errors(tmp_path):
    _setup_store()
    path = tmp_path / "wf.json"
    path.write_text(json.dumps({"name": "", "actions": []}))
    result = runner.invoke(app, ["workflow", "create", str(path)])
    assert result.exit_code == 1
    assert "Workflow name is required" in result.stdout
    assert "Trigger type is required" in result.stdout
    assert "At least one action is required" in result.stdout


def test_workflow_run_and_analytics():
    store = _setup_store()
    wf = _create(store)

    context = json.dumps({"userId": "u1", "entityType": "Lead", "entityId": "L1"})
    result = runner.invoke(app, ["workflow", "run", wf.id, "--context", context])
    assert result.exit_code == 0
    assert "completed" in result.stdout
    assert "- create_task: ok" in result.stdout
    assert "- add_note: ok" in result.stdout

    result = runner.invoke(app, ["execution", "list", wf.id])
    assert result.exit_code == 0
    assert "completed" in result.stdout

    result = runner.invoke(app, ["execution", "analytics", wf.id, "--range", "7d"])
    assert result.exit_code == 0
    assert "Total: 1" in result.stdout
    assert "Success rate: 100.0%" in result.stdout

    result = runner.invoke(app, ["execution", "analytics", wf.id, "--range", "soon"])
    assert result.exit_code == 1


def test_workflow_run_inactive():
    store = _setup_store()
    wf = _create(store, isActive=False)
    result = runner.invoke(app, ["workflow", "run", wf.id])
    assert result.exit_code == 1
    assert "not active" in result.stdout
    assert asyncio.run(store.list("WorkflowExecution")) == []


def test_workflow_delete():
    store = _setup_store()
    wf = _create(store)
    result = runner.invoke(app, ["workflow", "delete", wf.id])
    assert result.exit_code == 0
    assert asyncio.run(store.get("Workflow", wf.id)) is None


def test_workflow_run_rejects_bad_context():
    store = _setup_store()
    wf = _create(store)

    result = runner.invoke(app, ["workflow", "run", wf.id, "--context", "{oops"])
    assert result.exit_code == 1
    assert "Invalid context JSON" in result.stdout

    result = runner.invoke(app, ["workflow", "run", wf.id, "--context", "[1]"])
    assert result.exit_code == 1
    assert "Context must be a JSON object" in result.stdout
    assert asyncio.run(store.list("WorkflowExecution")) == []


class ReadOnlyStore(InMemoryEntityStore):
    async def delete(self, entity, record_id):
        raise OSError("read-only")


def test_workflow_delete_reports_store_failure():
    store = ReadOnlyStore()
    store_module._store_instance = store
    wf = _create(store)

    result = runner.invoke(app, ["workflow", "delete", wf.id])
    assert result.exit_code == 1
    assert "Failed to delete Workflow: read-only" in result.stdout
