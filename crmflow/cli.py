"""Command line interface for managing and running crmflow workflows."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
import yaml

from crmflow import WorkflowEngine, get_store
from crmflow.config import load_config
from crmflow.errors import CRMFlowError, NotFoundError, ValidationError

app = typer.Typer(help="CLI for crmflow workflows")

# Command groups
workflow_app = typer.Typer(help="Commands for managing workflows")
execution_app = typer.Typer(help="Commands for inspecting executions")

app.add_typer(workflow_app, name="workflow")
app.add_typer(execution_app, name="execution")


def _engine() -> WorkflowEngine:
    return WorkflowEngine(get_store())


@app.callback()
def main() -> None:
    """crmflow CLI entry point."""
    pass


@workflow_app.command("list")
def workflow_list() -> None:
    """
    List all workflows, newest first.

    Example:
        crmflow workflow list
        # Output: 3f2c...    Lead Nurture    active
    """
    workflows = asyncio.run(_engine().list_workflows())
    if not workflows:
        typer.echo("No workflows found")
        return
    for wf in workflows:
        state = "active" if wf.is_active else "inactive"
        typer.echo(f"{wf.id}\t{wf.name}\t{state}")


@workflow_app.command("show")
def workflow_show(workflow_id: str) -> None:
    """Show the definition of a workflow and its actions."""
    try:
        wf = asyncio.run(_engine().get_workflow(workflow_id))
    except NotFoundError:
        typer.echo("Workflow not found")
        raise typer.Exit(code=1)
    typer.echo(f"Workflow {wf.id}: {wf.name}")
    typer.echo(f"Trigger: {wf.trigger_type}")
    typer.echo(f"Category: {wf.category}")
    typer.echo(f"Active: {wf.is_active}")
    if wf.trigger_conditions:
        typer.echo(f"Conditions: {json.dumps(wf.trigger_conditions)}")
    for index, action in enumerate(wf.actions, start=1):
        flag = " (critical)" if action.critical else ""
        typer.echo(f"{index}. {action.type}{flag}")


@workflow_app.command("create")
def workflow_create(path: Path) -> None:
    """
    Create a workflow from a YAML or JSON definition file.

    Example:
        crmflow workflow create lead_nurture.yaml
    """
    if not path.exists():
        typer.secho("Specified path does not exist", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    data = yaml.safe_load(path.read_text()) or {}
    try:
        wf = asyncio.run(_engine().create_workflow(data))
    except ValidationError as e:
        for error in e.errors:
            typer.echo(error)
        raise typer.Exit(code=1)
    typer.echo(f"Created workflow {wf.id}")


@workflow_app.command("run")
def workflow_run(
    workflow_id: str,
    context: Optional[str] = typer.Option(
        None, help="Execution context as a JSON object"
    ),
) -> None:
    """
    Execute a workflow and print the outcome of each action.

    Example:
        crmflow workflow run 3f2c... --context '{"userId": "u1"}'
    """
    try:
        payload = json.loads(context) if context else {}
    except json.JSONDecodeError as e:
        typer.secho(f"Invalid context JSON: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    if not isinstance(payload, dict):
        typer.secho("Context must be a JSON object", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    try:
        execution = asyncio.run(_engine().execute_workflow(workflow_id, payload))
    except CRMFlowError as e:
        typer.echo(str(e))
        raise typer.Exit(code=1)
    typer.echo(f"Execution {execution.id}: {execution.status}")
    result = execution.result_data
    if result is None:
        return
    for item in result.results:
        outcome = "ok" if item.success else f"failed ({item.error})"
        typer.echo(f"- {item.action_type}: {outcome}")
    if result.error:
        typer.echo(result.error)


@workflow_app.command("delete")
def workflow_delete(workflow_id: str) -> None:
    """Delete a workflow. Execution history is kept."""
    try:
        asyncio.run(_engine().delete_workflow(workflow_id))
    except CRMFlowError as e:
        typer.echo(str(e))
        raise typer.Exit(code=1)
    typer.echo(f"Deleted workflow {workflow_id}")


@execution_app.command("list")
def execution_list(workflow_id: str) -> None:
    """List executions of a workflow, most recent first."""
    executions = asyncio.run(_engine().get_executions(workflow_id))
    if not executions:
        typer.echo("No executions found")
        return
    for ex in executions:
        started = ex.started_at.isoformat() if ex.started_at else "-"
        typer.echo(f"{ex.id}\t{ex.status}\t{started}")


@execution_app.command("analytics")
def execution_analytics(
    workflow_id: str,
    date_range: Optional[str] = typer.Option(
        None, "--range", help="Window such as 7d, 30d, 1y or all"
    ),
) -> None:
    """Print execution statistics for a workflow."""
    date_range = date_range or load_config().analytics.default_date_range
    try:
        analytics = asyncio.run(_engine().get_analytics(workflow_id, date_range))
    except ValueError as e:
        typer.secho(str(e), fg=typer.colors.RED)
        raise typer.Exit(code=1)
    typer.echo(f"Total: {analytics.total_executions}")
    typer.echo(f"Successful: {analytics.successful_executions}")
    typer.echo(f"Failed: {analytics.failed_executions}")
    typer.echo(f"Success rate: {analytics.success_rate}%")
    typer.echo(f"Average execution time: {analytics.average_execution_time}s")
