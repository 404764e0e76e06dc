"""Built-in CRM action handlers."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Dict

from ..constants import CONTACT_ENTITY, DEAL_ENTITY, NOTE_ENTITY, TASK_ENTITY
from ..contracts import ActionResult
from .registry import DEFAULT_ACTIONS, ActionDependencies

logger = logging.getLogger(__name__)

TASK_DUE_DELAY = timedelta(hours=24)


def lookup(mapping: Dict[str, Any], camel: str, snake: str, default: Any = None) -> Any:
    """Read a key given in either camelCase or snake_case."""
    if mapping.get(camel) is not None:
        return mapping[camel]
    if mapping.get(snake) is not None:
        return mapping[snake]
    return default


def _without_none(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in fields.items() if v is not None}


async def _delegate(
    action_type: str,
    config: Dict[str, Any],
    context: Dict[str, Any],
    deps: ActionDependencies,
    message: str,
) -> ActionResult:
    if deps.delegate is None:
        logger.info(f"No delegate configured for {action_type}; nothing sent")
        return ActionResult(success=True, message=message)
    try:
        data = await deps.delegate(action_type, config, context)
    except Exception as e:
        return ActionResult(success=False, error=str(e))
    return ActionResult(success=True, data=data, message=message)


@DEFAULT_ACTIONS.register("send_email")
async def send_email(config, context, deps: ActionDependencies) -> ActionResult:
    return await _delegate("send_email", config, context, deps, "Email sent successfully")


@DEFAULT_ACTIONS.register("create_task")
async def create_task(config, context, deps: ActionDependencies) -> ActionResult:
    due_date = lookup(config, "dueDate", "due_date")
    if due_date is None:
        due_date = (deps.clock() + TASK_DUE_DELAY).isoformat()
    try:
        task = await deps.store.create(
            TASK_ENTITY,
            {
                "task_name": config.get("title") or "Workflow Generated Task",
                "description": config.get("description") or "",
                "due_date": due_date,
                "priority": config.get("priority") or "Medium",
                "status": "Open",
                "assigned_to": lookup(config, "assignedTo", "assigned_to")
                or lookup(context, "userId", "user_id"),
                "related_entity_type": lookup(context, "entityType", "entity_type"),
                "related_entity_id": lookup(context, "entityId", "entity_id"),
            },
        )
    except Exception as e:
        return ActionResult(success=False, error=str(e))
    return ActionResult(success=True, data=task)


@DEFAULT_ACTIONS.register("update_contact")
async def update_contact(config, context, deps: ActionDependencies) -> ActionResult:
    contact_id = lookup(context, "contactId", "contact_id")
    if not contact_id:
        return ActionResult(success=False, error="Contact ID not provided in context")
    try:
        contact = await deps.store.update(
            CONTACT_ENTITY, contact_id, dict(config.get("updates") or {})
        )
    except Exception as e:
        return ActionResult(success=False, error=str(e))
    return ActionResult(success=True, data=contact)


@DEFAULT_ACTIONS.register("assign_to_user")
async def assign_to_user(config, context, deps: ActionDependencies) -> ActionResult:
    return await _delegate(
        "assign_to_user", config, context, deps, "Assigned to user successfully"
    )


@DEFAULT_ACTIONS.register("add_to_list")
async def add_to_list(config, context, deps: ActionDependencies) -> ActionResult:
    return await _delegate(
        "add_to_list", config, context, deps, "Added to list successfully"
    )


@DEFAULT_ACTIONS.register("create_deal")
async def create_deal(config, context, deps: ActionDependencies) -> ActionResult:
    try:
        deal = await deps.store.create(
            DEAL_ENTITY,
            {
                "deal_name": lookup(config, "dealName", "deal_name")
                or "Workflow Generated Deal",
                "account_id": lookup(context, "accountId", "account_id"),
                "contact_id": lookup(context, "contactId", "contact_id"),
                "amount": config.get("amount") or 0,
                "currency": config.get("currency") or "USD",
                "stage": config.get("stage") or "Prospecting",
                "probability": config.get("probability") or 50,
                "expected_close_date": lookup(
                    config, "expectedCloseDate", "expected_close_date"
                ),
                "owner_email": lookup(config, "ownerEmail", "owner_email")
                or lookup(context, "userEmail", "user_email"),
            },
        )
    except Exception as e:
        return ActionResult(success=False, error=str(e))
    return ActionResult(success=True, data=deal)


@DEFAULT_ACTIONS.register("update_deal_stage")
async def update_deal_stage(config, context, deps: ActionDependencies) -> ActionResult:
    deal_id = lookup(context, "dealId", "deal_id")
    if not deal_id:
        return ActionResult(success=False, error="Deal ID not provided in context")
    try:
        deal = await deps.store.update(
            DEAL_ENTITY,
            deal_id,
            _without_none(
                {
                    "stage": lookup(config, "newStage", "new_stage"),
                    "probability": config.get("probability"),
                }
            ),
        )
    except Exception as e:
        return ActionResult(success=False, error=str(e))
    return ActionResult(success=True, data=deal)


@DEFAULT_ACTIONS.register("schedule_meeting")
async def schedule_meeting(config, context, deps: ActionDependencies) -> ActionResult:
    return await _delegate(
        "schedule_meeting", config, context, deps, "Meeting scheduled successfully"
    )


@DEFAULT_ACTIONS.register("add_note")
async def add_note(config, context, deps: ActionDependencies) -> ActionResult:
    try:
        note = await deps.store.create(
            NOTE_ENTITY,
            {
                "content": config.get("content"),
                "related_entity_type": lookup(context, "entityType", "entity_type"),
                "related_entity_id": lookup(context, "entityId", "entity_id"),
                "created_by": lookup(context, "userId", "user_id"),
            },
        )
    except Exception as e:
        return ActionResult(success=False, error=str(e))
    return ActionResult(success=True, data=note)
