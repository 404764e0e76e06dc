"""Example creating and running a lead nurture workflow.

Uses the store configured via ``CRMFLOW_DATABASE_URL`` (in-memory by default).
"""

import asyncio

from crmflow import WorkflowEngine, get_store


async def main():
    engine = WorkflowEngine(get_store())

    workflow = await engine.create_workflow(
        {
            "name": "Lead Nurture",
            "triggerType": "manual",
            "isActive": True,
            "actions": [
                {"type": "create_task", "config": {"title": "Call lead"}, "critical": True},
                {"type": "add_note", "config": {"content": "Created from workflow"}},
                {"type": "send_email", "config": {"template": "welcome"}},
            ],
        }
    )
    print(f"Created workflow {workflow.id}")

    execution = await engine.execute_workflow(
        workflow.id, {"userId": "u1", "entityType": "Lead", "entityId": "L1"}
    )
    print(f"Execution {execution.id}: {execution.status}")
    for result in execution.result_data.results:
        print(f"  {result.action_type}: {'ok' if result.success else result.error}")

    analytics = await engine.get_analytics(workflow.id)
    print(f"Success rate: {analytics.success_rate}%")


if __name__ == "__main__":
    asyncio.run(main())
