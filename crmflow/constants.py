"""Entity names and defaults shared across crmflow."""

WORKFLOW_ENTITY = "Workflow"
EXECUTION_ENTITY = "WorkflowExecution"
TASK_ENTITY = "Task"
CONTACT_ENTITY = "Contact"
DEAL_ENTITY = "Deal"
NOTE_ENTITY = "Note"

DEFAULT_CATEGORY = "General"
DEFAULT_DATE_RANGE = "30d"

# serialized workflow fields and the value they degrade to when unreadable
SERIALIZED_WORKFLOW_FIELDS = {
    "trigger_conditions": dict,
    "actions": list,
    "nodes": list,
    "connections": list,
}
