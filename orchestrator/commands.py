"""Detect and dispatch workflow commands embedded in model output."""

from __future__ import annotations

import json
import logging
import re

from pydantic import ValidationError

from orchestrator.errors import OrchestratorError
from orchestrator.models.command import CommandResult, WorkflowCommand
from orchestrator.sdk.reconciler import WorkflowReconciler

logger = logging.getLogger(__name__)

COMMAND_TAGS = ("workflow-command", "n8n-command")
RESULT_TAG = "workflow-result"

_COMMAND_BLOCK = re.compile(
    r"```(?:" + "|".join(re.escape(tag) for tag in COMMAND_TAGS) + r")[ \t]*\r?\n(.*?)```",
    re.DOTALL,
)


def find_workflow_command(text: str) -> WorkflowCommand | None:
    """Parse the first workflow-command block of a completed answer.

    Only the first block counts. If it is malformed, nothing is dispatched.
    """
    match = _COMMAND_BLOCK.search(text)
    if not match:
        return None
    try:
        command = WorkflowCommand.model_validate(json.loads(match.group(1)))
    except (ValueError, ValidationError) as e:
        logger.warning("Ignoring malformed workflow command block: %s", e)
        return None
    logger.info("Detected workflow command: %s on %s", command.action, command.workflowId)
    return command


async def dispatch_command(command: WorkflowCommand, reconciler: WorkflowReconciler) -> CommandResult:
    """Run a command and report the outcome instead of raising."""
    try:
        if command.action == "update":
            workflow = await reconciler.update(command.workflowId, command.changes or {})
            result = workflow.model_dump(mode="json", exclude_none=True)
        else:
            execution = await reconciler.execute(command.workflowId, command.inputData)
            result = execution.model_dump(mode="json", exclude_none=True)
    except OrchestratorError as e:
        logger.error("Workflow command %s on %s failed: %s", command.action, command.workflowId, e)
        return CommandResult(success=False, action=command.action, workflowId=command.workflowId, error=str(e))

    logger.info("Workflow command %s on %s succeeded", command.action, command.workflowId)
    return CommandResult(success=True, action=command.action, workflowId=command.workflowId, result=result)


def format_result_block(result: CommandResult) -> str:
    """Trailing block appended to a streamed answer after a dispatch."""
    return f"\n\n```{RESULT_TAG}\n{result.model_dump_json(exclude_none=True)}\n```\n"
