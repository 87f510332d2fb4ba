"""System prompt assembly for the chat endpoint.

A system prompt is made of three parts:

- a seed: the default assistant instructions, or the activation block of the
  selected persona
- the command-block instructions that tell the model how to ask us to update
  or run a workflow
- live workflow context fetched from the n8n server (best effort)
"""

from __future__ import annotations

import json
import logging
import re

from orchestrator.errors import OrchestratorError
from orchestrator.models.persona import Persona
from orchestrator.models.workflow import Execution, Workflow
from orchestrator.sdk.workflow_directory import WorkflowDirectory, match_workflow_name

logger = logging.getLogger(__name__)

RECENT_EXECUTIONS_LIMIT = 5

DEFAULT_SYSTEM_PROMPT = """You are n8n-orchestrator, an AI assistant dedicated to helping users build and manage n8n workflows.
You have access to n8n API definitions and can generate JSON workflows.
Always answer in Markdown.
If the user asks to create a workflow, provide the JSON code block."""

PERSONA_TEMPLATE = """--- AGENT ACTIVATION ---
NAME: {name}
DESCRIPTION: {description}

INSTRUCTIONS/PERSONA:
{content}

--- END AGENT DEFINITION ---

You must embody this agent."""

COMMAND_INSTRUCTIONS = """## Acting on workflows
To change or run an existing workflow, end your answer with exactly one fenced block tagged `workflow-command` containing JSON:

```workflow-command
{"action": "update", "workflowId": "<id>", "changes": {"nodes": [{"name": "<node name>", "parameters": {"<key>": "<value>"}}]}}
```

- "action" is "update" or "execute".
- For "update", "changes" is a partial workflow: nodes are matched by name (or id) and only the parameters you give are changed. Connections you give replace the connections of the same source node.
- For "execute", you may add "inputData" with the run input.
- Only the first `workflow-command` block is applied. Never emit one unless the user asked for the change."""

PLANNER_TEMPLATE = """You are an expert n8n workflow architect.
Your goal is to help users design and create n8n workflows.

CONTEXT:
{context}

RESPONSE FORMAT:
Return a valid JSON structure representing the plan or the n8n workflow nodes if explicitly asked."""

_QUOTED = re.compile(r"[\"“«`]([^\"”»`\n]{2,80})[\"”»`]")
_NAMED = re.compile(r"\bworkflows?\s+(?:called|named)\s+([\w\-]+)", re.IGNORECASE)
_BEFORE_WORKFLOW = re.compile(r"([\w\-]+)\s+workflows?\b", re.IGNORECASE)
_AFTER_WORKFLOW = re.compile(r"\bworkflows?\s+([\w\-]+)", re.IGNORECASE)
_FILLER_WORDS = {
    "a", "all", "an", "and", "called", "check", "create", "debug", "delete", "each",
    "edit", "every", "execute", "fix", "for", "from", "i", "in", "is", "it", "me",
    "my", "named", "new", "of", "on", "open", "our", "run", "show", "start", "stop",
    "that", "the", "this", "to", "update", "which", "with", "your",
}


def extract_workflow_reference(text: str) -> str | None:
    """Guess which workflow a user message is about.

    A quoted string wins, then "workflow called X", then "the X workflow",
    then "workflow X". Filler words never count as a reference.
    """
    quoted = _QUOTED.search(text)
    if quoted:
        return quoted.group(1).strip()

    for pattern in (_NAMED, _BEFORE_WORKFLOW, _AFTER_WORKFLOW):
        for match in pattern.finditer(text):
            token = match.group(1)
            if len(token) >= 2 and token.lower() not in _FILLER_WORDS:
                return token
    return None


def persona_prompt(persona: Persona) -> str:
    return PERSONA_TEMPLATE.format(
        name=persona.name,
        description=persona.description,
        content=persona.content,
    )


def planner_prompt(context: str | None = None) -> str:
    return PLANNER_TEMPLATE.format(context=context or "No specific context provided.")


def build_system_prompt(persona: Persona | None, workflow_context: str | None) -> str:
    """Seed (persona or default) + command instructions + workflow context."""
    seed = persona_prompt(persona) if persona else DEFAULT_SYSTEM_PROMPT
    parts = [seed, COMMAND_INSTRUCTIONS]
    if workflow_context:
        parts.append(workflow_context)
    return "\n\n".join(parts)


def _format_listing(workflows: list[Workflow]) -> str:
    if not workflows:
        return "No workflows exist on the server yet."
    return "\n".join(
        f"- {w.name} (id: {w.id}, {'active' if w.active else 'inactive'})"
        for w in workflows
    )


def _format_detail(workflow: Workflow) -> str:
    detail = {
        "id": workflow.id,
        "name": workflow.name,
        "active": workflow.active,
        "nodes": [
            node.model_dump(include={"id", "name", "type", "typeVersion", "parameters", "disabled"}, exclude_none=True)
            for node in workflow.nodes
        ],
        "connections": workflow.connections,
    }
    return "```json\n" + json.dumps(detail, indent=2, ensure_ascii=False) + "\n```"


def _format_executions(executions: list[Execution]) -> str:
    if not executions:
        return "No recorded executions."
    lines = []
    for execution in executions:
        status = execution.status or ("finished" if execution.finished else "not finished")
        line = f"- #{execution.id}: {status}, mode={execution.mode}, started={execution.startedAt}, stopped={execution.stoppedAt}"
        error = execution.error_message()
        if error:
            line += f", error: {error}"
        lines.append(line)
    return "\n".join(lines)


async def build_workflow_context(directory: WorkflowDirectory, latest_user_message: str | None) -> str:
    """Describe the live n8n state for the model.

    Never raises for upstream or configuration problems: the failure is
    written into the context instead so the chat can go on.
    """
    try:
        workflows = await directory.list_workflows()
    except OrchestratorError as e:
        logger.warning("Workflow listing unavailable for prompt context: %s", e)
        return f"## Workflows on the n8n server\n(Workflow list unavailable: {e})"

    sections = ["## Workflows on the n8n server\n" + _format_listing(workflows)]

    reference = extract_workflow_reference(latest_user_message or "")
    match = match_workflow_name(workflows, reference) if reference else None
    if match is None or match.id is None:
        return "\n\n".join(sections)

    try:
        workflow = await directory.get_workflow(match.id)
        executions = await directory.list_executions(match.id, limit=RECENT_EXECUTIONS_LIMIT)
    except OrchestratorError as e:
        logger.warning("Details for workflow %s unavailable: %s", match.id, e)
        sections.append(f'## Workflow "{match.name}"\n(Details unavailable: {e})')
        return "\n\n".join(sections)

    sections.append(f'## Workflow "{workflow.name}" (id: {workflow.id})\n' + _format_detail(workflow))
    sections.append("## Recent executions\n" + _format_executions(executions))
    return "\n\n".join(sections)
