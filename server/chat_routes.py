"""API route for chatting with the orchestrator.

A request either carries an explicit workflow action, which is dispatched
right away and answered with JSON, or a message history, which is answered
with the model output streamed as plain text. In the second case the full
answer is buffered alongside the stream; once the model is done, the first
workflow-command block in it (if any) is dispatched and its result is sent
as a trailing workflow-result block.
"""

import logging
from collections.abc import AsyncIterator

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, Field

from orchestrator.commands import dispatch_command, find_workflow_command, format_result_block
from orchestrator.errors import OrchestratorError
from orchestrator.models.chat import ChatRequestMessage
from orchestrator.models.command import WorkflowCommand
from orchestrator.models.persona import Persona
from orchestrator.prompts import build_system_prompt, build_workflow_context
from orchestrator.sdk.model_provider import ChatModelClient
from orchestrator.sdk.persona_loader import PersonaLoader
from orchestrator.sdk.reconciler import WorkflowReconciler
from orchestrator.sdk.workflow_directory import WorkflowDirectory
from server import session_db
from server.dependencies import (
    get_directory,
    get_model_client,
    get_persona_loader,
    get_reconciler,
)

logger = logging.getLogger(__name__)

router = APIRouter()

CHAT_TEMPERATURE = 0.7
SESSION_TITLE_LENGTH = 60
SESSION_HEADER = "X-Session-Id"


class ChatRequest(BaseModel):
    """Request body for a chat turn."""

    messages: list[ChatRequestMessage] = Field(default_factory=list)
    agent_id: str | None = None  # persona file name
    session_id: str | None = None
    workflow_action: WorkflowCommand | None = None  # skips generation


def _latest_user_message(messages: list[ChatRequestMessage]) -> str | None:
    for message in reversed(messages):
        if message.role == "user":
            return message.content
    return None


def _load_persona(loader: PersonaLoader, agent_id: str | None) -> Persona | None:
    if not agent_id:
        return None
    persona = loader.get(agent_id)
    if persona is None:
        logger.warning("Persona not found, using default assistant: %s", agent_id)
        return None
    logger.info("Injecting agent persona: %s", persona.name)
    return persona


async def _relay(
    deltas: AsyncIterator[str],
    session_id: str,
    reconciler: WorkflowReconciler,
) -> AsyncIterator[str]:
    """Forward deltas as they arrive, then act on the completed answer.

    If the client goes away mid-stream this generator is closed and nothing
    after the loop runs: the partial answer is dropped, not stored.
    """
    buffer: list[str] = []
    try:
        async for delta in deltas:
            buffer.append(delta)
            yield delta
    except OrchestratorError as e:
        logger.error("Model stream for session %s failed: %s", session_id, e)
        yield f"\n\n**Error:** {e}"
        return

    answer = "".join(buffer)
    session_db.append_message(session_id, "assistant", answer)

    command = find_workflow_command(answer)
    if command is None:
        return
    result = await dispatch_command(command, reconciler)
    yield format_result_block(result)


@router.post("/chat")
async def chat(
    request: ChatRequest,
    directory: WorkflowDirectory = Depends(get_directory),
    reconciler: WorkflowReconciler = Depends(get_reconciler),
    model_client: ChatModelClient = Depends(get_model_client),
    personas: PersonaLoader = Depends(get_persona_loader),
):
    """Run one chat turn."""
    if request.workflow_action is not None:
        result = await dispatch_command(request.workflow_action, reconciler)
        status_code = 200 if result.success else 502
        return JSONResponse(result.model_dump(mode="json", exclude_none=True), status_code=status_code)

    latest = _latest_user_message(request.messages)
    if latest is None:
        raise HTTPException(status_code=400, detail="messages must contain at least one user message")
    if request.session_id and not session_db.session_exists(request.session_id):
        raise HTTPException(status_code=404, detail=f"Session not found: {request.session_id}")

    persona = _load_persona(personas, request.agent_id)
    workflow_context = await build_workflow_context(directory, latest)
    messages = [{"role": "system", "content": build_system_prompt(persona, workflow_context)}]
    messages.extend(message.model_dump() for message in request.messages)

    # open the stream before touching the session so config/auth errors
    # come back as a plain error response
    deltas = await model_client.open_stream(messages, temperature=CHAT_TEMPERATURE)

    session_id = request.session_id
    if session_id is None:
        session_id = session_db.create_session(latest[:SESSION_TITLE_LENGTH].strip() or "New conversation").session_id
    session_db.append_message(session_id, "user", latest)

    return StreamingResponse(
        _relay(deltas, session_id, reconciler),
        media_type="text/plain; charset=utf-8",
        headers={SESSION_HEADER: session_id},
    )
