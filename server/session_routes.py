"""API routes for chat sessions."""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from orchestrator.models.chat import ChatSession, ChatSessionSummary
from server import session_db

router = APIRouter()

DEFAULT_SESSION_TITLE = "New conversation"


class CreateSessionRequest(BaseModel):
    title: str | None = None


class RenameSessionRequest(BaseModel):
    title: str


@router.get("/chat/sessions")
def list_sessions() -> list[ChatSessionSummary]:
    """list sessions, most recently updated first."""
    return session_db.list_sessions()


@router.post("/chat/sessions")
def create_session(request: CreateSessionRequest) -> ChatSession:
    """create an empty session."""
    return session_db.create_session(request.title or DEFAULT_SESSION_TITLE)


@router.get("/chat/sessions/{session_id}")
def get_session(session_id: str) -> ChatSession:
    """get a session with its messages."""
    session = session_db.get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail=f"Session not found: {session_id}")
    return session


@router.patch("/chat/sessions/{session_id}")
def rename_session(session_id: str, request: RenameSessionRequest) -> ChatSession:
    session = session_db.rename_session(session_id, request.title)
    if not session:
        raise HTTPException(status_code=404, detail=f"Session not found: {session_id}")
    return session


@router.delete("/chat/sessions/{session_id}")
def delete_session(session_id: str) -> dict:
    if not session_db.delete_session(session_id):
        raise HTTPException(status_code=404, detail=f"Session not found: {session_id}")
    return {"success": True}
