"""API routes for agent personas."""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from orchestrator.models.persona import Persona
from orchestrator.sdk.persona_loader import PersonaLoader
from server.dependencies import get_persona_loader

router = APIRouter()


class PersonaListResponse(BaseModel):
    agents: list[Persona]


@router.get("/agents")
def list_agents(loader: PersonaLoader = Depends(get_persona_loader)) -> PersonaListResponse:
    """list all personas found in the personas directory."""
    return PersonaListResponse(agents=loader.list())


@router.get("/agents/{agent_id}")
def get_agent(agent_id: str, loader: PersonaLoader = Depends(get_persona_loader)) -> Persona:
    """get a single persona by file name."""
    persona = loader.get(agent_id)
    if not persona:
        raise HTTPException(status_code=404, detail=f"Agent not found: {agent_id}")
    return persona
