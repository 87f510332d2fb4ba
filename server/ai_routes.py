"""API routes for the model provider: model catalog and plan generation."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from orchestrator.models.provider_model import ProviderModel
from orchestrator.prompts import planner_prompt
from orchestrator.sdk.model_provider import ChatModelClient, ModelCatalog
from server.dependencies import get_model_catalog, get_model_client

router = APIRouter()

PLAN_TEMPERATURE = 0.2


class ModelListResponse(BaseModel):
    models: list[ProviderModel]


class PlanRequest(BaseModel):
    """Request body for a one-shot workflow plan."""

    prompt: str
    context: str | None = None


class PlanResponse(BaseModel):
    plan: str


@router.get("/ai/models")
async def list_models(catalog: ModelCatalog = Depends(get_model_catalog)) -> ModelListResponse:
    """list provider models (cached for an hour)."""
    return ModelListResponse(models=await catalog.list_models())


@router.post("/ai/plan")
async def generate_plan(
    request: PlanRequest,
    model_client: ChatModelClient = Depends(get_model_client),
) -> PlanResponse:
    """ask the model for a workflow plan, without chat history or streaming."""
    plan = await model_client.complete(
        [
            {"role": "system", "content": planner_prompt(request.context)},
            {"role": "user", "content": request.prompt},
        ],
        temperature=PLAN_TEMPERATURE,
    )
    return PlanResponse(plan=plan)
