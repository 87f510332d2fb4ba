"""API routes for workflows on the n8n server."""

from typing import Any

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel, Field

from orchestrator.models.workflow import Execution, Workflow
from orchestrator.sdk.reconciler import WorkflowReconciler
from orchestrator.sdk.workflow_directory import WorkflowDirectory
from server.dependencies import get_directory, get_reconciler

router = APIRouter()


class CreateWorkflowRequest(BaseModel):
    """Request body for creating a workflow."""

    name: str = Field(min_length=1)
    nodes: list[dict[str, Any]] = Field(default_factory=list)
    connections: dict[str, Any] = Field(default_factory=dict)


class WorkflowListResponse(BaseModel):
    workflows: list[Workflow]


@router.get("/n8n/workflows")
async def list_workflows(directory: WorkflowDirectory = Depends(get_directory)) -> WorkflowListResponse:
    """list all workflows in upstream order."""
    return WorkflowListResponse(workflows=await directory.list_workflows())


@router.post("/n8n/workflows")
async def create_workflow(
    request: CreateWorkflowRequest,
    directory: WorkflowDirectory = Depends(get_directory),
) -> Workflow:
    """create a new (inactive) workflow."""
    return await directory.create_workflow(request.name, request.nodes, request.connections)


@router.get("/n8n/workflows/{workflow_id}")
async def get_workflow(workflow_id: str, directory: WorkflowDirectory = Depends(get_directory)) -> Workflow:
    """get a workflow with its nodes and connections."""
    return await directory.get_workflow(workflow_id)


@router.patch("/n8n/workflows/{workflow_id}")
async def update_workflow(
    workflow_id: str,
    changes: dict[str, Any] = Body(...),
    reconciler: WorkflowReconciler = Depends(get_reconciler),
) -> Workflow:
    """apply a partial update.

    The server only accepts full replacement, so the reconciler fetches,
    merges and writes back the whole document.
    """
    return await reconciler.update(workflow_id, changes)


@router.post("/n8n/workflows/{workflow_id}/execute")
async def execute_workflow(
    workflow_id: str,
    input_data: dict[str, Any] | None = Body(default=None),
    reconciler: WorkflowReconciler = Depends(get_reconciler),
) -> Execution:
    """trigger a manual run. The body, if any, is passed as run input."""
    return await reconciler.execute(workflow_id, input_data)


@router.get("/n8n/executions")
async def list_executions(
    workflow_id: str | None = None,
    limit: int = 20,
    directory: WorkflowDirectory = Depends(get_directory),
) -> list[Execution]:
    """list executions newest first, optionally for one workflow."""
    return await directory.list_executions(workflow_id, limit=limit)
