"""Clients for the workflow server, the LLM provider and persona files."""

from orchestrator.sdk.model_provider import ChatModelClient, ModelCatalog
from orchestrator.sdk.persona_loader import PersonaLoader
from orchestrator.sdk.reconciler import WorkflowReconciler
from orchestrator.sdk.workflow_directory import WorkflowDirectory

__all__ = [
    "ChatModelClient",
    "ModelCatalog",
    "PersonaLoader",
    "WorkflowDirectory",
    "WorkflowReconciler",
]
