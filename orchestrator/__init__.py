"""n8n orchestrator - chat with an LLM that can inspect and edit n8n workflows."""

from orchestrator.errors import (
    ChangeSetError,
    ConfigurationError,
    OrchestratorError,
    PersonaFormatError,
    UpstreamError,
)
from orchestrator.models.command import CommandResult, WorkflowCommand
from orchestrator.models.persona import Persona
from orchestrator.models.workflow import Execution, Node, Workflow
from orchestrator.sdk.model_provider import ChatModelClient, ModelCatalog
from orchestrator.sdk.persona_loader import PersonaLoader
from orchestrator.sdk.reconciler import WorkflowReconciler
from orchestrator.sdk.workflow_directory import WorkflowDirectory
from orchestrator.utils.settings import SettingsResolver

__all__ = [
    # Errors
    "ChangeSetError",
    "ConfigurationError",
    "OrchestratorError",
    "PersonaFormatError",
    "UpstreamError",
    # Models
    "CommandResult",
    "Execution",
    "Node",
    "Persona",
    "Workflow",
    "WorkflowCommand",
    # Clients
    "ChatModelClient",
    "ModelCatalog",
    "PersonaLoader",
    "WorkflowDirectory",
    "WorkflowReconciler",
    "SettingsResolver",
]
