"""Data models for the orchestrator."""

from orchestrator.models.chat import (
    ChatMessage,
    ChatRequestMessage,
    ChatSession,
    ChatSessionSummary,
)
from orchestrator.models.command import CommandResult, WorkflowCommand
from orchestrator.models.persona import Persona
from orchestrator.models.provider_model import ProviderModel
from orchestrator.models.workflow import (
    Execution,
    ExecutionData,
    ExecutionResultData,
    Node,
    Tag,
    Workflow,
)

__all__ = [
    # Chat
    "ChatMessage",
    "ChatRequestMessage",
    "ChatSession",
    "ChatSessionSummary",
    # Commands
    "CommandResult",
    "WorkflowCommand",
    # Personas
    "Persona",
    # Model catalog
    "ProviderModel",
    # Remote workflows
    "Execution",
    "ExecutionData",
    "ExecutionResultData",
    "Node",
    "Tag",
    "Workflow",
]
