"""Workflow commands issued by the assistant or by the client."""

from typing import Any, Literal

from pydantic import BaseModel, Field

CommandAction = Literal["update", "execute"]


class WorkflowCommand(BaseModel):
    """A structured action against a remote workflow.

    changes is a partial workflow document for "update"; inputData is passed
    through to the run endpoint for "execute".
    """

    action: CommandAction
    workflowId: str = Field(min_length=1)
    changes: dict[str, Any] | None = None
    inputData: dict[str, Any] | None = None


class CommandResult(BaseModel):
    """Outcome of a dispatched command, echoed back to the caller."""

    success: bool
    action: CommandAction
    workflowId: str
    result: dict[str, Any] | None = None
    error: str | None = None
