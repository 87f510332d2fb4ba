"""Data models for workflows hosted on the remote n8n server.

The remote server owns these schemas, so every model accepts extra fields and
keeps node parameters as opaque JSON. Field names follow the wire format.
"""

from pydantic import BaseModel, ConfigDict, Field, JsonValue, field_validator


def _coerce_id(value):
    # older servers return numeric ids
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


class Tag(BaseModel):
    """A workflow tag as returned by the read endpoints."""

    model_config = ConfigDict(extra="allow")

    id: str
    name: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, value):
        return _coerce_id(value)


class Node(BaseModel):
    """A single node of a workflow graph."""

    model_config = ConfigDict(extra="allow")

    id: str | None = None
    name: str
    type: str | None = None
    typeVersion: float | None = None
    position: list[float] | None = None  # [x, y]
    parameters: dict[str, JsonValue] = Field(default_factory=dict)
    credentials: dict[str, JsonValue] | None = None
    disabled: bool | None = None
    notes: str | None = None


class Workflow(BaseModel):
    """A workflow document.

    The id is assigned by the remote server and never invented locally.
    connections maps a source node name to its downstream targets and is not
    interpreted here.
    """

    model_config = ConfigDict(extra="allow")

    id: str | None = None
    name: str
    active: bool = False
    nodes: list[Node] = Field(default_factory=list)
    connections: dict[str, JsonValue] = Field(default_factory=dict)
    createdAt: str | None = None
    updatedAt: str | None = None
    tags: list[Tag | str] | None = None
    settings: dict[str, JsonValue] | None = None
    staticData: JsonValue = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, value):
        return _coerce_id(value)


class ExecutionResultData(BaseModel):
    """Per-node run data of an execution, plus the error if it failed."""

    model_config = ConfigDict(extra="allow")

    runData: dict[str, JsonValue] = Field(default_factory=dict)
    error: dict[str, JsonValue] | None = None


class ExecutionData(BaseModel):
    model_config = ConfigDict(extra="allow")

    resultData: ExecutionResultData | None = None


class Execution(BaseModel):
    """A historical run of a workflow. Read-only from our side."""

    model_config = ConfigDict(extra="allow")

    id: str | None = None
    finished: bool | None = None
    mode: str | None = None
    status: str | None = None
    retryOf: str | None = None
    retrySuccessId: str | None = None
    startedAt: str | None = None
    stoppedAt: str | None = None
    workflowId: str | None = None
    data: ExecutionData | None = None

    @field_validator("id", "retryOf", "retrySuccessId", "workflowId", mode="before")
    @classmethod
    def _ids_to_str(cls, value):
        return _coerce_id(value)

    def error_message(self) -> str | None:
        """Return the error message recorded for this run, if any."""
        if self.data is None or self.data.resultData is None:
            return None
        error = self.data.resultData.error
        if not error:
            return None
        message = error.get("message")
        return str(message) if message is not None else None
