"""Exceptions raised by the orchestrator core."""


class OrchestratorError(Exception):
    """Base class for orchestrator errors."""


class UpstreamError(OrchestratorError):
    """A remote service answered with an error or with something that is not JSON.

    status_code is None when no response was received at all.
    """

    def __init__(self, status_code: int | None, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"[{self.status_code}] {self.message}"


class ConfigurationError(OrchestratorError):
    """A required credential or setting is missing."""

    def __init__(self, key: str, message: str | None = None) -> None:
        self.key = key
        super().__init__(message or f"{key} is not configured. Set it on the settings page or in the environment.")


class PersonaFormatError(OrchestratorError):
    """A persona file has a header that is not a key-value mapping."""


class ChangeSetError(OrchestratorError):
    """A partial workflow update has a field of the wrong shape."""
