"""Model catalog entries from the LLM provider."""

from typing import Any

from pydantic import BaseModel, ConfigDict


class ProviderModel(BaseModel):
    """A model offered by the provider (OpenRouter-style /models entry)."""

    model_config = ConfigDict(extra="allow", protected_namespaces=())

    id: str
    name: str | None = None
    description: str | None = None
    pricing: dict[str, Any] | None = None
    context_length: int | None = None

    @property
    def display_name(self) -> str:
        return self.name or self.id
