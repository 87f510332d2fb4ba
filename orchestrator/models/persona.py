"""Data model for agent personas.

A persona is a markdown file with a YAML front-matter header. The file name is
the persona id; the markdown body becomes the system prompt seed.
"""

from typing import Any

from pydantic import BaseModel, Field


class Persona(BaseModel):
    """An agent persona loaded from disk."""

    id: str  # source filename, e.g. "architect.md"
    name: str
    description: str = ""
    content: str  # instruction body, front matter removed
    metadata: dict[str, Any] = Field(default_factory=dict)
