"""Load agent personas from markdown files.

Each persona is a ``.md`` file in the personas directory:

    ---
    name: Workflow Architect
    description: Designs n8n workflows
    ---
    You are a senior automation engineer...

The header is optional. When present it must be a YAML mapping. The name
falls back to the file name without its extension; the description falls
back to an empty string. Files are read on every call, nothing is cached.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from orchestrator.errors import PersonaFormatError
from orchestrator.models.persona import Persona

logger = logging.getLogger(__name__)

PERSONA_SUFFIX = ".md"
FRONT_MATTER_DELIMITER = "---"
DEFAULT_PERSONAS_DIR = Path("personas")


def split_front_matter(text: str) -> tuple[dict[str, Any], str]:
    """Split a document into its header mapping and its body."""
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].strip() != FRONT_MATTER_DELIMITER:
        return {}, text

    for index in range(1, len(lines)):
        if lines[index].strip() == FRONT_MATTER_DELIMITER:
            header = "".join(lines[1:index])
            body = "".join(lines[index + 1:])
            break
    else:
        # no closing delimiter: treat the whole file as body
        return {}, text

    try:
        metadata = yaml.safe_load(header)
    except yaml.YAMLError as e:
        raise PersonaFormatError(f"Invalid front matter: {e}") from e
    if metadata is None:
        metadata = {}
    if not isinstance(metadata, dict):
        raise PersonaFormatError("Front matter must be a key-value mapping")
    return metadata, body


def parse_persona(persona_id: str, text: str) -> Persona:
    """Build a Persona from the raw file contents."""
    metadata, body = split_front_matter(text)
    name = metadata.get("name") or persona_id.removesuffix(PERSONA_SUFFIX)
    return Persona(
        id=persona_id,
        name=str(name),
        description=str(metadata.get("description") or ""),
        content=body.strip("\n"),
        metadata=metadata,
    )


class PersonaLoader:
    """Read persona definitions from a directory."""

    def __init__(self, personas_dir: Path | str | None = None) -> None:
        """
        Args:
            personas_dir: directory holding the .md files; defaults to
                AGENT_PERSONAS_DIR or ./personas
        """
        if personas_dir is None:
            personas_dir = os.getenv("AGENT_PERSONAS_DIR") or DEFAULT_PERSONAS_DIR
        self.personas_dir = Path(personas_dir)

    def list(self) -> list[Persona]:
        """All readable personas, sorted by file name."""
        if not self.personas_dir.is_dir():
            logger.warning("Personas directory not found at: %s", self.personas_dir)
            return []

        personas = []
        for path in sorted(self.personas_dir.glob(f"*{PERSONA_SUFFIX}")):
            if not path.is_file():
                continue
            try:
                personas.append(parse_persona(path.name, path.read_text(encoding="utf-8")))
            except (OSError, UnicodeDecodeError, PersonaFormatError) as e:
                logger.warning("Skipping persona %s: %s", path.name, e)
        return personas

    def get(self, persona_id: str) -> Persona | None:
        """A single persona by file name, or None if there is no such file."""
        # ids are plain file names; anything with a path component is unknown
        if not persona_id or Path(persona_id).name != persona_id:
            return None
        path = self.personas_dir / persona_id
        if not path.is_file():
            return None
        return parse_persona(persona_id, path.read_text(encoding="utf-8"))
