"""Utility functions for the orchestrator."""

from orchestrator.utils.identifiers import (
    generate_message_id,
    generate_session_id,
    utc_timestamp,
)
from orchestrator.utils.settings import SettingsResolver

__all__ = [
    "generate_message_id",
    "generate_session_id",
    "utc_timestamp",
    "SettingsResolver",
]
