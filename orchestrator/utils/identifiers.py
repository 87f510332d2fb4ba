"""ID generation and timestamp utilities."""

import uuid
from datetime import datetime, timezone


def generate_session_id() -> str:
    """Generate a unique chat session ID (UUID4)."""
    return str(uuid.uuid4())


def generate_message_id() -> str:
    """Generate a unique chat message ID (UUID4)."""
    return str(uuid.uuid4())


def utc_timestamp() -> str:
    """Generate an ISO8601 UTC timestamp."""
    return datetime.now(timezone.utc).isoformat()
