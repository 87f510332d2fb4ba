"""SQLite connection and initialization helpers."""

import os
import sqlite3
from pathlib import Path

DEFAULT_DB_PATH = Path(__file__).parent / "data" / "orchestrator.db"
DB_PATH = Path(os.getenv("ORCHESTRATOR_DB_PATH", str(DEFAULT_DB_PATH)))


def connect() -> sqlite3.Connection:
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(DB_PATH)
    conn.row_factory = sqlite3.Row
    conn.execute("pragma foreign_keys = on")
    return conn


def init_all() -> None:
    """initialize all sqlite tables."""
    from server.session_db import init_db as init_session_db
    from server.settings_db import init_db as init_settings_db

    init_settings_db()
    init_session_db()
