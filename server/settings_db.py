"""SQLite storage for runtime settings (key/value with a secrecy flag)."""

import re
from dataclasses import dataclass

from orchestrator.utils.identifiers import utc_timestamp
from server import db

_SECRET_KEY_PATTERN = re.compile(r"KEY|SECRET|PASS|TOKEN", re.IGNORECASE)


@dataclass
class SettingRow:
    key: str
    value: str
    is_secret: bool
    updated_at: str


def is_secret_key(key: str) -> bool:
    """Keys naming a key, secret, password or token hold secrets."""
    return bool(_SECRET_KEY_PATTERN.search(key))


def init_db() -> None:
    with db.connect() as conn:
        conn.execute(
            """
            create table if not exists app_config (
                key text primary key,
                value text not null,
                is_secret integer not null default 0,
                updated_at text not null
            )
            """
        )
        conn.commit()


def get_value(key: str) -> str | None:
    with db.connect() as conn:
        row = conn.execute(
            "select value from app_config where key = ?",
            (key,),
        ).fetchone()
    if not row:
        return None
    return row["value"]


def get_all() -> list[SettingRow]:
    with db.connect() as conn:
        rows = conn.execute(
            "select key, value, is_secret, updated_at from app_config order by key"
        ).fetchall()
    return [
        SettingRow(
            key=row["key"],
            value=row["value"],
            is_secret=bool(row["is_secret"]),
            updated_at=row["updated_at"],
        )
        for row in rows
    ]


def set_value(key: str, value: str, is_secret: bool = False) -> None:
    """insert or update a setting."""
    with db.connect() as conn:
        conn.execute(
            """
            insert into app_config (key, value, is_secret, updated_at)
            values (?, ?, ?, ?)
            on conflict(key) do update set
                value = excluded.value,
                is_secret = excluded.is_secret,
                updated_at = excluded.updated_at
            """,
            (key, value, int(is_secret), utc_timestamp()),
        )
        conn.commit()


def delete_value(key: str) -> None:
    with db.connect() as conn:
        conn.execute("delete from app_config where key = ?", (key,))
        conn.commit()
