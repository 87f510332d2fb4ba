"""SQLite storage for chat sessions and their messages."""

from orchestrator.models.chat import ChatMessage, ChatSession, ChatSessionSummary
from orchestrator.utils.identifiers import (
    generate_message_id,
    generate_session_id,
    utc_timestamp,
)
from server import db


def init_db() -> None:
    with db.connect() as conn:
        conn.execute(
            """
            create table if not exists chat_sessions (
                session_id text primary key,
                title text not null,
                created_at text not null,
                updated_at text not null
            )
            """
        )
        conn.execute(
            """
            create table if not exists chat_messages (
                message_id text primary key,
                session_id text not null references chat_sessions(session_id) on delete cascade,
                role text not null,
                content text not null,
                created_at text not null
            )
            """
        )
        conn.execute(
            "create index if not exists idx_chat_messages_session_id on chat_messages(session_id)"
        )
        conn.commit()


def create_session(title: str) -> ChatSession:
    now = utc_timestamp()
    session = ChatSession(
        session_id=generate_session_id(),
        title=title,
        created_at=now,
        updated_at=now,
    )
    with db.connect() as conn:
        conn.execute(
            "insert into chat_sessions (session_id, title, created_at, updated_at) values (?, ?, ?, ?)",
            (session.session_id, session.title, session.created_at, session.updated_at),
        )
        conn.commit()
    return session


def session_exists(session_id: str) -> bool:
    with db.connect() as conn:
        row = conn.execute(
            "select 1 from chat_sessions where session_id = ?",
            (session_id,),
        ).fetchone()
    return row is not None


def get_session(session_id: str) -> ChatSession | None:
    """a session with its messages, oldest first."""
    with db.connect() as conn:
        row = conn.execute(
            "select session_id, title, created_at, updated_at from chat_sessions where session_id = ?",
            (session_id,),
        ).fetchone()
        if not row:
            return None
        message_rows = conn.execute(
            """
            select message_id, session_id, role, content, created_at
            from chat_messages
            where session_id = ?
            order by created_at asc, rowid asc
            """,
            (session_id,),
        ).fetchall()
    return ChatSession(
        session_id=row["session_id"],
        title=row["title"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        messages=[ChatMessage(**dict(message)) for message in message_rows],
    )


def list_sessions() -> list[ChatSessionSummary]:
    """all sessions, most recently updated first."""
    with db.connect() as conn:
        rows = conn.execute(
            """
            select s.session_id, s.title, s.created_at, s.updated_at,
                   count(m.message_id) as message_count
            from chat_sessions s
            left join chat_messages m on m.session_id = s.session_id
            group by s.session_id
            order by s.updated_at desc
            """
        ).fetchall()
    return [ChatSessionSummary(**dict(row)) for row in rows]


def rename_session(session_id: str, title: str) -> ChatSession | None:
    with db.connect() as conn:
        cursor = conn.execute(
            "update chat_sessions set title = ?, updated_at = ? where session_id = ?",
            (title, utc_timestamp(), session_id),
        )
        conn.commit()
    if cursor.rowcount == 0:
        return None
    return get_session(session_id)


def delete_session(session_id: str) -> bool:
    with db.connect() as conn:
        cursor = conn.execute("delete from chat_sessions where session_id = ?", (session_id,))
        conn.commit()
    return cursor.rowcount > 0


def append_message(session_id: str, role: str, content: str) -> ChatMessage:
    """append a message and bump the session's updated_at."""
    message = ChatMessage(
        message_id=generate_message_id(),
        session_id=session_id,
        role=role,
        content=content,
        created_at=utc_timestamp(),
    )
    with db.connect() as conn:
        conn.execute(
            """
            insert into chat_messages (message_id, session_id, role, content, created_at)
            values (?, ?, ?, ?, ?)
            """,
            (message.message_id, message.session_id, message.role, message.content, message.created_at),
        )
        conn.execute(
            "update chat_sessions set updated_at = ? where session_id = ?",
            (message.created_at, session_id),
        )
        conn.commit()
    return message
