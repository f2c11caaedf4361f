from __future__ import annotations

import os
import sqlite3
import threading
import uuid
from datetime import datetime, timezone
from typing import Any

from app.core.config import settings

_conn: sqlite3.Connection | None = None
_conn_lock = threading.Lock()


class UserExistsError(ValueError):
    pass


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _get_connection() -> sqlite3.Connection:
    global _conn
    with _conn_lock:
        if _conn is not None:
            return _conn

        db_path = settings.users_db_path
        directory = os.path.dirname(db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        _conn = sqlite3.connect(
            db_path,
            check_same_thread=False,
            timeout=5,
            isolation_level=None,
        )
        _conn.execute("PRAGMA journal_mode=WAL;")
        _conn.execute("PRAGMA synchronous=NORMAL;")
        _conn.execute("PRAGMA busy_timeout=5000;")
        _conn.execute(
            """
            CREATE TABLE IF NOT EXISTS users (
                id TEXT PRIMARY KEY,
                email TEXT NOT NULL UNIQUE,
                name TEXT NOT NULL,
                password_hash TEXT NOT NULL,
                created_at TEXT NOT NULL
            );
            """
        )
        return _conn


def init_user_store() -> None:
    _get_connection()


def _public(row: tuple) -> dict[str, Any]:
    return {
        "id": row[0],
        "email": row[1],
        "name": row[2],
        "created_at": datetime.fromisoformat(row[4]),
    }


def create_user(*, email: str, name: str, password_hash: str) -> dict[str, Any]:
    conn = _get_connection()
    user_id = uuid.uuid4().hex
    created_at = _utc_now().isoformat()
    normalized_email = email.strip().lower()

    with _conn_lock:
        try:
            conn.execute(
                """
                INSERT INTO users (id, email, name, password_hash, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (user_id, normalized_email, name.strip(), password_hash, created_at),
            )
            conn.commit()
        except sqlite3.IntegrityError as exc:
            raise UserExistsError("User already exists") from exc

    return _public((user_id, normalized_email, name.strip(), password_hash, created_at))


def _fetch_one(query: str, params: tuple) -> tuple | None:
    conn = _get_connection()
    with _conn_lock:
        cur = conn.execute(query, params)
        return cur.fetchone()


def get_user_by_id(user_id: str) -> dict[str, Any] | None:
    row = _fetch_one(
        "SELECT id, email, name, password_hash, created_at FROM users WHERE id = ?",
        (user_id,),
    )
    return _public(row) if row else None


def get_user_credentials(email: str) -> tuple[dict[str, Any], str] | None:
    """Return the public user record and its password hash."""
    row = _fetch_one(
        "SELECT id, email, name, password_hash, created_at FROM users WHERE email = ?",
        (email.strip().lower(),),
    )
    if not row:
        return None
    return _public(row), row[3]


def clear_users() -> None:
    conn = _get_connection()
    with _conn_lock:
        conn.execute("DELETE FROM users")
        conn.commit()
