from __future__ import annotations

import os
import sqlite3
import threading
import uuid
from datetime import datetime, timezone
from typing import Any

from app.core.config import settings

ANONYMOUS_USER_ID = "anonymous"

_conn: sqlite3.Connection | None = None
_conn_lock = threading.Lock()

_COLUMNS = (
    "id, user_id, original_text, enhanced_text, full_original_text, "
    "full_enhanced_text, source_provider, created_at"
)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _get_connection() -> sqlite3.Connection:
    global _conn
    with _conn_lock:
        if _conn is not None:
            return _conn

        db_path = settings.history_db_path
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
            CREATE TABLE IF NOT EXISTS enhancement_history (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                id TEXT NOT NULL UNIQUE,
                user_id TEXT NOT NULL,
                original_text TEXT NOT NULL,
                enhanced_text TEXT NOT NULL,
                full_original_text TEXT NOT NULL,
                full_enhanced_text TEXT NOT NULL,
                source_provider TEXT NOT NULL,
                created_at TEXT NOT NULL
            );
            """
        )
        _conn.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_enhancement_history_user
            ON enhancement_history (user_id, seq);
            """
        )
        return _conn


def init_history_store() -> None:
    _get_connection()


def _preview(text: str) -> str:
    limit = max(1, int(settings.history_preview_chars))
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def _row_to_entry(row: tuple) -> dict[str, Any]:
    return {
        "id": row[0],
        "user_id": row[1],
        "original_text": row[2],
        "enhanced_text": row[3],
        "full_original_text": row[4],
        "full_enhanced_text": row[5],
        "source_provider": row[6],
        "created_at": datetime.fromisoformat(row[7]),
    }


def add_history_entry(
    *,
    user_id: str | None,
    original_text: str,
    enhanced_text: str,
    source_provider: str,
) -> dict[str, Any]:
    conn = _get_connection()
    owner = user_id or ANONYMOUS_USER_ID
    entry_id = uuid.uuid4().hex
    created_at = _utc_now()
    keep = max(1, int(settings.history_max_entries))

    with _conn_lock:
        conn.execute("BEGIN IMMEDIATE")
        try:
            conn.execute(
                f"""
                INSERT INTO enhancement_history ({_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry_id,
                    owner,
                    _preview(original_text),
                    _preview(enhanced_text),
                    original_text,
                    enhanced_text,
                    source_provider,
                    created_at.isoformat(),
                ),
            )
            conn.execute(
                """
                DELETE FROM enhancement_history
                WHERE user_id = ? AND seq NOT IN (
                    SELECT seq FROM enhancement_history
                    WHERE user_id = ?
                    ORDER BY seq DESC
                    LIMIT ?
                )
                """,
                (owner, owner, keep),
            )
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    return {
        "id": entry_id,
        "user_id": owner,
        "original_text": _preview(original_text),
        "enhanced_text": _preview(enhanced_text),
        "full_original_text": original_text,
        "full_enhanced_text": enhanced_text,
        "source_provider": source_provider,
        "created_at": created_at,
    }


def list_history(user_id: str | None) -> list[dict[str, Any]]:
    conn = _get_connection()
    with _conn_lock:
        cur = conn.execute(
            f"""
            SELECT {_COLUMNS}
            FROM enhancement_history
            WHERE user_id = ?
            ORDER BY seq DESC
            """,
            (user_id or ANONYMOUS_USER_ID,),
        )
        rows = cur.fetchall()
    return [_row_to_entry(row) for row in rows]


def get_history_entry(user_id: str | None, entry_id: str) -> dict[str, Any] | None:
    conn = _get_connection()
    with _conn_lock:
        cur = conn.execute(
            f"""
            SELECT {_COLUMNS}
            FROM enhancement_history
            WHERE user_id = ? AND id = ?
            """,
            (user_id or ANONYMOUS_USER_ID, entry_id),
        )
        row = cur.fetchone()
    if not row:
        return None
    return _row_to_entry(row)


def delete_history_entry(user_id: str | None, entry_id: str) -> bool:
    conn = _get_connection()
    with _conn_lock:
        cur = conn.execute(
            "DELETE FROM enhancement_history WHERE user_id = ? AND id = ?",
            (user_id or ANONYMOUS_USER_ID, entry_id),
        )
        conn.commit()
    return bool(cur.rowcount)


def clear_history(user_id: str | None = None) -> int:
    """Remove one user's entries, or every entry when ``user_id`` is None."""
    conn = _get_connection()
    with _conn_lock:
        if user_id is None:
            cur = conn.execute("DELETE FROM enhancement_history")
        else:
            cur = conn.execute("DELETE FROM enhancement_history WHERE user_id = ?", (user_id,))
        conn.commit()
    return int(cur.rowcount or 0)
