from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from app.core.config import settings


def _utc_now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def _get_db_path() -> Path:
    return Path(settings.analytics_db_path)


def _connect() -> sqlite3.Connection:
    db_path = _get_db_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path)
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS enhancement_runs (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            created_at TEXT NOT NULL,
            run_id TEXT NOT NULL,
            user_id TEXT,
            source_provider TEXT NOT NULL,
            input_chars INTEGER NOT NULL,
            output_chars INTEGER NOT NULL,
            attempts_json TEXT,
            latency_ms INTEGER
        )
        """
    )
    conn.execute(
        """
        CREATE INDEX IF NOT EXISTS idx_enhancement_runs_created_at
        ON enhancement_runs (created_at)
        """
    )
    return conn


def init_db() -> None:
    if not settings.analytics_enabled:
        return
    with _connect() as conn:
        conn.commit()
    purge_old_records()


def log_enhancement_run(
    *,
    run_id: str,
    user_id: str | None,
    source_provider: str,
    input_chars: int,
    output_chars: int,
    attempts: list[dict[str, Any]],
    latency_ms: int | None,
) -> None:
    if not settings.analytics_enabled:
        return
    attempts_json = json.dumps(attempts, ensure_ascii=False)
    with _connect() as conn:
        conn.execute(
            """
            INSERT INTO enhancement_runs (
                created_at, run_id, user_id, source_provider, input_chars, output_chars, attempts_json, latency_ms
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                _utc_now(),
                run_id,
                user_id,
                source_provider,
                input_chars,
                output_chars,
                attempts_json,
                latency_ms,
            ),
        )
        conn.commit()


def purge_old_records() -> dict[str, int]:
    if not settings.analytics_enabled:
        return {"enhancement_runs": 0}

    retention = max(1, int(settings.analytics_retention_days))
    with _connect() as conn:
        cur = conn.execute(
            "DELETE FROM enhancement_runs WHERE created_at < datetime('now', ?)",
            (f"-{retention} days",),
        )
        deleted = int(cur.rowcount or 0)
        conn.commit()
    return {"enhancement_runs": deleted}


def get_summary() -> dict[str, Any]:
    if not settings.analytics_enabled:
        return {"enabled": False}
    with _connect() as conn:
        total = conn.execute("SELECT COUNT(*) FROM enhancement_runs").fetchone()[0]
        total_7d = conn.execute(
            """
            SELECT COUNT(*)
            FROM enhancement_runs
            WHERE created_at >= datetime('now', '-7 days')
            """
        ).fetchone()[0]
        by_provider = dict(
            conn.execute(
                """
                SELECT source_provider, COUNT(*)
                FROM enhancement_runs
                GROUP BY source_provider
                """
            ).fetchall()
        )
        avg_latency = conn.execute("SELECT AVG(latency_ms) FROM enhancement_runs").fetchone()[0]
    return {
        "enabled": True,
        "total": total,
        "total_7d": total_7d,
        "by_provider": by_provider,
        "avg_latency_ms": int(avg_latency) if avg_latency is not None else None,
    }


def get_latest(limit: int = 20) -> list[dict[str, Any]]:
    """Most recent enhancement runs, newest first, with attempts decoded."""
    if not settings.analytics_enabled:
        return []
    with _connect() as conn:
        rows = conn.execute(
            """
            SELECT created_at, run_id, user_id, source_provider, input_chars, output_chars, attempts_json, latency_ms
            FROM enhancement_runs
            ORDER BY id DESC
            LIMIT ?
            """,
            (limit,),
        ).fetchall()
    return [
        {
            "created_at": row[0],
            "run_id": row[1],
            "user_id": row[2],
            "source_provider": row[3],
            "input_chars": row[4],
            "output_chars": row[5],
            "attempts": json.loads(row[6]) if row[6] else [],
            "latency_ms": row[7],
        }
        for row in rows
    ]
