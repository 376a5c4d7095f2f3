"""SQLite schema, migrations, and data access helpers."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any, Dict, List

from .utils import json_dumps, utc_now_iso

MIGRATIONS: list[tuple[int, str]] = [
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS schema_migrations (
            version INTEGER PRIMARY KEY,
            applied_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS settings (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS completion_calls (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            endpoint TEXT NOT NULL,
            language TEXT NOT NULL DEFAULT '',
            fim INTEGER NOT NULL DEFAULT 0,
            status TEXT NOT NULL,
            status_code INTEGER,
            latency_ms INTEGER NOT NULL DEFAULT 0,
            prompt_chars INTEGER NOT NULL DEFAULT 0,
            output_chars INTEGER NOT NULL DEFAULT 0,
            created_at TEXT NOT NULL,
            meta_json TEXT NOT NULL DEFAULT '{}'
        );

        CREATE INDEX IF NOT EXISTS idx_completion_calls_created ON completion_calls(created_at);
        """,
    ),
    (
        2,
        """
        CREATE TABLE IF NOT EXISTS output_log (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            kind TEXT NOT NULL,
            text TEXT NOT NULL,
            parameters_json TEXT NOT NULL DEFAULT '{}',
            created_at TEXT NOT NULL
        );
        """,
    ),
]


def get_connection(db_path: str) -> sqlite3.Connection:
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


def apply_migrations(db_path: str) -> None:
    with get_connection(db_path) as conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_migrations (
                version INTEGER PRIMARY KEY,
                applied_at TEXT NOT NULL
            )
            """
        )
        applied = {
            row["version"]
            for row in conn.execute("SELECT version FROM schema_migrations").fetchall()
        }
        for version, sql in MIGRATIONS:
            if version in applied:
                continue
            conn.executescript(sql)
            conn.execute(
                "INSERT INTO schema_migrations(version, applied_at) VALUES (?, ?)",
                (version, utc_now_iso()),
            )
        conn.commit()


def set_setting(conn: sqlite3.Connection, key: str, value: str) -> None:
    conn.execute(
        """
        INSERT INTO settings(key, value, updated_at)
        VALUES (?, ?, ?)
        ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
        """,
        (key, value, utc_now_iso()),
    )
    conn.commit()


def get_setting(conn: sqlite3.Connection, key: str, default: str | None = None) -> str | None:
    row = conn.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
    if not row:
        return default
    return row["value"]


def log_completion_call(
    conn: sqlite3.Connection,
    endpoint: str,
    language: str,
    fim: bool,
    status: str,
    status_code: int | None = None,
    latency_ms: int = 0,
    prompt_chars: int = 0,
    output_chars: int = 0,
    meta: Dict[str, Any] | None = None,
) -> Dict[str, Any]:
    cur = conn.execute(
        """
        INSERT INTO completion_calls(
            endpoint, language, fim, status, status_code, latency_ms,
            prompt_chars, output_chars, created_at, meta_json
        )
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            endpoint,
            language,
            int(fim),
            status,
            status_code,
            latency_ms,
            prompt_chars,
            output_chars,
            utc_now_iso(),
            json_dumps(meta),
        ),
    )
    conn.commit()
    row = conn.execute("SELECT * FROM completion_calls WHERE id = ?", (cur.lastrowid,)).fetchone()
    return dict(row)


def list_recent_calls(conn: sqlite3.Connection, limit: int = 20) -> List[Dict[str, Any]]:
    rows = conn.execute(
        "SELECT * FROM completion_calls ORDER BY id DESC LIMIT ?",
        (limit,),
    ).fetchall()
    return [dict(row) for row in rows]


def get_call_summary(conn: sqlite3.Connection) -> Dict[str, Any]:
    row = conn.execute(
        """
        SELECT
          COUNT(*) AS calls,
          COALESCE(SUM(CASE WHEN status = 'ok' THEN 1 ELSE 0 END), 0) AS succeeded,
          COALESCE(SUM(CASE WHEN status != 'ok' THEN 1 ELSE 0 END), 0) AS failed,
          COALESCE(AVG(latency_ms), 0) AS avg_latency_ms
        FROM completion_calls
        """
    ).fetchone()
    return dict(row)


def append_output_log(
    conn: sqlite3.Connection,
    kind: str,
    text: str,
    parameters: Dict[str, Any] | None = None,
) -> None:
    conn.execute(
        "INSERT INTO output_log(kind, text, parameters_json, created_at) VALUES (?, ?, ?, ?)",
        (kind, text, json_dumps(parameters), utc_now_iso()),
    )
    conn.commit()


def list_output_log(conn: sqlite3.Connection, limit: int = 50) -> List[Dict[str, Any]]:
    rows = conn.execute(
        "SELECT * FROM output_log ORDER BY id DESC LIMIT ?",
        (limit,),
    ).fetchall()
    return [dict(row) for row in rows]
