from __future__ import annotations

import hashlib
import json
import os
import sqlite3
import threading
from datetime import datetime, timedelta, timezone
from typing import Any

from autonomy_gate.core.config import settings

_conn: sqlite3.Connection | None = None
_conn_lock = threading.Lock()


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _get_connection() -> sqlite3.Connection:
    global _conn
    with _conn_lock:
        if _conn is not None:
            return _conn

        db_path = settings.verdict_cache_db_path
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
            CREATE TABLE IF NOT EXISTS verdict_cache_records (
                cache_key TEXT PRIMARY KEY,
                role_context TEXT NOT NULL,
                result_payload_json TEXT NOT NULL,
                created_at TEXT NOT NULL,
                expires_at TEXT NOT NULL
            );
            """
        )
        _conn.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_verdict_cache_expiry
            ON verdict_cache_records (expires_at);
            """
        )
        return _conn


def verdict_cache_key(*, github_url: str | None, role_context: str, resume_text: str) -> str:
    seed = "\x1f".join([github_url or "", role_context, resume_text])
    return hashlib.sha256(seed.encode("utf-8", errors="ignore")).hexdigest()


def purge_expired_verdicts() -> int:
    conn = _get_connection()
    now_iso = _utc_now().isoformat()
    with _conn_lock:
        cur = conn.execute("DELETE FROM verdict_cache_records WHERE expires_at <= ?", (now_iso,))
        conn.commit()
    return int(cur.rowcount or 0)


def store_verdict(cache_key: str, *, role_context: str, result_payload: dict[str, Any]) -> datetime:
    conn = _get_connection()
    ttl_days = max(1, int(settings.verdict_cache_ttl_days))
    created_at = _utc_now()
    expires_at = created_at + timedelta(days=ttl_days)
    payload_json = json.dumps(result_payload, ensure_ascii=False)

    with _conn_lock:
        conn.execute(
            """
            INSERT OR REPLACE INTO verdict_cache_records (
                cache_key, role_context, result_payload_json, created_at, expires_at
            ) VALUES (?, ?, ?, ?, ?)
            """,
            (cache_key, role_context, payload_json, created_at.isoformat(), expires_at.isoformat()),
        )
        conn.commit()
    return expires_at


def get_cached_verdict(cache_key: str) -> dict[str, Any] | None:
    conn = _get_connection()
    purge_expired_verdicts()
    with _conn_lock:
        cur = conn.execute(
            "SELECT result_payload_json FROM verdict_cache_records WHERE cache_key = ?",
            (cache_key,),
        )
        row = cur.fetchone()

    if not row or not row[0]:
        return None
    return json.loads(row[0])


def clear_verdict_cache() -> None:
    conn = _get_connection()
    with _conn_lock:
        conn.execute("DELETE FROM verdict_cache_records")
        conn.commit()
