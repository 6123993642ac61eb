from __future__ import annotations

import logging
import os
import sqlite3
from dataclasses import dataclass
from typing import Any, Iterable

from .runtime import utc_now
from .settings import settings

log = logging.getLogger("dnsr")

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def _resolve_db_path() -> str:
    """Return a file path usable by sqlite.

    A bind-mounted path that did not exist yet is created by Docker as a
    directory; in that case the DB file is placed inside it.
    """
    p = os.path.abspath(settings.db_path)
    if os.path.isdir(p):
        p = os.path.join(p, "dnsr.db")

    parent = os.path.dirname(p)
    if parent and not os.path.exists(parent):
        os.makedirs(parent, exist_ok=True)

    return p


def connect() -> sqlite3.Connection:
    conn = sqlite3.connect(_resolve_db_path(), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


def init_db() -> None:
    """Create tables if they do not exist."""
    with connect() as conn:
        conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS events (
              id INTEGER PRIMARY KEY AUTOINCREMENT,
              ts TEXT NOT NULL,
              level TEXT NOT NULL,
              phase TEXT,
              domain_name TEXT,
              message TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS runs (
              id INTEGER PRIMARY KEY AUTOINCREMENT,
              started_at TEXT NOT NULL,
              finished_at TEXT NOT NULL,
              dry_run INTEGER NOT NULL DEFAULT 0,
              ok INTEGER NOT NULL,
              added INTEGER NOT NULL DEFAULT 0,
              removed INTEGER NOT NULL DEFAULT 0,
              updated INTEGER NOT NULL DEFAULT 0,
              error TEXT
            );

            CREATE INDEX IF NOT EXISTS idx_events_ts ON events(ts);
            """
        )


def log_event(level: str, message: str, phase: str | None = None, domain_name: str | None = None) -> None:
    level = level.upper()
    log.log(_LEVELS.get(level, logging.INFO), message)
    with connect() as conn:
        conn.execute(
            "INSERT INTO events (ts, level, phase, domain_name, message) VALUES (?, ?, ?, ?, ?)",
            (utc_now(), level, phase, domain_name, message),
        )


@dataclass(frozen=True)
class RunRow:
    id: int
    started_at: str
    finished_at: str
    dry_run: bool
    ok: bool
    added: int
    removed: int
    updated: int
    error: str | None


def _rows_to_runs(rows: Iterable[sqlite3.Row]) -> list[RunRow]:
    out: list[RunRow] = []
    for r in rows:
        d = dict(r)
        d["dry_run"] = bool(d["dry_run"])
        d["ok"] = bool(d["ok"])
        out.append(RunRow(**d))
    return out


def record_run(
    started_at: str,
    ok: bool,
    added: int = 0,
    removed: int = 0,
    updated: int = 0,
    error: str | None = None,
    dry_run: bool = False,
) -> RunRow:
    with connect() as conn:
        cur = conn.execute(
            """
            INSERT INTO runs (started_at, finished_at, dry_run, ok, added, removed, updated, error)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (started_at, utc_now(), int(dry_run), int(ok), added, removed, updated, error),
        )
        row = conn.execute("SELECT * FROM runs WHERE id=?", (cur.lastrowid,)).fetchone()
        return _rows_to_runs([row])[0]


def latest_runs(limit: int = 20) -> list[RunRow]:
    with connect() as conn:
        rows = conn.execute("SELECT * FROM runs ORDER BY id DESC LIMIT ?", (limit,)).fetchall()
        return _rows_to_runs(rows)


def latest_events(limit: int = 100) -> list[dict[str, Any]]:
    with connect() as conn:
        rows = conn.execute("SELECT * FROM events ORDER BY id DESC LIMIT ?", (limit,)).fetchall()
        return [dict(r) for r in rows]
