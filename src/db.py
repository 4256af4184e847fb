# src/db.py
from __future__ import annotations

import sqlite3
from pathlib import Path

DB_PATH = Path("state.db")


def get_con(db_path: Path | str | None = None) -> sqlite3.Connection:
    # check_same_thread stays on: every thread opens its own connection
    con = sqlite3.connect(db_path or DB_PATH)
    con.row_factory = sqlite3.Row
    con.execute("PRAGMA foreign_keys = ON;")
    # parallel maintenance workers share the file
    con.execute("PRAGMA busy_timeout = 5000;")
    return con


def init_db(con: sqlite3.Connection) -> None:
    """
    Central schema bootstrap.
    Repos/services assume these tables + column names exist.
    """
    # readers never block the maintenance writer
    con.execute("PRAGMA journal_mode = WAL;")
    con.executescript(
        """
        CREATE TABLE IF NOT EXISTS tutors (
          tutor_id TEXT PRIMARY KEY,
          full_name TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS classes (
          class_id TEXT PRIMARY KEY,
          name TEXT NOT NULL,
          is_active INTEGER NOT NULL DEFAULT 1
        );

        -- Weekly templates. day_of_week: 0 = Monday ... 6 = Sunday
        CREATE TABLE IF NOT EXISTS time_slots (
          slot_id TEXT PRIMARY KEY,
          class_id TEXT NOT NULL REFERENCES classes(class_id),
          day_of_week INTEGER NOT NULL CHECK (day_of_week BETWEEN 0 AND 6),
          start_time TEXT NOT NULL,             -- HH:MM local
          end_time TEXT NOT NULL,               -- HH:MM local
          subject TEXT NOT NULL,
          is_active INTEGER NOT NULL DEFAULT 1
        );

        CREATE INDEX IF NOT EXISTS idx_time_slots_class ON time_slots(class_id);

        -- Weeks a slot is skipped (week_start is the Monday, YYYY-MM-DD)
        CREATE TABLE IF NOT EXISTS slot_cancellations (
          time_slot_id TEXT NOT NULL REFERENCES time_slots(slot_id),
          week_start TEXT NOT NULL,
          PRIMARY KEY (time_slot_id, week_start)
        );

        CREATE TABLE IF NOT EXISTS assignment_rules (
          time_slot_id TEXT PRIMARY KEY REFERENCES time_slots(slot_id),
          pattern TEXT NOT NULL,                -- ROUND_ROBIN | WEEKLY | CONSECUTIVE_DAYS | MANUAL
          config_json TEXT NOT NULL DEFAULT '{}',
          start_date TEXT,                      -- nullable YYYY-MM-DD
          end_date TEXT,                        -- nullable YYYY-MM-DD
          created_at TEXT NOT NULL              -- RFC3339 / ISO string in UTC
        );

        -- Materialized sessions. One row per (slot, date), enforced here.
        CREATE TABLE IF NOT EXISTS sessions (
          id INTEGER PRIMARY KEY AUTOINCREMENT,
          session_id TEXT UNIQUE,
          class_id TEXT NOT NULL REFERENCES classes(class_id),
          time_slot_id TEXT NOT NULL REFERENCES time_slots(slot_id),
          session_date TEXT NOT NULL,           -- YYYY-MM-DD local
          start_at TEXT NOT NULL,               -- ISO string in UTC
          end_at TEXT NOT NULL,                 -- ISO string in UTC
          status TEXT NOT NULL,                 -- PENDING | CONFIRMED | COMPLETED | CANCELLED
          tutor_id TEXT,                        -- nullable
          cancellation_reason TEXT,             -- nullable
          UNIQUE (time_slot_id, session_date)
        );

        CREATE INDEX IF NOT EXISTS idx_sessions_class ON sessions(class_id);
        CREATE INDEX IF NOT EXISTS idx_sessions_start ON sessions(start_at);
        """
    )
