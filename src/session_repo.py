# src/session_repo.py
from __future__ import annotations

import sqlite3
from datetime import date, datetime, timezone

from class_repo import set_time_slot_active
from models import SessionOccurrence


def _session_from_row(row: sqlite3.Row) -> SessionOccurrence:
    return SessionOccurrence(
        session_id=row["session_id"],
        class_id=row["class_id"],
        time_slot_id=row["time_slot_id"],
        session_date=date.fromisoformat(row["session_date"]),
        start_at=datetime.fromisoformat(row["start_at"]),
        end_at=datetime.fromisoformat(row["end_at"]),
        status=row["status"],
        tutor_id=row["tutor_id"],
        cancellation_reason=row["cancellation_reason"],
    )


def insert_session(con: sqlite3.Connection, s: SessionOccurrence) -> str | None:
    """
    Inserts a session and sets session_id like S000001.
    Returns None when a row for (time_slot_id, session_date) already exists.
    IMPORTANT: does NOT commit. Caller decides.
    """
    cur = con.execute(
        """
        INSERT INTO sessions (session_id, class_id, time_slot_id, session_date, start_at, end_at, status, tutor_id)
        VALUES (NULL, ?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(time_slot_id, session_date) DO NOTHING
        """,
        (
            s.class_id,
            s.time_slot_id,
            s.session_date.isoformat(),
            s.start_at.isoformat(),
            s.end_at.isoformat(),
            s.status,
            s.tutor_id,
        ),
    )
    if cur.rowcount != 1:
        return None

    new_id = cur.lastrowid
    session_id = f"S{new_id:06d}"
    con.execute("UPDATE sessions SET session_id = ? WHERE id = ?", (session_id, new_id))
    s.session_id = session_id
    return session_id


def get_session(con: sqlite3.Connection, session_id: str) -> SessionOccurrence | None:
    row = con.execute(
        "SELECT * FROM sessions WHERE session_id = ?", (session_id,)
    ).fetchone()
    return _session_from_row(row) if row else None


def list_sessions_for_slot(
    con: sqlite3.Connection, slot_id: str, start: date, end: date
) -> list[SessionOccurrence]:
    rows = con.execute(
        """
        SELECT * FROM sessions
        WHERE time_slot_id = ? AND session_date BETWEEN ? AND ?
        ORDER BY session_date ASC
        """,
        (slot_id, start.isoformat(), end.isoformat()),
    ).fetchall()
    return [_session_from_row(r) for r in rows]


def list_sessions_for_class(
    con: sqlite3.Connection, class_id: str
) -> list[SessionOccurrence]:
    rows = con.execute(
        "SELECT * FROM sessions WHERE class_id = ? ORDER BY start_at ASC",
        (class_id,),
    ).fetchall()
    return [_session_from_row(r) for r in rows]


def count_sessions_before(con: sqlite3.Connection, slot_id: str, before: date) -> int:
    """Materialized occurrences of a slot strictly before a date, any status."""
    return con.execute(
        "SELECT COUNT(*) FROM sessions WHERE time_slot_id = ? AND session_date < ?",
        (slot_id, before.isoformat()),
    ).fetchone()[0]


def count_upcoming_sessions(
    con: sqlite3.Connection, now: datetime, until: date
) -> int:
    return con.execute(
        """
        SELECT COUNT(*) FROM sessions
        WHERE start_at >= ?
          AND session_date <= ?
          AND status IN ('PENDING', 'CONFIRMED')
        """,
        (now.astimezone(timezone.utc).isoformat(timespec="seconds"), until.isoformat()),
    ).fetchone()[0]


def cancel_future_sessions_for_slot(
    con: sqlite3.Connection, slot_id: str, reason: str, now: datetime | None = None
) -> int:
    """
    Cancels PENDING/CONFIRMED sessions of a slot that have not started yet.
    IMPORTANT: does NOT commit. Caller decides.
    """
    now = now or datetime.now(timezone.utc)
    cur = con.execute(
        """
        UPDATE sessions
        SET status = 'CANCELLED',
            cancellation_reason = ?
        WHERE time_slot_id = ?
          AND start_at >= ?
          AND status IN ('PENDING', 'CONFIRMED')
        """,
        (reason, slot_id, now.astimezone(timezone.utc).isoformat(timespec="seconds")),
    )
    return cur.rowcount


def deactivate_time_slot(
    con: sqlite3.Connection, slot_id: str, reason: str | None = None
) -> int:
    """
    Deactivate a slot and cancel its future PENDING/CONFIRMED sessions.
    Returns the number of cancelled sessions. IMPORTANT: does NOT commit.
    """
    if not set_time_slot_active(con, slot_id, False):
        raise ValueError(f"time_slot_not_found: {slot_id}")
    return cancel_future_sessions_for_slot(
        con, slot_id, reason or f"Time slot {slot_id} deactivated"
    )
