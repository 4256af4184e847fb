# src/class_repo.py
from __future__ import annotations

import sqlite3
from datetime import date

from models import TimeSlot, Tutor, TutoringClass


def _slot_from_row(row: sqlite3.Row) -> TimeSlot:
    return TimeSlot(
        slot_id=row["slot_id"],
        class_id=row["class_id"],
        day_of_week=int(row["day_of_week"]),
        start_time=row["start_time"],
        end_time=row["end_time"],
        subject=row["subject"],
        is_active=bool(row["is_active"]),
    )


def upsert_class(
    con: sqlite3.Connection, class_id: str, name: str, is_active: bool = True
) -> None:
    """IMPORTANT: does NOT commit. Caller decides."""
    con.execute(
        """
        INSERT INTO classes (class_id, name, is_active)
        VALUES (?, ?, ?)
        ON CONFLICT(class_id) DO UPDATE SET
          name=excluded.name,
          is_active=excluded.is_active
        """,
        (class_id, name, int(is_active)),
    )


def upsert_time_slot(con: sqlite3.Connection, slot: TimeSlot) -> None:
    """IMPORTANT: does NOT commit. Caller decides."""
    con.execute(
        """
        INSERT INTO time_slots (slot_id, class_id, day_of_week, start_time, end_time, subject, is_active)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(slot_id) DO UPDATE SET
          class_id=excluded.class_id,
          day_of_week=excluded.day_of_week,
          start_time=excluded.start_time,
          end_time=excluded.end_time,
          subject=excluded.subject,
          is_active=excluded.is_active
        """,
        (
            slot.slot_id,
            slot.class_id,
            slot.day_of_week,
            slot.start_time,
            slot.end_time,
            slot.subject,
            int(slot.is_active),
        ),
    )


def upsert_tutor(con: sqlite3.Connection, tutor: Tutor) -> None:
    con.execute(
        """
        INSERT INTO tutors (tutor_id, full_name) VALUES (?, ?)
        ON CONFLICT(tutor_id) DO UPDATE SET full_name=excluded.full_name
        """,
        (tutor.tutor_id, tutor.full_name),
    )


def tutor_names(con: sqlite3.Connection) -> dict[str, str]:
    rows = con.execute("SELECT tutor_id, full_name FROM tutors").fetchall()
    return {r["tutor_id"]: r["full_name"] for r in rows}


def list_active_classes(con: sqlite3.Connection) -> list[TutoringClass]:
    """
    Active classes that have at least one active time slot, ordered by class_id.
    Slots come back ordered by (day_of_week, start_time).
    """
    rows = con.execute(
        """
        SELECT c.class_id AS c_id, c.name AS c_name, ts.*
        FROM classes c
        JOIN time_slots ts ON ts.class_id = c.class_id
        WHERE c.is_active = 1 AND ts.is_active = 1
        ORDER BY c.class_id, ts.day_of_week, ts.start_time, ts.slot_id
        """
    ).fetchall()

    slots_by_class: dict[str, list[TimeSlot]] = {}
    names: dict[str, str] = {}
    for r in rows:
        names[r["c_id"]] = r["c_name"]
        slots_by_class.setdefault(r["c_id"], []).append(_slot_from_row(r))

    return [
        TutoringClass(
            class_id=cid, name=names[cid], is_active=True, time_slots=tuple(slots)
        )
        for cid, slots in slots_by_class.items()
    ]


def get_class(con: sqlite3.Connection, class_id: str) -> TutoringClass | None:
    row = con.execute(
        "SELECT * FROM classes WHERE class_id = ?", (class_id,)
    ).fetchone()
    if row is None:
        return None

    slot_rows = con.execute(
        """
        SELECT * FROM time_slots
        WHERE class_id = ? AND is_active = 1
        ORDER BY day_of_week, start_time, slot_id
        """,
        (class_id,),
    ).fetchall()

    return TutoringClass(
        class_id=row["class_id"],
        name=row["name"],
        is_active=bool(row["is_active"]),
        time_slots=tuple(_slot_from_row(r) for r in slot_rows),
    )


def get_time_slot(con: sqlite3.Connection, slot_id: str) -> TimeSlot | None:
    row = con.execute(
        "SELECT * FROM time_slots WHERE slot_id = ?", (slot_id,)
    ).fetchone()
    return _slot_from_row(row) if row else None


def set_time_slot_active(con: sqlite3.Connection, slot_id: str, active: bool) -> bool:
    cur = con.execute(
        "UPDATE time_slots SET is_active = ? WHERE slot_id = ?",
        (int(active), slot_id),
    )
    return cur.rowcount == 1


def cancel_slot_week(con: sqlite3.Connection, slot_id: str, week_start: date) -> None:
    """Skip one week of a slot. week_start must be a Monday."""
    if week_start.weekday() != 0:
        raise ValueError(f"week_start_not_monday: {week_start.isoformat()}")
    con.execute(
        """
        INSERT INTO slot_cancellations (time_slot_id, week_start) VALUES (?, ?)
        ON CONFLICT(time_slot_id, week_start) DO NOTHING
        """,
        (slot_id, week_start.isoformat()),
    )


def list_cancelled_weeks(con: sqlite3.Connection, slot_id: str) -> set[date]:
    rows = con.execute(
        "SELECT week_start FROM slot_cancellations WHERE time_slot_id = ?",
        (slot_id,),
    ).fetchall()
    return {date.fromisoformat(r["week_start"]) for r in rows}


def count_active_classes(con: sqlite3.Connection) -> int:
    return con.execute("SELECT COUNT(*) FROM classes WHERE is_active = 1").fetchone()[0]


def count_classes_with_time_slots(con: sqlite3.Connection) -> int:
    return con.execute(
        """
        SELECT COUNT(DISTINCT c.class_id)
        FROM classes c
        JOIN time_slots ts ON ts.class_id = c.class_id
        WHERE c.is_active = 1 AND ts.is_active = 1
        """
    ).fetchone()[0]
