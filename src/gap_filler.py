# src/gap_filler.py
from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from datetime import date
from zoneinfo import ZoneInfo

from class_repo import list_cancelled_weeks
from models import AssignmentRule, SessionOccurrence, TimeSlot, TutoringClass
from recurrence import resolve
from rule_repo import get_rule_for_slot
from session_repo import count_sessions_before, insert_session, list_sessions_for_slot
from session_time import (
    SYDNEY_TZ,
    dates_for_weekday,
    materialize_slot_times,
    week_number,
    week_start,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlannedOccurrence:
    session_date: date
    occurrence_index: int
    week_index: int
    tutor_id: str | None
    existing: SessionOccurrence | None = None

    @property
    def materialized(self) -> bool:
        return self.existing is not None


def plan_slot(
    con: sqlite3.Connection,
    slot: TimeSlot,
    rule: AssignmentRule | None,
    window_start: date,
    window_end: date,
) -> list[PlannedOccurrence]:
    """
    Walk the slot's dates in [window_start, window_end] in ascending order and
    resolve a tutor for each. Nothing is written.

    A date's occurrence index is the number of stored sessions for the slot
    before it, counting the dates this plan would create earlier in the walk,
    i.e. exactly what storage holds at that point of a real fill.
    """
    existing = {
        s.session_date: s
        for s in list_sessions_for_slot(con, slot.slot_id, window_start, window_end)
    }
    cancelled = list_cancelled_weeks(con, slot.slot_id)

    # every stored date in the window counts, whatever its weekday or status
    known: list[date] = sorted(existing)
    prior = count_sessions_before(con, slot.slot_id, window_start)

    out: list[PlannedOccurrence] = []
    for d in dates_for_weekday(slot.day_of_week, window_start, window_end):
        if d not in existing and week_start(d) in cancelled:
            continue

        idx = prior + sum(1 for k in known if k < d)
        ref = rule.reference_date if rule and rule.reference_date else d
        wk = week_number(ref, d)
        tutor_id = resolve(rule, slot, d, idx, wk)

        out.append(
            PlannedOccurrence(
                session_date=d,
                occurrence_index=idx,
                week_index=wk,
                tutor_id=tutor_id,
                existing=existing.get(d),
            )
        )
        if d not in existing:
            known.append(d)

    return out


def fill_slot(
    con: sqlite3.Connection,
    slot: TimeSlot,
    window_start: date,
    window_end: date,
    tz: ZoneInfo = SYDNEY_TZ,
) -> list[SessionOccurrence]:
    """IMPORTANT: does NOT commit. Caller decides."""
    rule = get_rule_for_slot(con, slot.slot_id)
    created: list[SessionOccurrence] = []

    for p in plan_slot(con, slot, rule, window_start, window_end):
        if p.materialized:
            continue

        start_at, end_at = materialize_slot_times(slot, p.session_date, tz)
        s = SessionOccurrence(
            session_id=None,
            class_id=slot.class_id,
            time_slot_id=slot.slot_id,
            session_date=p.session_date,
            start_at=start_at,
            end_at=end_at,
            status="PENDING",
            tutor_id=p.tutor_id,
        )
        if insert_session(con, s) is None:
            # another writer got there first; the row exists either way
            logger.info(
                "Session already exists, skipping (slot=%s date=%s)",
                slot.slot_id,
                p.session_date,
            )
            continue

        created.append(s)
        logger.debug(
            "Generated session %s slot=%s date=%s tutor=%s",
            s.session_id,
            slot.slot_id,
            p.session_date,
            p.tutor_id,
        )

    return created


def fill_session_gaps(
    con: sqlite3.Connection,
    tutoring_class: TutoringClass,
    window_start: date,
    window_end: date,
    tz: ZoneInfo = SYDNEY_TZ,
) -> list[SessionOccurrence]:
    """
    Create the missing sessions of every active slot of a class in the window.
    Existing sessions are never re-resolved, updated or deleted.
    IMPORTANT: does NOT commit. Caller decides.
    """
    if window_end < window_start:
        raise ValueError(
            f"invalid_window: {window_start.isoformat()} > {window_end.isoformat()}"
        )

    created: list[SessionOccurrence] = []
    for slot in tutoring_class.time_slots:
        if not slot.is_active:
            continue
        created.extend(fill_slot(con, slot, window_start, window_end, tz))

    return created
