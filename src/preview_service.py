# src/preview_service.py
from __future__ import annotations

import sqlite3
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from class_repo import get_class, get_time_slot, tutor_names
from gap_filler import plan_slot
from models import AssignmentRule, PreviewEntry
from rule_repo import get_rule_for_slot
from session_time import SYDNEY_TZ, week_start


def preview_assignments(
    con: sqlite3.Connection,
    class_id: str,
    slot_id: str,
    weeks_ahead: int = 4,
    rule: AssignmentRule | None = None,
    today: date | None = None,
    tz: ZoneInfo = SYDNEY_TZ,
) -> list[PreviewEntry]:
    """
    Dry run of the gap-fill resolution for one slot, from the Monday of the
    current week for weeks_ahead weeks. Never writes.

    Inactive classes and slots are rejected: maintenance never fills them.
    rule: a prospective rule to preview instead of the stored one.
    Materialized dates keep their stored tutor in current_tutor_id; tutor_id
    is what the rule would resolve for them.
    """
    if weeks_ahead < 1:
        raise ValueError(f"invalid_weeks_ahead: {weeks_ahead}")

    tutoring_class = get_class(con, class_id)
    if tutoring_class is None:
        raise ValueError(f"class_not_found: {class_id}")
    if not tutoring_class.is_active:
        raise ValueError(f"class_inactive: {class_id}")

    slot = get_time_slot(con, slot_id)
    if slot is None or slot.class_id != class_id:
        raise ValueError(f"time_slot_not_in_class: {slot_id}")
    if not slot.is_active:
        raise ValueError(f"time_slot_inactive: {slot_id}")

    if rule is None:
        rule = get_rule_for_slot(con, slot_id)

    today = today or datetime.now(tz).date()
    start = week_start(today)
    end = start + timedelta(days=7 * weeks_ahead - 1)

    names = tutor_names(con)
    return [
        PreviewEntry(
            session_date=p.session_date,
            week_start=week_start(p.session_date),
            tutor_id=p.tutor_id,
            tutor_name=names.get(p.tutor_id) if p.tutor_id else None,
            materialized=p.materialized,
            current_tutor_id=p.existing.tutor_id if p.existing else None,
        )
        for p in plan_slot(con, slot, rule, start, end)
    ]
