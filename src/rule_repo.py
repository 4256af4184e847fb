# src/rule_repo.py
from __future__ import annotations

import json
import logging
import sqlite3
from datetime import date, datetime, timezone

from models import AssignmentRule

logger = logging.getLogger(__name__)


def _parse_date(s: str | None) -> date | None:
    return date.fromisoformat(s) if s else None


def upsert_rule(con: sqlite3.Connection, rule: AssignmentRule) -> None:
    """
    Stores the rule as-is, pattern included; the resolver decides what is valid.
    IMPORTANT: does NOT commit. Caller decides.
    """
    created_at = (
        datetime.combine(rule.created_on, datetime.min.time(), tzinfo=timezone.utc)
        if rule.created_on
        else datetime.now(timezone.utc)
    )
    con.execute(
        """
        INSERT INTO assignment_rules (time_slot_id, pattern, config_json, start_date, end_date, created_at)
        VALUES (?, ?, ?, ?, ?, ?)
        ON CONFLICT(time_slot_id) DO UPDATE SET
          pattern=excluded.pattern,
          config_json=excluded.config_json,
          start_date=excluded.start_date,
          end_date=excluded.end_date
        """,
        (
            rule.time_slot_id,
            rule.pattern,
            json.dumps(rule.config),
            rule.start_date.isoformat() if rule.start_date else None,
            rule.end_date.isoformat() if rule.end_date else None,
            created_at.isoformat(timespec="seconds"),
        ),
    )


def get_rule_for_slot(con: sqlite3.Connection, slot_id: str) -> AssignmentRule | None:
    row = con.execute(
        "SELECT * FROM assignment_rules WHERE time_slot_id = ?", (slot_id,)
    ).fetchone()
    if row is None:
        return None

    try:
        config = json.loads(row["config_json"] or "{}")
    except ValueError:
        logger.warning("Undecodable recurrence config for slot %s", slot_id)
        config = {}
    if not isinstance(config, dict):
        logger.warning("Recurrence config for slot %s is not an object", slot_id)
        config = {}

    return AssignmentRule(
        time_slot_id=row["time_slot_id"],
        pattern=row["pattern"],
        config=config,
        start_date=_parse_date(row["start_date"]),
        end_date=_parse_date(row["end_date"]),
        created_on=datetime.fromisoformat(row["created_at"]).date(),
    )
