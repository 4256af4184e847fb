# src/recurrence.py
from __future__ import annotations

import logging
from datetime import date
from typing import Any

from models import RECURRENCE_PATTERNS, AssignmentRule, TimeSlot

logger = logging.getLogger(__name__)


class UnknownRecurrencePatternError(RuntimeError):
    """Rule data carries a pattern this code does not know. Never downgraded."""

    def __init__(self, pattern: Any, time_slot_id: str | None = None):
        self.pattern = pattern
        self.time_slot_id = time_slot_id
        super().__init__(
            f"unknown_recurrence_pattern: {pattern!r} (slot={time_slot_id})"
        )


def _candidates(rule: AssignmentRule) -> list[str]:
    tutors = rule.config.get("tutors", [])
    if not isinstance(tutors, list) or not all(
        isinstance(t, str) and t for t in tutors
    ):
        logger.warning("Malformed tutors list for slot %s", rule.time_slot_id)
        return []
    return tutors


def round_robin(candidates: list[str], occurrence_index: int) -> str | None:
    if not candidates:
        return None
    return candidates[occurrence_index % len(candidates)]


def consecutive_blocks(
    candidates: list[str], block_length: int, occurrence_index: int
) -> str | None:
    # each tutor covers block_length occurrences before rotating
    if not candidates or block_length < 1:
        return None
    return candidates[(occurrence_index // block_length) % len(candidates)]


def _block_length(rule: AssignmentRule) -> int:
    raw = rule.config.get("block_length", 1)
    if isinstance(raw, bool) or not isinstance(raw, (int, str)):
        return 0
    try:
        return int(raw)
    except ValueError:
        return 0


def weekly(config: dict[str, Any], week_index: int) -> str | None:
    """
    {"weeks": {"1": "T1", "3": "T2"}} exact mapping first, then the optional
    {"alternating": {"tutor": "T1", "start_week": 1}} every-other-week rule.
    """
    weeks = config.get("weeks") or {}
    if isinstance(weeks, dict):
        for k, tutor in weeks.items():
            try:
                if int(k) == week_index and isinstance(tutor, str) and tutor:
                    return tutor
            except (TypeError, ValueError):
                logger.warning("Ignoring malformed week key %r", k)

    alt = config.get("alternating")
    if isinstance(alt, dict) and isinstance(alt.get("tutor"), str):
        try:
            start_week = int(alt.get("start_week", 1))
        except (TypeError, ValueError):
            return None
        if week_index >= start_week and (week_index - start_week) % 2 == 0:
            return alt["tutor"]

    return None


def resolve(
    rule: AssignmentRule | None,
    slot: TimeSlot,
    occurrence_date: date,
    occurrence_index: int,
    week_index: int,
) -> str | None:
    """
    Tutor id for one occurrence of a slot, or None (unassigned).

    occurrence_index: 0-based count of materialized occurrences of the slot
    before occurrence_date. Callers walk dates in ascending order.
    week_index: 1-based week offset from the rule's reference date.
    """
    if rule is None:
        return None

    pattern = rule.pattern
    if pattern not in RECURRENCE_PATTERNS:
        raise UnknownRecurrencePatternError(pattern, slot.slot_id)

    if rule.start_date and occurrence_date < rule.start_date:
        return None
    if rule.end_date and occurrence_date > rule.end_date:
        return None

    if pattern == "ROUND_ROBIN":
        return round_robin(_candidates(rule), occurrence_index)

    if pattern == "CONSECUTIVE_DAYS":
        return consecutive_blocks(
            _candidates(rule), _block_length(rule), occurrence_index
        )

    if pattern == "WEEKLY":
        return weekly(rule.config, week_index)

    # MANUAL: assigned through a separate manual action
    return None
