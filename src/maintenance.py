# src/maintenance.py
from __future__ import annotations

import logging
import sqlite3
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, timezone
from typing import Callable
from zoneinfo import ZoneInfo

from class_repo import (
    count_active_classes,
    count_classes_with_time_slots,
    list_active_classes,
)
from db import get_con
from gap_filler import fill_session_gaps
from models import ClassError, MaintenanceRun, MaintenanceStats, TutoringClass
from recurrence import UnknownRecurrencePatternError
from session_repo import count_upcoming_sessions
from session_time import SYDNEY_TZ, rolling_window

logger = logging.getLogger(__name__)

Connect = Callable[[], sqlite3.Connection]

# (class_id, sessions generated, error message or None)
ClassOutcome = tuple[str, int, str | None]


def _fill_one_class(
    con: sqlite3.Connection,
    c: TutoringClass,
    window_start: date,
    window_end: date,
    tz: ZoneInfo,
) -> ClassOutcome:
    """
    Per-class failure boundary: commits on success, rolls back on failure.
    Unknown recurrence patterns are not a per-class fault and propagate.
    """
    logger.info(
        "Processing class %s (%s), %d time slot(s)",
        c.class_id,
        c.name,
        len(c.time_slots),
    )
    try:
        created = fill_session_gaps(con, c, window_start, window_end, tz)
        con.commit()
    except UnknownRecurrencePatternError:
        con.rollback()
        raise
    except Exception as e:
        con.rollback()
        logger.error("Failed to generate sessions for class %s: %s", c.class_id, e)
        return c.class_id, 0, str(e) or e.__class__.__name__

    if created:
        logger.info("Generated %d session(s) for class %s", len(created), c.class_id)
    else:
        logger.debug("No missing sessions for class %s", c.class_id)
    return c.class_id, len(created), None


def _fold(run: MaintenanceRun, outcomes: list[ClassOutcome]) -> MaintenanceRun:
    for class_id, generated, error in outcomes:
        run.classes_processed += 1
        run.sessions_generated += generated
        if error is not None:
            run.errors.append(ClassError(class_id=class_id, error=error))
    return run


def maintain_session_window(
    connect: Connect = get_con,
    today: date | None = None,
    tz: ZoneInfo = SYDNEY_TZ,
    window_weeks: int = 4,
    max_workers: int = 1,
) -> MaintenanceRun:
    """
    Keep every active class materialized for the rolling window.

    A failing class is recorded in the run's errors and the run continues.
    Failing to enumerate the active classes aborts the whole run.
    """
    started = time.monotonic()
    today = today or datetime.now(tz).date()
    window_start, window_end = rolling_window(today, window_weeks)

    logger.info(
        "Starting session window maintenance %s..%s",
        window_start.isoformat(),
        window_end.isoformat(),
    )

    con = connect()
    try:
        classes = list_active_classes(con)
        logger.info("Found %d active class(es) with time slots", len(classes))

        if max_workers <= 1 or len(classes) <= 1:
            outcomes = [
                _fill_one_class(con, c, window_start, window_end, tz) for c in classes
            ]
        else:

            def work(c: TutoringClass) -> ClassOutcome:
                worker_con = connect()
                try:
                    return _fill_one_class(worker_con, c, window_start, window_end, tz)
                finally:
                    worker_con.close()

            with ThreadPoolExecutor(max_workers=max_workers) as pool:
                outcomes = list(pool.map(work, classes))
    finally:
        con.close()

    run = _fold(MaintenanceRun(window_start=window_start, window_end=window_end), outcomes)
    run.duration_ms = int((time.monotonic() - started) * 1000)

    logger.info(
        "Session window maintenance completed: classes=%d generated=%d errors=%d duration_ms=%d",
        run.classes_processed,
        run.sessions_generated,
        len(run.errors),
        run.duration_ms,
    )
    if run.errors:
        logger.warning(
            "Session generation had errors: %s",
            ", ".join(f"{e.class_id}: {e.error}" for e in run.errors),
        )

    return run


def get_maintenance_stats(
    con: sqlite3.Connection,
    now: datetime | None = None,
    tz: ZoneInfo = SYDNEY_TZ,
    window_weeks: int = 4,
) -> MaintenanceStats:
    """Read-only counters for the same window maintain_session_window uses."""
    now = now or datetime.now(timezone.utc)
    _start, window_end = rolling_window(now.astimezone(tz).date(), window_weeks)

    return MaintenanceStats(
        active_classes=count_active_classes(con),
        classes_with_time_slots=count_classes_with_time_slots(con),
        upcoming_sessions=count_upcoming_sessions(con, now, window_end),
    )
