# src/scheduler.py
from __future__ import annotations

import logging
import threading
from datetime import datetime, time, timedelta, timezone
from typing import Callable, Literal
from zoneinfo import ZoneInfo

from models import MaintenanceRun
from session_time import SYDNEY_TZ

logger = logging.getLogger(__name__)

SchedulerState = Literal["STOPPED", "SCHEDULED"]


def next_fire_after(now: datetime, run_at: time, tz: ZoneInfo = SYDNEY_TZ) -> datetime:
    """Next local wall-clock occurrence of run_at strictly after now."""
    local_now = now.astimezone(tz)
    candidate = datetime.combine(local_now.date(), run_at, tzinfo=tz)
    # same-tzinfo comparisons ignore the UTC offset
    if candidate.astimezone(timezone.utc) <= now.astimezone(timezone.utc):
        candidate = datetime.combine(
            local_now.date() + timedelta(days=1), run_at, tzinfo=tz
        )
    return candidate


class Scheduler:
    """Fires the maintenance job once a day at a fixed local time.

    State machine: STOPPED -> SCHEDULED -> STOPPED. ``start()`` while
    scheduled stops the previous timer first, so there is never more than one
    timer thread. Runs (timer or ``trigger()``) are serialized by a lock.
    """

    def __init__(
        self,
        job: Callable[[], MaintenanceRun],
        run_at: time = time(2, 0),
        tz: ZoneInfo = SYDNEY_TZ,
        on_result: Callable[[MaintenanceRun], None] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._job = job
        self.run_at = run_at
        self.tz = tz
        self._on_result = on_result
        self._clock = clock or (lambda: datetime.now(self.tz))

        self._run_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._thread: threading.Thread | None = None
        self._stop_event: threading.Event | None = None

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------

    @property
    def state(self) -> SchedulerState:
        return "SCHEDULED" if self._thread is not None else "STOPPED"

    @property
    def is_running(self) -> bool:
        return self.state == "SCHEDULED"

    def start(self) -> None:
        with self._state_lock:
            if self._thread is not None:
                self._stop_locked()
                logger.info("Stopped existing daily session generation job")

            stop_event = threading.Event()
            thread = threading.Thread(
                target=self._loop,
                args=(stop_event,),
                name="session-window-scheduler",
                daemon=True,
            )
            self._stop_event = stop_event
            self._thread = thread
            thread.start()

        logger.info(
            "Daily session generation job scheduled (runs at %s %s)",
            self.run_at.strftime("%H:%M"),
            self.tz.key,
        )

    def stop(self) -> None:
        with self._state_lock:
            if self._thread is None:
                return
            self._stop_locked()
        logger.info("Daily session generation job stopped")

    def join(self, timeout: float | None = None) -> None:
        """Block until the timer thread exits (or timeout)."""
        thread = self._thread
        if thread is not None:
            thread.join(timeout)

    def _stop_locked(self) -> None:
        assert self._stop_event is not None and self._thread is not None
        self._stop_event.set()
        if self._thread is not threading.current_thread():
            # a run in flight finishes before the thread exits
            self._thread.join()
        self._thread = None
        self._stop_event = None

    # ------------------------------------------------------------------
    # Runs
    # ------------------------------------------------------------------

    def trigger(self) -> MaintenanceRun:
        """Synchronous on-demand run. Errors propagate to the caller."""
        logger.info("Manually triggering session window maintenance")
        with self._run_lock:
            return self._job()

    def seconds_until_next_fire(self) -> float:
        now = self._clock()
        fire_at = next_fire_after(now, self.run_at, self.tz)
        # elapsed seconds, so a DST change in between is accounted for
        delta = fire_at.astimezone(timezone.utc) - now.astimezone(timezone.utc)
        return max(delta.total_seconds(), 0.0)

    def _loop(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.seconds_until_next_fire()):
            self._fire()

    def _fire(self) -> MaintenanceRun | None:
        """One timer fire. A failed run is logged and the schedule stays up."""
        logger.info("Starting scheduled daily session generation job")
        try:
            with self._run_lock:
                result = self._job()
        except Exception:
            logger.exception("Daily session generation job failed")
            return None

        if self._on_result is not None:
            try:
                self._on_result(result)
            except Exception:
                logger.exception("Maintenance result callback failed")
        return result
