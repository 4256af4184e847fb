# src/admin_ops.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Callable

from config import Settings
from db import get_con, init_db
from maintenance import Connect, get_maintenance_stats, maintain_session_window
from models import MaintenanceRun, MaintenanceStats, PreviewEntry
from preview_service import preview_assignments
from scheduler import Scheduler


@dataclass
class AdminOps:
    """The operations the admin surfaces (CLI, Slack) expose."""

    settings: Settings
    connect: Connect
    scheduler: Scheduler

    @staticmethod
    def new(
        settings: Settings,
        connect: Connect | None = None,
        on_result: Callable[[MaintenanceRun], None] | None = None,
    ) -> "AdminOps":
        if connect is None:

            def connect():
                return get_con(settings.db_path)

        con = connect()
        try:
            init_db(con)
        finally:
            con.close()

        def job() -> MaintenanceRun:
            return maintain_session_window(
                connect,
                tz=settings.tz,
                window_weeks=settings.window_weeks,
                max_workers=settings.max_workers,
            )

        scheduler = Scheduler(job, run_at=settings.run_at, tz=settings.tz, on_result=on_result)
        return AdminOps(settings=settings, connect=connect, scheduler=scheduler)

    def trigger_maintenance(self) -> MaintenanceRun:
        return self.scheduler.trigger()

    def get_maintenance_stats(self) -> MaintenanceStats:
        con = self.connect()
        try:
            return get_maintenance_stats(
                con, tz=self.settings.tz, window_weeks=self.settings.window_weeks
            )
        finally:
            con.close()

    def preview_assignments(
        self,
        class_id: str,
        slot_id: str,
        weeks_ahead: int = 4,
        today: date | None = None,
    ) -> list[PreviewEntry]:
        con = self.connect()
        try:
            return preview_assignments(
                con, class_id, slot_id, weeks_ahead, today=today, tz=self.settings.tz
            )
        finally:
            con.close()
