from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Literal

SessionStatus = Literal["PENDING", "CONFIRMED", "COMPLETED", "CANCELLED"]
RecurrencePattern = Literal["ROUND_ROBIN", "WEEKLY", "CONSECUTIVE_DAYS", "MANUAL"]

RECURRENCE_PATTERNS: tuple[str, ...] = (
    "ROUND_ROBIN",
    "WEEKLY",
    "CONSECUTIVE_DAYS",
    "MANUAL",
)

# 0 = Monday ... 6 = Sunday (date.weekday())
Weekday = int


@dataclass(frozen=True)
class Tutor:
    tutor_id: str
    full_name: str


@dataclass(frozen=True)
class TimeSlot:
    slot_id: str
    class_id: str
    day_of_week: Weekday
    start_time: str  # "HH:MM" local wall clock
    end_time: str
    subject: str
    is_active: bool = True


@dataclass(frozen=True)
class TutoringClass:
    class_id: str
    name: str
    is_active: bool
    time_slots: tuple[TimeSlot, ...] = ()


@dataclass
class SessionOccurrence:
    session_id: str | None
    class_id: str
    time_slot_id: str
    session_date: date
    start_at: datetime  # UTC
    end_at: datetime  # UTC
    status: SessionStatus = "PENDING"
    tutor_id: str | None = None
    cancellation_reason: str | None = None


@dataclass(frozen=True)
class AssignmentRule:
    time_slot_id: str
    pattern: str
    config: dict[str, Any] = field(default_factory=dict)
    start_date: date | None = None
    end_date: date | None = None
    created_on: date | None = None

    @property
    def reference_date(self) -> date | None:
        return self.start_date or self.created_on


@dataclass(frozen=True)
class ClassError:
    class_id: str
    error: str


@dataclass
class MaintenanceRun:
    window_start: date
    window_end: date
    classes_processed: int = 0
    sessions_generated: int = 0
    errors: list[ClassError] = field(default_factory=list)
    duration_ms: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "window_start": self.window_start.isoformat(),
            "window_end": self.window_end.isoformat(),
            "classes_processed": self.classes_processed,
            "sessions_generated": self.sessions_generated,
            "errors": [{"class_id": e.class_id, "error": e.error} for e in self.errors],
            "duration_ms": self.duration_ms,
        }


@dataclass(frozen=True)
class MaintenanceStats:
    active_classes: int
    classes_with_time_slots: int
    upcoming_sessions: int


@dataclass(frozen=True)
class PreviewEntry:
    session_date: date
    week_start: date
    tutor_id: str | None
    tutor_name: str | None
    materialized: bool
    current_tutor_id: str | None = None
