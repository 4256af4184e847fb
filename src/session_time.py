# src/session_time.py
from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from models import TimeSlot, Weekday

SYDNEY_TZ = ZoneInfo("Australia/Sydney")

DAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def day_from_name(name: str) -> Weekday:
    try:
        return DAY_NAMES.index(name.strip()[:3].title())
    except ValueError:
        raise ValueError(f"invalid_day({name})") from None


def day_name(day_of_week: Weekday) -> str:
    return DAY_NAMES[day_of_week]


# Calendar convention used by JS-style clients: 0 = Sunday ... 6 = Saturday
def from_sunday_zero(day: int) -> Weekday:
    if not 0 <= day <= 6:
        raise ValueError(f"invalid_day({day})")
    return (day - 1) % 7


def to_sunday_zero(day_of_week: Weekday) -> int:
    return (day_of_week + 1) % 7


def parse_hhmm(s: str) -> time:
    try:
        hh, mm = str(s).strip().split(":")
        return time(int(hh), int(mm))
    except ValueError:
        raise ValueError(f"invalid_time({s})") from None


def week_start(d: date) -> date:
    """Monday of the week containing d."""
    return d - timedelta(days=d.weekday())


def rolling_window(today: date, weeks: int = 4) -> tuple[date, date]:
    """
    Monday of the current week through the Sunday closing the last week.
    weeks=4 -> (Mon, Mon + 27 days), both inclusive.
    """
    if weeks < 1:
        raise ValueError(f"invalid_window_weeks({weeks})")
    start = week_start(today)
    return start, start + timedelta(days=7 * weeks - 1)


def dates_for_weekday(day_of_week: Weekday, start: date, end: date) -> list[date]:
    """Every date in [start, end] falling on day_of_week, ascending."""
    first = start + timedelta(days=(day_of_week - start.weekday()) % 7)
    out: list[date] = []
    d = first
    while d <= end:
        out.append(d)
        d += timedelta(days=7)
    return out


def week_number(reference: date, d: date) -> int:
    """1-based week offset of d from the week containing reference."""
    return (week_start(d) - week_start(reference)).days // 7 + 1


def materialize_slot_times(
    slot: TimeSlot, session_date: date, tz: ZoneInfo = SYDNEY_TZ
) -> tuple[datetime, datetime]:
    """
    Apply a weekly template onto a specific local date.
    Returns (start_at, end_at) in UTC.
    """
    if session_date.weekday() != slot.day_of_week:
        raise ValueError(
            f"session_date_day_mismatch: expected {day_name(slot.day_of_week)}, "
            f"got {session_date:%a}"
        )

    start_t = parse_hhmm(slot.start_time)
    end_t = parse_hhmm(slot.end_time)
    if end_t <= start_t:
        raise ValueError(f"invalid_time_range({slot.start_time}-{slot.end_time})")

    start_local = datetime.combine(session_date, start_t, tzinfo=tz)
    end_local = datetime.combine(session_date, end_t, tzinfo=tz)

    return start_local.astimezone(timezone.utc), end_local.astimezone(timezone.utc)
