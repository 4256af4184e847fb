from __future__ import annotations

from zoneinfo import ZoneInfo

from session_time import SYDNEY_TZ


def fmt_local_range(start_utc, end_utc, tz: ZoneInfo = SYDNEY_TZ) -> str:
    s = start_utc.astimezone(tz)
    e = end_utc.astimezone(tz)

    # Same day: "Mon 19 Oct 14:00–16:00"
    if s.date() == e.date():
        return f"{s:%a %d %b %H:%M}–{e:%H:%M}"
    # crosses midnight
    return f"{s:%a %d %b %H:%M}–{e:%a %d %b %H:%M}"


def fmt_day(d) -> str:
    return f"{d:%a %d %b %Y}"
