from __future__ import annotations

from datetime import date


def split_pipe(s: str) -> list[str]:
    return [x.strip() for x in str(s).split("|") if x.strip()]


def hhmm_to_min(t: str) -> int:
    hh, mm = t.split(":")
    h, m = int(hh), int(mm)
    if not (0 <= h <= 23 and 0 <= m <= 59):
        raise ValueError(f"invalid_time({t})")
    return h * 60 + m


def parse_bool(s: str, default: bool = True) -> bool:
    v = str(s).strip().lower()
    if v == "":
        return default
    if v in {"1", "true", "yes", "y"}:
        return True
    if v in {"0", "false", "no", "n"}:
        return False
    raise ValueError(f"invalid_bool({s})")


def parse_optional_date(s: str) -> date | None:
    s = str(s).strip()
    return date.fromisoformat(s) if s else None


def parse_week_map(s: str) -> dict[str, str]:
    """
    Format:
      1:T001|3:T002
    Returns:
      {"1": "T001", "3": "T002"}   (string keys, as stored in config JSON)
    """
    out: dict[str, str] = {}
    for chunk in split_pipe(s):
        week, tutor = chunk.split(":", 1)
        n = int(week.strip())
        if n < 1:
            raise ValueError(f"Invalid week number {n} (weeks start at 1)")
        out[str(n)] = tutor.strip()
    return out


def parse_alternating(s: str) -> dict[str, object] | None:
    """
    Format:
      T001:1   (tutor every other week starting at week 1)
    """
    s = str(s).strip()
    if not s:
        return None
    tutor, _, start = s.partition(":")
    return {"tutor": tutor.strip(), "start_week": int(start.strip() or "1")}
