from __future__ import annotations

import re


def match_reason(code: str) -> str:
    # Direct matches
    if code == "not_authorised":
        return "Only admins can run this command."
    if code == "unassigned":
        return "No tutor is assigned by the rule."

    # Patterned codes ("code: detail")
    m = re.match(r"class_not_found: (.+)", code)
    if m:
        return f"Class `{m.group(1)}` doesn’t exist."

    m = re.match(r"time_slot_not_in_class: (.+)", code)
    if m:
        return f"Time slot `{m.group(1)}` doesn’t belong to this class."

    m = re.match(r"class_inactive: (.+)", code)
    if m:
        return f"Class `{m.group(1)}` is inactive, so no sessions are generated for it."

    m = re.match(r"time_slot_inactive: (.+)", code)
    if m:
        return f"Time slot `{m.group(1)}` is deactivated, so no sessions are generated for it."

    m = re.match(r"invalid_weeks_ahead: (.+)", code)
    if m:
        return f"Weeks ahead must be at least 1 (got {m.group(1)})."

    m = re.match(r"unknown_recurrence_pattern: (.+?) \(slot=(.+)\)", code)
    if m:
        return (
            f"Time slot `{m.group(2)}` has an unknown recurrence pattern {m.group(1)}. "
            "The rule data and the scheduler are out of sync."
        )

    m = re.match(r"invalid_time\((.*)\)", code)
    if m:
        return f"A time slot has an invalid time `{m.group(1)}` (expected HH:MM)."

    m = re.match(r"invalid_time_range\((.+)\)", code)
    if m:
        return f"A time slot ends before it starts ({m.group(1)})."

    m = re.match(r"invalid_day\((.*)\)", code)
    if m:
        return f"Invalid day of week `{m.group(1)}`."

    m = re.match(r"session_date_day_mismatch: expected (\w+), got (\w+)", code)
    if m:
        return f"Date falls on {m.group(2)} but the time slot runs on {m.group(1)}."

    # Fallback
    return code
