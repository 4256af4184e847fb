from __future__ import annotations

from models import MaintenanceRun, MaintenanceStats, PreviewEntry
from reason_library import match_reason
from time_fmt import fmt_day


def format_maintenance_run(run: MaintenanceRun, max_errors: int = 10) -> str:
    lines: list[str] = []
    lines.append("🗓️ *Session window maintenance*")
    lines.append(f"Window: {fmt_day(run.window_start)} → {fmt_day(run.window_end)}")
    lines.append(f"• Classes processed: {run.classes_processed}")
    lines.append(f"• Sessions generated: {run.sessions_generated}")
    lines.append(f"• Duration: {run.duration_ms} ms")

    if run.errors:
        lines.append("")
        lines.append(f"⚠️ *Errors ({len(run.errors)})*")
        for e in run.errors[:max_errors]:
            lines.append(f"• `{e.class_id}` — {match_reason(e.error)}")
        if len(run.errors) > max_errors:
            lines.append(f"• … and {len(run.errors) - max_errors} more")

    return "\n".join(lines)


def format_stats(stats: MaintenanceStats) -> str:
    return "\n".join(
        [
            "📊 *Session maintenance stats*",
            f"• Active classes: {stats.active_classes}",
            f"• Classes with time slots: {stats.classes_with_time_slots}",
            f"• Upcoming sessions in window: {stats.upcoming_sessions}",
        ]
    )


def format_preview(class_id: str, slot_id: str, entries: list[PreviewEntry]) -> str:
    lines: list[str] = []
    lines.append(f"🔎 *Assignment preview* `{class_id}` / `{slot_id}`")

    if not entries:
        lines.append("• (no sessions in range)")
        return "\n".join(lines)

    for e in entries:
        who = e.tutor_name or e.tutor_id or "Unassigned"
        tag = ""
        if e.materialized:
            current = e.current_tutor_id or "unassigned"
            tag = f" (exists, currently {current})"
        lines.append(f"• {fmt_day(e.session_date)} — {who}{tag}")

    return "\n".join(lines)
