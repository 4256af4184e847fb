# src/slack_bot.py
from __future__ import annotations

import logging
from typing import Callable

from slack_bolt import App
from slack_bolt.adapter.socket_mode import SocketModeHandler

from admin_ops import AdminOps
from config import Settings, load_settings
from models import MaintenanceRun
from reason_library import match_reason
from recurrence import UnknownRecurrencePatternError
from sample_output import format_maintenance_run, format_preview, format_stats

logger = logging.getLogger(__name__)

PREVIEW_USAGE = "Usage: `/sessions-preview <class_id> <slot_id> [weeks_ahead]`"


# ----------------------------
# Small helpers
# ----------------------------
def is_admin(settings: Settings, slack_user_id: str) -> bool:
    return slack_user_id in settings.admin_slack_ids


def parse_preview_args(text: str) -> tuple[str, str, int]:
    parts = text.split()
    if len(parts) not in (2, 3):
        raise ValueError(PREVIEW_USAGE)
    weeks = 4
    if len(parts) == 3:
        try:
            weeks = int(parts[2])
        except ValueError:
            raise ValueError(PREVIEW_USAGE) from None
    return parts[0], parts[1], weeks


def alert_admins(client, channel_id: str) -> Callable[[MaintenanceRun], None]:
    """Post scheduled runs that had per-class errors to the admin channel."""

    def on_result(run: MaintenanceRun) -> None:
        if not channel_id or not run.errors:
            return
        client.chat_postMessage(
            channel=channel_id,
            text="Session window maintenance had errors",
            blocks=[
                {
                    "type": "section",
                    "text": {"type": "mrkdwn", "text": format_maintenance_run(run)},
                }
            ],
        )

    return on_result


# ----------------------------
# Commands (admin only)
# ----------------------------
def make_handlers(ops: AdminOps) -> dict[str, Callable]:
    settings = ops.settings

    def sessions_maintain(ack, command, respond):
        ack()
        if not is_admin(settings, command["user_id"]):
            respond(match_reason("not_authorised"))
            return

        logger.info("Manual session generation triggered by %s", command["user_id"])
        try:
            run = ops.trigger_maintenance()
        except UnknownRecurrencePatternError as e:
            respond(f"Maintenance aborted.\n• {match_reason(str(e))}")
            raise
        except Exception as e:
            logger.exception("Manual session maintenance failed")
            respond(f"Maintenance failed: {e}")
            return

        respond(format_maintenance_run(run))

    def sessions_stats(ack, command, respond):
        ack()
        if not is_admin(settings, command["user_id"]):
            respond(match_reason("not_authorised"))
            return

        respond(format_stats(ops.get_maintenance_stats()))

    def sessions_preview(ack, command, respond):
        ack()
        if not is_admin(settings, command["user_id"]):
            respond(match_reason("not_authorised"))
            return

        try:
            class_id, slot_id, weeks = parse_preview_args(command.get("text", ""))
            entries = ops.preview_assignments(class_id, slot_id, weeks)
        except UnknownRecurrencePatternError as e:
            respond(f"Preview aborted.\n• {match_reason(str(e))}")
            raise
        except ValueError as e:
            respond(match_reason(str(e)))
            return

        respond(format_preview(class_id, slot_id, entries))

    return {
        "/sessions-maintain": sessions_maintain,
        "/sessions-stats": sessions_stats,
        "/sessions-preview": sessions_preview,
    }


def register_handlers(app: App, ops: AdminOps) -> None:
    for name, handler in make_handlers(ops).items():
        app.command(name)(handler)


def main() -> None:
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = App(token=settings.slack_bot_token)
    ops = AdminOps.new(
        settings, on_result=alert_admins(app.client, settings.admin_channel_id)
    )
    register_handlers(app, ops)

    ops.scheduler.start()
    try:
        SocketModeHandler(app, settings.slack_app_token).start()
    finally:
        ops.scheduler.stop()


if __name__ == "__main__":
    main()
