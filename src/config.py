# src/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import time
from pathlib import Path
from typing import Mapping
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

from session_time import parse_hhmm


@dataclass(frozen=True)
class Settings:
    # Storage
    db_path: Path = Path("state.db")
    assets_dir: Path = Path("assets")

    # Window + schedule
    timezone: str = "Australia/Sydney"
    window_weeks: int = 4
    run_at: time = time(2, 0)
    max_workers: int = 1

    log_level: str = "INFO"

    # Slack admin surface
    slack_bot_token: str = ""
    slack_app_token: str = ""
    admin_slack_ids: frozenset[str] = field(default_factory=frozenset)
    admin_channel_id: str = ""

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


def _split_ids(raw: str) -> frozenset[str]:
    return frozenset(x.strip() for x in raw.split(",") if x.strip())


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Read settings from the environment (and .env when env is not given)."""
    if env is None:
        load_dotenv()
        env = os.environ

    settings = Settings(
        db_path=Path(env.get("SESSIONS_DB_PATH", "state.db")),
        assets_dir=Path(env.get("SESSIONS_ASSETS_DIR", "assets")),
        timezone=env.get("SESSIONS_TIMEZONE", "Australia/Sydney").strip(),
        window_weeks=int(env.get("SESSIONS_WINDOW_WEEKS", "4")),
        run_at=parse_hhmm(env.get("SESSIONS_RUN_AT", "02:00")),
        max_workers=int(env.get("SESSIONS_MAX_WORKERS", "1")),
        log_level=env.get("LOG_LEVEL", "INFO").strip().upper(),
        slack_bot_token=env.get("SLACK_BOT_TOKEN", "").strip(),
        slack_app_token=env.get("SLACK_APP_TOKEN", "").strip(),
        admin_slack_ids=_split_ids(env.get("ADMIN_SLACK_IDS", "")),
        admin_channel_id=env.get("ADMIN_CHANNEL_ID", "").strip(),
    )

    if settings.window_weeks < 1:
        raise ValueError(f"SESSIONS_WINDOW_WEEKS must be >= 1, got {settings.window_weeks}")
    if settings.max_workers < 1:
        raise ValueError(f"SESSIONS_MAX_WORKERS must be >= 1, got {settings.max_workers}")
    # fail at startup on an unknown zone
    settings.tz
    return settings
