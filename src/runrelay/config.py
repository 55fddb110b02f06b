from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

Environment-driven configuration for the gateway process.
"""

import logging
import os
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

DEFAULT_WEBHOOK_URL = "https://hook.us2.make.com/349qjcw5disoaprcutnjy0vyon0g73zg"
DEFAULT_WORLD_TIME_BASE_URL = "http://worldtimeapi.org/api/timezone/"


def _split_csv(value: str | None) -> tuple[str, ...]:
    if not value:
        return ()
    return tuple(part.strip() for part in value.split(",") if part.strip())


@dataclass(frozen=True, slots=True)
class GatewayConfig:
    # Remote execution service
    openai_api_key: str | None = None
    openai_base_url: str | None = None
    assistant_id: str | None = None
    request_timeout_s: float = 30.0

    # Tools
    webhook_url: str = DEFAULT_WEBHOOK_URL
    world_time_base_url: str = DEFAULT_WORLD_TIME_BASE_URL
    tool_sources: tuple[str, ...] = ()

    # Sessions
    session_backend: str = "sqlite"
    sqlite_path: str = "runrelay_sessions.sqlite3"

    log_level: str = "INFO"

    @staticmethod
    def from_env(*, load_dotenv_file: bool = True) -> "GatewayConfig":
        if load_dotenv_file:
            load_dotenv(find_dotenv(usecwd=True))
        return GatewayConfig(
            openai_api_key=os.getenv("RUNRELAY_OPENAI_API_KEY") or os.getenv("OPENAI_API_KEY"),
            openai_base_url=os.getenv("RUNRELAY_OPENAI_BASE_URL"),
            assistant_id=os.getenv("RUNRELAY_ASSISTANT_ID"),
            request_timeout_s=float(os.getenv("RUNRELAY_REQUEST_TIMEOUT_S", "30")),
            webhook_url=os.getenv("RUNRELAY_WEBHOOK_URL", DEFAULT_WEBHOOK_URL),
            world_time_base_url=os.getenv(
                "RUNRELAY_WORLD_TIME_BASE_URL", DEFAULT_WORLD_TIME_BASE_URL
            ),
            tool_sources=_split_csv(os.getenv("RUNRELAY_TOOL_SOURCES")),
            session_backend=os.getenv("RUNRELAY_SESSION_BACKEND", "sqlite").strip().lower(),
            sqlite_path=os.getenv("RUNRELAY_SQLITE_PATH", "runrelay_sessions.sqlite3"),
            log_level=os.getenv("RUNRELAY_LOG_LEVEL", "INFO").upper(),
        )


def configure_logging(level: str | int = "INFO") -> None:
    """Install a basic stderr handler for applications embedding the gateway."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
