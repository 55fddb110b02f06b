"""Current-time tool backed by the World Time API."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import BaseModel, Field

from ..base import Tool
from ..decorator import tool
from ..registry import ToolSource

logger = logging.getLogger(__name__)

TOOL_NAME = "get_current_time"
DEFAULT_TIMEZONE = "America/Lima"


class CurrentTimeArgs(BaseModel):
    timezone: str = Field(DEFAULT_TIMEZONE, description="IANA timezone, e.g. America/Lima.")


def build_current_time_tool(
    base_url: str,
    *,
    timeout_s: float = 10.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Tool[CurrentTimeArgs, dict[str, str]]:
    @tool(args_model=CurrentTimeArgs, name=TOOL_NAME)
    async def get_current_time(args: CurrentTimeArgs) -> dict[str, str]:
        """Returns the current date and time for a timezone."""
        timezone = args.timezone or DEFAULT_TIMEZONE
        try:
            async with httpx.AsyncClient(timeout=timeout_s, transport=transport) as client:
                response = await client.get(f"{base_url}{timezone}")
        except httpx.HTTPError as e:
            logger.exception("World Time API request failed for %s", timezone)
            return {"error": f"Connection error with the World Time API: {e}"}

        if response.status_code != 200:
            return {
                "error": f"Failed to get the time for timezone {timezone}: {response.reason_phrase}"
            }

        data: Any = response.json()
        current = data.get("datetime") if isinstance(data, dict) else None
        if not current:
            return {"error": f"World Time API returned no datetime for {timezone}"}
        return {"message": f"The current time in {timezone} is: {current}"}

    return get_current_time


def build_current_time_source(
    base_url: str,
    *,
    timeout_s: float = 10.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ToolSource:
    return ToolSource.from_tools(
        "current_time",
        build_current_time_tool(base_url, timeout_s=timeout_s, transport=transport),
    )
