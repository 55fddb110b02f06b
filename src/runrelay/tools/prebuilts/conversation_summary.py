from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

Conversation-summary tool: forwards the user's contact details and a summary of
the conversation to a webhook so a human can follow up.
"""

import logging
from urllib.parse import unquote

import httpx
from pydantic import BaseModel, ConfigDict, Field

from ..base import Tool
from ..decorator import tool
from ..registry import ToolSource

logger = logging.getLogger(__name__)

TOOL_NAME = "conversation_summary_request"

SUCCESS_MESSAGE = (
    "The conversation summary was sent successfully. We will contact you soon."
)


REQUIRED_FIELDS = ["name", "email", "phone_number", "conversation_summary"]


class ConversationSummaryArgs(BaseModel):
    # advertised as required; missing fields still validate as ""
    model_config = ConfigDict(json_schema_extra={"required": REQUIRED_FIELDS})

    name: str = Field("", description="The user's full name.")
    email: str = Field("", description="A valid email address for the user.")
    phone_number: str = Field(
        "", description="A valid phone number in international format."
    )
    conversation_summary: str = Field(
        "", description="A short summary of the points discussed in the conversation."
    )


def _unquote_twice(value: str) -> str:
    # the assistant sometimes sends values that were percent-encoded twice
    return unquote(unquote(value))


def build_conversation_summary_payload(args: ConversationSummaryArgs) -> dict[str, str]:
    return {
        "name": _unquote_twice(args.name),
        "email": _unquote_twice(args.email),
        "phone_number": args.phone_number,
        "conversation_summary": _unquote_twice(args.conversation_summary),
    }


def build_conversation_summary_tool(
    webhook_url: str,
    *,
    timeout_s: float = 10.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Tool[ConversationSummaryArgs, str]:
    """
    Create the webhook tool bound to `webhook_url`.

    The handler always answers with a sentence for the assistant to relay; HTTP
    and network failures are reported in that sentence instead of raised.
    """

    @tool(
        args_model=ConversationSummaryArgs,
        name=TOOL_NAME,
        description=(
            "Collects the user's name, email, phone number and a summary of the "
            "conversation, then sends the data to a webhook for processing."
        ),
    )
    async def conversation_summary_request(args: ConversationSummaryArgs) -> str:
        payload = build_conversation_summary_payload(args)
        try:
            async with httpx.AsyncClient(timeout=timeout_s, transport=transport) as client:
                response = await client.post(webhook_url, json=payload)
        except httpx.HTTPError as e:
            logger.exception("Conversation summary webhook request failed")
            return f"Error connecting to the webhook: {e}"

        if response.status_code == 200:
            logger.info("Conversation summary delivered for %s", payload["email"] or "<no email>")
            return SUCCESS_MESSAGE
        logger.warning("Conversation summary webhook answered HTTP %s", response.status_code)
        return f"Error sending the conversation summary: {response.text}"

    return conversation_summary_request


def build_conversation_summary_source(
    webhook_url: str,
    *,
    timeout_s: float = 10.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ToolSource:
    return ToolSource.from_tools(
        "conversation_summary",
        build_conversation_summary_tool(webhook_url, timeout_s=timeout_s, transport=transport),
    )
