from __future__ import annotations

"""
OpenAI Assistants adapter for the remote execution service contract.

Sessions map to Assistants threads; runs map to thread runs.
"""

import logging
from typing import Any, Sequence

from ..config import GatewayConfig
from ..errors import RemoteConfigurationError, RemoteServiceError
from .types import RemoteRun, ToolCallRequest, ToolOutput, get_field

logger = logging.getLogger(__name__)


def _to_remote_run(run: Any) -> RemoteRun:
    required = get_field(run, "required_action")
    action_type = get_field(required, "type") if required is not None else None

    calls: list[ToolCallRequest] = []
    submit = get_field(required, "submit_tool_outputs") if required is not None else None
    tool_calls = get_field(submit, "tool_calls") if submit is not None else None
    for call in tool_calls or []:
        function = get_field(call, "function")
        calls.append(
            ToolCallRequest(
                call_id=str(get_field(call, "id") or ""),
                function_name=str(get_field(function, "name") or ""),
                raw_arguments=get_field(function, "arguments") or "",
            )
        )

    return RemoteRun(
        id=str(get_field(run, "id") or ""),
        status=str(get_field(run, "status") or ""),
        required_action_type=action_type,
        tool_calls=tuple(calls),
    )


class OpenAIAssistantsService:
    """Concrete service using `openai.AsyncOpenAI().beta` threads and runs."""

    def __init__(self, config: GatewayConfig, *, client: Any | None = None) -> None:
        self.config = config
        self._client = client

    def _build_client(self) -> Any:
        """Construct AsyncOpenAI client from shared config."""
        if self._client is not None:
            return self._client
        try:
            from openai import AsyncOpenAI
        except Exception as e:  # pragma: no cover - environment dependent
            raise RemoteConfigurationError(
                "openai package is not installed. Install it with: pip install openai"
            ) from e

        if not self.config.openai_api_key:
            raise RemoteConfigurationError(
                "No OpenAI API key configured (RUNRELAY_OPENAI_API_KEY or OPENAI_API_KEY)"
            )

        kwargs: dict[str, Any] = {
            "api_key": self.config.openai_api_key,
            "timeout": self.config.request_timeout_s,
        }
        if self.config.openai_base_url:
            kwargs["base_url"] = self.config.openai_base_url

        self._client = AsyncOpenAI(**kwargs)
        return self._client

    async def _call(self, what: str, coro_fn: Any, *args: Any, **kwargs: Any) -> Any:
        try:
            return await coro_fn(*args, **kwargs)
        except RemoteServiceError:
            raise
        except Exception as e:
            raise RemoteServiceError(f"OpenAI {what} failed: {e}") from e

    async def retrieve_run(self, session_id: str, run_id: str) -> RemoteRun:
        client = self._build_client()
        run = await self._call(
            "run retrieval", client.beta.threads.runs.retrieve, run_id, thread_id=session_id
        )
        return _to_remote_run(run)

    async def list_messages(self, session_id: str) -> Sequence[Any]:
        client = self._build_client()
        page = await self._call(
            "message listing", client.beta.threads.messages.list, session_id, order="desc"
        )
        data = get_field(page, "data")
        return list(data) if data is not None else []

    async def submit_tool_outputs(
        self, session_id: str, run_id: str, outputs: Sequence[ToolOutput]
    ) -> None:
        client = self._build_client()
        await self._call(
            "tool output submission",
            client.beta.threads.runs.submit_tool_outputs,
            run_id,
            thread_id=session_id,
            tool_outputs=[{"tool_call_id": o.call_id, "output": o.output} for o in outputs],
        )

    async def create_session(self) -> str:
        client = self._build_client()
        thread = await self._call("thread creation", client.beta.threads.create)
        thread_id = get_field(thread, "id")
        if not thread_id:
            raise RemoteServiceError("OpenAI did not return a thread id")
        return str(thread_id)

    async def add_user_message(self, session_id: str, text: str) -> str:
        client = self._build_client()
        message = await self._call(
            "message creation",
            client.beta.threads.messages.create,
            session_id,
            role="user",
            content=text,
        )
        message_id = get_field(message, "id")
        if not message_id:
            raise RemoteServiceError("OpenAI did not return a message id")
        return str(message_id)

    async def create_run(self, session_id: str, assistant_id: str) -> str:
        client = self._build_client()
        run = await self._call(
            "run creation", client.beta.threads.runs.create, session_id, assistant_id=assistant_id
        )
        run_id = get_field(run, "id")
        if not run_id:
            raise RemoteServiceError("OpenAI did not return a run id")
        return str(run_id)

    async def update_assistant_tools(
        self, assistant_id: str, descriptors: Sequence[dict[str, Any]]
    ) -> None:
        client = self._build_client()
        await self._call(
            "assistant update", client.beta.assistants.update, assistant_id, tools=list(descriptors)
        )
        logger.info("Advertised %d tool(s) to assistant %s", len(descriptors), assistant_id)
