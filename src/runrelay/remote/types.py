"""
Contract of the remote execution service the run engine drives.

The engine never talks to a provider SDK directly; it goes through
`RemoteExecutionService`, so tests and alternative backends only have to
implement these few coroutines.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, Sequence, runtime_checkable

from ..errors import MalformedMessageError

# Remote run statuses reported by the Assistants API.
STATUS_QUEUED = "queued"
STATUS_IN_PROGRESS = "in_progress"
STATUS_REQUIRES_ACTION = "requires_action"
STATUS_CANCELLING = "cancelling"
STATUS_CANCELLED = "cancelled"
STATUS_FAILED = "failed"
STATUS_COMPLETED = "completed"
STATUS_EXPIRED = "expired"

ACTION_SUBMIT_TOOL_OUTPUTS = "submit_tool_outputs"


@dataclass(frozen=True, slots=True)
class ToolCallRequest:
    """One tool call the remote run is waiting on."""

    call_id: str
    function_name: str
    raw_arguments: str = ""


@dataclass(frozen=True, slots=True)
class ToolOutput:
    call_id: str
    output: str


@dataclass(frozen=True, slots=True)
class RemoteRun:
    """Snapshot of a run as last reported by the remote service."""

    id: str
    status: str
    required_action_type: str | None = None
    tool_calls: tuple[ToolCallRequest, ...] = field(default_factory=tuple)


@runtime_checkable
class RemoteExecutionService(Protocol):
    async def retrieve_run(self, session_id: str, run_id: str) -> RemoteRun:
        ...

    async def list_messages(self, session_id: str) -> Sequence[Any]:
        """Messages of the session, most recent first."""
        ...

    async def submit_tool_outputs(
        self, session_id: str, run_id: str, outputs: Sequence[ToolOutput]
    ) -> None:
        ...

    async def create_session(self) -> str:
        ...

    async def add_user_message(self, session_id: str, text: str) -> str:
        ...

    async def create_run(self, session_id: str, assistant_id: str) -> str:
        ...

    async def update_assistant_tools(
        self, assistant_id: str, descriptors: Sequence[dict[str, Any]]
    ) -> None:
        ...


def get_field(obj: Any, name: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def extract_latest_text(messages: Sequence[Any]) -> str:
    """
    Return the text of the most recent message (`messages[0].content[0].text.value`).

    Works on SDK objects and plain dicts alike. Anything that does not have that
    shape raises MalformedMessageError.
    """
    if not messages:
        raise MalformedMessageError("Session has no messages")

    content = get_field(messages[0], "content")
    if not isinstance(content, (list, tuple)) or not content:
        raise MalformedMessageError("Latest message has no content parts")

    text = get_field(content[0], "text")
    value = get_field(text, "value") if text is not None else None
    if not isinstance(value, str):
        raise MalformedMessageError("Latest message does not start with a text part")
    return value
