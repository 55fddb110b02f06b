from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

Run orchestration engine.

`RunPoller.advance_run` drives one remote run to a terminal outcome:

    polling --completed------------------> completed
    polling --requires_action-----------> awaiting_tool_outputs --(outputs submitted)--> polling
    polling --failed/cancelled/expired--> failed
    any non-terminal --deadline---------> timeout

The deadline is checked at the top of every iteration, before the remote
status is queried. Between iterations the poller sleeps a fixed interval
through an injected clock, so tests can run the whole loop in virtual time.
Tool calls in one batch run one at a time, in the order the service reported
them, and each output is submitted before the next handler starts.
"""

import asyncio
import json
import logging
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Literal, Optional, Protocol, Sequence

from pydantic_core import PydanticSerializationError, to_jsonable_python

from .errors import InvalidRunTransitionError, MalformedMessageError, MissingIdentifierError, RemoteServiceError
from .remote.types import (
    ACTION_SUBMIT_TOOL_OUTPUTS,
    STATUS_CANCELLED,
    STATUS_COMPLETED,
    STATUS_EXPIRED,
    STATUS_FAILED,
    STATUS_REQUIRES_ACTION,
    RemoteExecutionService,
    ToolCallRequest,
    ToolOutput,
    extract_latest_text,
)
from .sanitize import sanitize
from .tools.base import Tool

logger = logging.getLogger(__name__)

POLL_INTERVAL_S = 2.0
RUN_DEADLINE_S = 8.0

FAILED_MARKER = "error"
TIMEOUT_MARKER = "timeout"

_REMOTE_FAILURE_STATUSES = frozenset({STATUS_FAILED, STATUS_CANCELLED, STATUS_EXPIRED})


class RunState(str, Enum):
    POLLING = "polling"
    AWAITING_TOOL_OUTPUTS = "awaiting_tool_outputs"
    COMPLETED = "completed"
    FAILED = "failed"
    TIMEOUT = "timeout"

    @property
    def terminal(self) -> bool:
        return self in (RunState.COMPLETED, RunState.FAILED, RunState.TIMEOUT)


_TRANSITIONS: Dict[RunState, frozenset[RunState]] = {
    RunState.POLLING: frozenset(
        {RunState.AWAITING_TOOL_OUTPUTS, RunState.COMPLETED, RunState.FAILED, RunState.TIMEOUT}
    ),
    RunState.AWAITING_TOOL_OUTPUTS: frozenset(
        {RunState.POLLING, RunState.FAILED, RunState.TIMEOUT}
    ),
    RunState.COMPLETED: frozenset(),
    RunState.FAILED: frozenset(),
    RunState.TIMEOUT: frozenset(),
}


class Clock(Protocol):
    def now(self) -> float:
        ...

    async def sleep(self, seconds: float) -> None:
        ...


class MonotonicClock:
    """Wall-clock implementation backed by `time.monotonic` and `asyncio.sleep`."""

    def now(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


class ToolResolver(Protocol):
    def resolve(self, name: str) -> Optional[Tool[Any, Any]]:
        ...


@dataclass(frozen=True, slots=True)
class Run:
    """
    One in-flight remote run as seen by the poller.

    Immutable; `transition` returns the next value and refuses moves the state
    machine does not allow, so a status never regresses.
    """

    session_id: str
    run_id: str
    status: RunState
    started_at: float
    deadline: float

    def transition(self, to: RunState) -> "Run":
        if to not in _TRANSITIONS[self.status]:
            raise InvalidRunTransitionError(
                f"Run {self.run_id} cannot move from {self.status.value} to {to.value}"
            )
        return replace(self, status=to)

    def expired(self, now: float) -> bool:
        return now >= self.deadline


OutcomeStatus = Literal["completed", "failed", "timeout"]


@dataclass(frozen=True, slots=True)
class RunOutcome:
    """Terminal result handed back to the caller of `advance_run`."""

    status: OutcomeStatus
    response: str
    run_id: str
    tool_outputs_submitted: int = 0

    def to_dict(self) -> Dict[str, str]:
        return {"response": self.response, "status": self.status}


def decode_arguments(raw_arguments: Any) -> Dict[str, Any]:
    """
    Parse a tool call's serialized arguments.

    Undecodable or non-object payloads degrade to an empty argument set.
    """
    if isinstance(raw_arguments, dict):
        return dict(raw_arguments)
    if not raw_arguments:
        return {}
    try:
        decoded = json.loads(raw_arguments)
    except (TypeError, ValueError) as e:
        logger.error("JSON decoding failed: %s. Input: %r", e, raw_arguments)
        return {}
    if not isinstance(decoded, dict):
        logger.error("Tool arguments are not a JSON object: %r", raw_arguments)
        return {}
    return decoded


def encode_output(output: Any) -> str:
    """
    Serialize a handler result for submission.

    Pydantic models and other rich values go through pydantic's JSON-compatible
    conversion; types it does not know fall back to `str`. Raises `ValueError`
    or `TypeError` when the result cannot be represented as JSON.
    """
    return json.dumps(to_jsonable_python(output, fallback=str), ensure_ascii=False)


class RunPoller:
    """
    Polls a remote run until it completes, fails or runs out of time.

    The service and clock are injected; the tool registry is passed per call.
    Holds no per-run state between calls.
    """

    def __init__(
        self,
        service: RemoteExecutionService,
        *,
        clock: Clock | None = None,
        poll_interval_s: float = POLL_INTERVAL_S,
        deadline_s: float = RUN_DEADLINE_S,
    ) -> None:
        self._service = service
        self._clock: Clock = clock or MonotonicClock()
        self._poll_interval_s = poll_interval_s
        self._deadline_s = deadline_s

    async def advance_run(
        self,
        session_id: str,
        run_id: str,
        registry: ToolResolver,
    ) -> RunOutcome:
        if not session_id or not run_id:
            logger.error("Missing session_id or run_id (session_id=%r, run_id=%r)", session_id, run_id)
            raise MissingIdentifierError("Both session_id and run_id are required")

        started = self._clock.now()
        run = Run(
            session_id=session_id,
            run_id=run_id,
            status=RunState.POLLING,
            started_at=started,
            deadline=started + self._deadline_s,
        )
        submitted = 0
        logger.info("Checking run %s for session %s", run_id, session_id)

        while True:
            if run.expired(self._clock.now()):
                run = run.transition(RunState.TIMEOUT)
                logger.warning("Run %s timed out after %.1fs", run_id, self._deadline_s)
                return RunOutcome(run.status.value, TIMEOUT_MARKER, run_id, submitted)

            try:
                remote = await self._service.retrieve_run(session_id, run_id)
            except RemoteServiceError:
                logger.exception("Could not retrieve run %s", run_id)
                return self._fail(run, submitted)

            logger.debug("Run %s remote status: %s", run_id, remote.status)

            if remote.status == STATUS_COMPLETED:
                return await self._complete(run, submitted)

            if remote.status in _REMOTE_FAILURE_STATUSES:
                logger.error("Run %s ended with remote status %s", run_id, remote.status)
                return self._fail(run, submitted)

            if (
                remote.status == STATUS_REQUIRES_ACTION
                and remote.required_action_type == ACTION_SUBMIT_TOOL_OUTPUTS
            ):
                run = run.transition(RunState.AWAITING_TOOL_OUTPUTS)
                logger.info("Run %s requires action: %d tool call(s)", run_id, len(remote.tool_calls))
                try:
                    submitted += await self._dispatch(run, remote.tool_calls, registry)
                except RemoteServiceError:
                    logger.exception("Could not submit tool outputs for run %s", run_id)
                    return self._fail(run, submitted)
                run = run.transition(RunState.POLLING)

            await self._clock.sleep(self._poll_interval_s)

    async def _dispatch(
        self,
        run: Run,
        calls: Sequence[ToolCallRequest],
        registry: ToolResolver,
    ) -> int:
        submitted = 0
        for call in calls:
            handler = registry.resolve(call.function_name)
            if handler is None:
                logger.warning(
                    "Function %s not found in tool registry; skipping call %s",
                    call.function_name,
                    call.call_id,
                )
                continue

            arguments = decode_arguments(call.raw_arguments)
            result = await handler.call(arguments, call_id=call.call_id)
            if not result.success:
                logger.error(
                    "Tool %s failed for call %s: %s",
                    call.function_name,
                    call.call_id,
                    result.error_message,
                )
                continue

            try:
                encoded = encode_output(result.output)
            except (PydanticSerializationError, TypeError, ValueError) as e:
                logger.error(
                    "Could not encode output of tool %s for call %s: %s",
                    call.function_name,
                    call.call_id,
                    e,
                )
                continue

            output = ToolOutput(call_id=call.call_id, output=encoded)
            await self._service.submit_tool_outputs(run.session_id, run.run_id, [output])
            submitted += 1
        return submitted

    async def _complete(self, run: Run, submitted: int) -> RunOutcome:
        try:
            messages = await self._service.list_messages(run.session_id)
            raw = extract_latest_text(messages)
        except MalformedMessageError as e:
            logger.error("Run %s completed with an unreadable message: %s", run.run_id, e)
            return self._fail(run, submitted)
        except RemoteServiceError:
            logger.exception("Could not fetch messages for run %s", run.run_id)
            return self._fail(run, submitted)

        run = run.transition(RunState.COMPLETED)
        logger.debug("Message content before cleaning: %s", raw)
        text = sanitize(raw)
        logger.debug("Message content after cleaning: %s", text)
        return RunOutcome(run.status.value, text, run.run_id, submitted)

    def _fail(self, run: Run, submitted: int) -> RunOutcome:
        run = run.transition(RunState.FAILED)
        return RunOutcome(run.status.value, FAILED_MARKER, run.run_id, submitted)


async def advance_run(
    service: RemoteExecutionService,
    session_id: str,
    run_id: str,
    registry: ToolResolver,
    *,
    clock: Clock | None = None,
) -> RunOutcome:
    """One-shot helper around `RunPoller(service, clock=clock).advance_run(...)`."""
    return await RunPoller(service, clock=clock).advance_run(session_id, run_id, registry)
