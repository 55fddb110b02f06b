from __future__ import annotations

import asyncio
import logging

import pytest
from pydantic import BaseModel

from runrelay.engine import (
    POLL_INTERVAL_S,
    RUN_DEADLINE_S,
    Run,
    RunPoller,
    RunState,
    advance_run,
    decode_arguments,
    encode_output,
)
from runrelay.errors import InvalidRunTransitionError, MissingIdentifierError, RemoteServiceError
from runrelay.remote import RemoteRun, ToolCallRequest, ToolOutput
from runrelay.tools import ToolRegistry, ToolSource, tool


def run_async(coro):
    return asyncio.run(coro)


class FakeClock:
    """Virtual time: sleeping advances `now` instantly."""

    def __init__(self) -> None:
        self.t = 1000.0
        self.sleeps: list[float] = []

    def now(self) -> float:
        return self.t

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.t += seconds


def _message(text: str) -> dict:
    return {"id": "msg_1", "content": [{"type": "text", "text": {"value": text}}]}


class FakeService:
    """Replays a scripted sequence of run snapshots; the last one repeats."""

    def __init__(self, runs: list[RemoteRun], messages: list | None = None) -> None:
        self.runs = list(runs)
        self.messages = messages if messages is not None else [_message("done")]
        self.retrieved: list[tuple[str, str]] = []
        self.submitted: list[tuple[str, str, list[ToolOutput]]] = []

    async def retrieve_run(self, session_id: str, run_id: str) -> RemoteRun:
        self.retrieved.append((session_id, run_id))
        if len(self.runs) > 1:
            return self.runs.pop(0)
        return self.runs[0]

    async def list_messages(self, session_id: str):
        return self.messages

    async def submit_tool_outputs(self, session_id, run_id, outputs):
        self.submitted.append((session_id, run_id, list(outputs)))


def _requires_action(*calls: ToolCallRequest) -> RemoteRun:
    return RemoteRun(
        id="run_1",
        status="requires_action",
        required_action_type="submit_tool_outputs",
        tool_calls=tuple(calls),
    )


COMPLETED = RemoteRun(id="run_1", status="completed")
IN_PROGRESS = RemoteRun(id="run_1", status="in_progress")


class LookupArgs(BaseModel):
    city: str = "Lima"


seen_args: list[LookupArgs] = []


@tool(args_model=LookupArgs, name="lookup_weather")
def lookup_weather(args: LookupArgs) -> dict:
    seen_args.append(args)
    return {"city": args.city, "forecast": "sunny"}


@tool(name="explode")
def explode(arguments: dict) -> str:
    raise RuntimeError("boom")


@tool(name="city_card")
def city_card(arguments: dict) -> LookupArgs:
    return LookupArgs(city="Arequipa")


@tool(name="tangled")
def tangled(arguments: dict) -> dict:
    loop: dict = {"name": "loop"}
    loop["self"] = loop
    return loop


def _registry() -> ToolRegistry:
    return ToolRegistry.discover(
        [ToolSource.from_tools("weather", lookup_weather, explode, city_card, tangled)]
    )



def test_requires_action_then_completed_submits_one_output():
    seen_args.clear()
    service = FakeService(
        [
            _requires_action(ToolCallRequest("call_1", "lookup_weather", '{"city": "Cusco"}')),
            COMPLETED,
        ],
        messages=[_message("## Forecast\n**Sunny** in Cusco【1:0†weather】"), _message("older")],
    )
    clock = FakeClock()

    outcome = run_async(RunPoller(service, clock=clock).advance_run("thread_1", "run_1", _registry()))

    assert outcome.status == "completed"
    assert outcome.response == "Forecast Sunny in Cusco"
    assert outcome.tool_outputs_submitted == 1
    assert outcome.to_dict() == {"response": "Forecast Sunny in Cusco", "status": "completed"}

    assert len(service.submitted) == 1
    session_id, run_id, outputs = service.submitted[0]
    assert (session_id, run_id) == ("thread_1", "run_1")
    assert outputs == [ToolOutput(call_id="call_1", output='{"city": "Cusco", "forecast": "sunny"}')]
    assert seen_args[-1].city == "Cusco"
    assert clock.sleeps == [POLL_INTERVAL_S]


def test_outputs_are_submitted_one_at_a_time_in_reported_order():
    service = FakeService(
        [
            _requires_action(
                ToolCallRequest("c1", "lookup_weather", '{"city": "A"}'),
                ToolCallRequest("c2", "lookup_weather", '{"city": "B"}'),
            ),
            COMPLETED,
        ]
    )

    outcome = run_async(advance_run(service, "t", "r", _registry(), clock=FakeClock()))

    assert outcome.status == "completed"
    assert [batch[2][0].call_id for batch in service.submitted] == ["c1", "c2"]
    assert all(len(batch[2]) == 1 for batch in service.submitted)


def test_always_in_progress_times_out_at_deadline_and_not_before():
    service = FakeService([IN_PROGRESS])
    clock = FakeClock()
    start = clock.t

    outcome = run_async(RunPoller(service, clock=clock).advance_run("t", "r", _registry()))

    assert outcome.status == "timeout"
    assert outcome.response == "timeout"
    elapsed = clock.t - start
    assert RUN_DEADLINE_S <= elapsed <= RUN_DEADLINE_S + POLL_INTERVAL_S
    # polls at t=0, 2, 4, 6; the check at t=8 stops before a fifth query
    assert len(service.retrieved) == 4
    assert clock.sleeps == [POLL_INTERVAL_S] * 4


def test_unregistered_function_is_skipped_and_run_still_completes(caplog):
    service = FakeService(
        [_requires_action(ToolCallRequest("c1", "not_registered", "{}")), COMPLETED]
    )

    with caplog.at_level(logging.WARNING, logger="runrelay.engine"):
        outcome = run_async(RunPoller(service, clock=FakeClock()).advance_run("t", "r", _registry()))

    assert outcome.status == "completed"
    assert service.submitted == []
    assert "not_registered" in caplog.text


def test_handler_error_skips_output_and_keeps_going():
    service = FakeService(
        [
            _requires_action(
                ToolCallRequest("c1", "explode", "{}"),
                ToolCallRequest("c2", "lookup_weather", "{}"),
            ),
            COMPLETED,
        ]
    )

    outcome = run_async(RunPoller(service, clock=FakeClock()).advance_run("t", "r", _registry()))

    assert outcome.status == "completed"
    assert outcome.tool_outputs_submitted == 1
    assert [batch[2][0].call_id for batch in service.submitted] == ["c2"]


def test_pydantic_results_are_submitted_as_json_objects():
    service = FakeService([_requires_action(ToolCallRequest("c1", "city_card", "{}")), COMPLETED])

    outcome = run_async(RunPoller(service, clock=FakeClock()).advance_run("t", "r", _registry()))

    assert outcome.status == "completed"
    assert service.submitted[0][2] == [ToolOutput("c1", '{"city": "Arequipa"}')]


def test_unencodable_result_is_skipped_like_a_handler_error():
    service = FakeService(
        [
            _requires_action(
                ToolCallRequest("c1", "tangled", "{}"),
                ToolCallRequest("c2", "lookup_weather", "{}"),
            ),
            COMPLETED,
        ]
    )

    outcome = run_async(RunPoller(service, clock=FakeClock()).advance_run("t", "r", _registry()))

    assert outcome.status == "completed"
    assert outcome.tool_outputs_submitted == 1
    assert [batch[2][0].call_id for batch in service.submitted] == ["c2"]



def test_undecodable_arguments_invoke_handler_with_empty_args():
    seen_args.clear()
    service = FakeService(
        [_requires_action(ToolCallRequest("c1", "lookup_weather", "{not json")), COMPLETED]
    )

    outcome = run_async(RunPoller(service, clock=FakeClock()).advance_run("t", "r", _registry()))

    assert outcome.status == "completed"
    assert seen_args[-1].city == "Lima"
    assert len(service.submitted) == 1


def test_failed_run_returns_failed_marker():
    service = FakeService([IN_PROGRESS, RemoteRun(id="r", status="failed")])

    outcome = run_async(RunPoller(service, clock=FakeClock()).advance_run("t", "r", _registry()))

    assert outcome.status == "failed"
    assert outcome.response == "error"


@pytest.mark.parametrize("status", ["cancelled", "expired"])
def test_other_terminal_remote_statuses_map_to_failed(status):
    service = FakeService([RemoteRun(id="r", status=status)])
    outcome = run_async(RunPoller(service, clock=FakeClock()).advance_run("t", "r", _registry()))
    assert outcome.status == "failed"


def test_malformed_completed_message_degrades_to_failed():
    service = FakeService([COMPLETED], messages=[{"content": [{"type": "image_file"}]}])
    outcome = run_async(RunPoller(service, clock=FakeClock()).advance_run("t", "r", _registry()))
    assert outcome.status == "failed"

    empty = FakeService([COMPLETED], messages=[])
    outcome = run_async(RunPoller(empty, clock=FakeClock()).advance_run("t", "r", _registry()))
    assert outcome.status == "failed"


def test_remote_error_while_polling_degrades_to_failed():
    class BrokenService(FakeService):
        async def retrieve_run(self, session_id, run_id):
            raise RemoteServiceError("503")

    outcome = run_async(
        RunPoller(BrokenService([COMPLETED]), clock=FakeClock()).advance_run("t", "r", _registry())
    )
    assert outcome.status == "failed"


def test_unknown_action_type_keeps_polling():
    odd = RemoteRun(id="r", status="requires_action", required_action_type="something_else")
    service = FakeService([odd, COMPLETED])
    clock = FakeClock()

    outcome = run_async(RunPoller(service, clock=clock).advance_run("t", "r", _registry()))

    assert outcome.status == "completed"
    assert service.submitted == []
    assert len(service.retrieved) == 2


@pytest.mark.parametrize("session_id,run_id", [("", "r"), ("t", ""), (None, "r"), ("t", None)])
def test_missing_identifiers_raise_before_polling(session_id, run_id):
    service = FakeService([COMPLETED])
    with pytest.raises(MissingIdentifierError):
        run_async(RunPoller(service, clock=FakeClock()).advance_run(session_id, run_id, _registry()))
    assert service.retrieved == []


def test_run_transitions_never_regress():
    run = Run("t", "r", RunState.POLLING, started_at=0.0, deadline=8.0)
    waiting = run.transition(RunState.AWAITING_TOOL_OUTPUTS)
    assert waiting.transition(RunState.POLLING).status is RunState.POLLING

    done = run.transition(RunState.COMPLETED)
    assert done.status.terminal
    with pytest.raises(InvalidRunTransitionError):
        done.transition(RunState.POLLING)
    with pytest.raises(InvalidRunTransitionError):
        waiting.transition(RunState.COMPLETED)


def test_run_expiry_uses_deadline():
    run = Run("t", "r", RunState.POLLING, started_at=10.0, deadline=18.0)
    assert not run.expired(17.9)
    assert run.expired(18.0)


def test_decode_and_encode_helpers():
    assert decode_arguments('{"a": 1}') == {"a": 1}
    assert decode_arguments("") == {}
    assert decode_arguments("[1, 2]") == {}
    assert decode_arguments("nope") == {}
    assert decode_arguments({"x": 1}) == {"x": 1}
    assert encode_output("ok") == '"ok"'
    assert encode_output({"n": 1}) == '{"n": 1}'
    assert encode_output(LookupArgs(city="Cusco")) == '{"city": "Cusco"}'
    assert encode_output({"when": "Lima", "ñ": 1}) == '{"when": "Lima", "ñ": 1}'
