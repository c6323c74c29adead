"""
Run lifecycle for OpenAI Assistant threads.

A run is polled with a bounded, backing-off wait until it reaches one of three
outcomes: Completed, NeedsAction (the assistant asked for tool calls) or
Failed. ``drive_run`` keeps polling, executing requested tools locally and
submitting their outputs, until the run completes or fails.
"""

from assistable.node.config import PollPolicy
from assistable.node.errors import RunFailedError, RunTimeoutError, ToolOutputsEmptyError
from assistable.node.interface import UsedTool
from assistable.node.tools import ToolDescriptor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union
import threading
import logging
import openai
import json
import time

LOGGER = logging.getLogger(__name__)


FAILED_STATUSES = ("cancelled", "expired", "failed", "incomplete")


@dataclass
class ToolCallRequest:
    id: str
    name: str
    arguments: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Completed:
    run: Any


@dataclass
class NeedsAction:
    run: Any
    calls: List[ToolCallRequest]


@dataclass
class Failed:
    status: str
    last_error: Optional[str] = None


RunOutcome = Union[Completed, NeedsAction, Failed]


def parse_tool_calls(run) -> List[ToolCallRequest]:
    required_action = getattr(run, "required_action", None)
    if required_action is None or required_action.submit_tool_outputs is None:
        return []
    calls = []
    for tool_call in required_action.submit_tool_outputs.tool_calls or []:
        if tool_call.type != "function":
            LOGGER.error(f"Unhandled tool call type: {tool_call.type}")
            continue
        arguments = json.loads(tool_call.function.arguments) if tool_call.function.arguments else {}
        calls.append(ToolCallRequest(id=tool_call.id, name=tool_call.function.name, arguments=arguments))
    return calls


def _describe_error(run) -> Optional[str]:
    last_error = getattr(run, "last_error", None)
    if last_error is None:
        return None
    return f"{last_error.code}: {last_error.message}"


class RunPoller:

    def __init__(self, openai_client, policy: PollPolicy, cancel_event: Optional[threading.Event] = None,
                 sleep: Callable[[float], None] = time.sleep):
        self.openai_client = openai_client
        self.policy = policy
        self.cancel_event = cancel_event
        self.sleep = sleep

    def cancel_run(self, thread_id: str, run_id: str, reason: str) -> None:
        """Best-effort cancel so the thread does not keep an active run."""
        LOGGER.warning(f"Cancelling run {run_id} on thread {thread_id}: {reason}")
        try:
            self.openai_client.beta.threads.runs.cancel(run_id=run_id, thread_id=thread_id)
        except openai.APIError as e:
            LOGGER.error(f"Error cancelling run {run_id} on thread {thread_id}: {e}")

    def cancel(self, thread_id: str, run_id: str) -> Failed:
        self.cancel_run(thread_id, run_id, "caller request")
        return Failed(status="cancelled", last_error="cancelled by caller")

    def poll(self, thread_id: str, run_id: str) -> RunOutcome:
        interval = self.policy.interval
        deadline = time.monotonic() + self.policy.timeout
        idle_actions = 0
        while True:
            if self.cancel_event is not None and self.cancel_event.is_set():
                return self.cancel(thread_id, run_id)

            run = self.openai_client.beta.threads.runs.retrieve(run_id=run_id, thread_id=thread_id)
            status = run.status
            LOGGER.debug(f"Run {run_id} on thread {thread_id} status: {status}")

            if status == "completed":
                return Completed(run=run)
            elif status == "requires_action":
                calls = parse_tool_calls(run)
                if calls:
                    return NeedsAction(run=run, calls=calls)
                idle_actions += 1
                LOGGER.warning(f"Run {run_id} requires action but has no tool calls ({idle_actions}/{self.policy.max_idle_actions})")
                if idle_actions >= self.policy.max_idle_actions:
                    self.cancel_run(thread_id, run_id, "requires_action without tool calls")
                    return Failed(status=status, last_error="requires_action without tool calls")
            elif status in FAILED_STATUSES:
                return Failed(status=status, last_error=_describe_error(run))

            if time.monotonic() >= deadline:
                self.cancel_run(thread_id, run_id, f"timed out after {self.policy.timeout}s")
                raise RunTimeoutError(thread_id=thread_id, run_id=run_id, status=status, waited=self.policy.timeout)
            self.sleep(interval)
            interval = self.policy.next_interval(interval)


def execute_tool_calls(calls: List[ToolCallRequest], tools: List[ToolDescriptor],
                       used_tools: List[UsedTool]) -> List[Dict[str, str]]:
    """
    Run each requested call against the local tool with the same name, in order.
    Calls without a matching tool are skipped.
    """
    tool_outputs = []
    for call in calls:
        tool = next((t for t in tools if t.name == call.name), None)
        if tool is None:
            LOGGER.warning(f"No local tool named {call.name}, skipping tool call {call.id}")
            continue
        tool_output = tool.call(call.arguments)
        tool_outputs.append({
            "tool_call_id": call.id,
            "output": tool_output if isinstance(tool_output, str) else json.dumps(tool_output, default=str),
        })
        used_tools.append(UsedTool(tool=tool.name, tool_input=call.arguments, tool_output=tool_output))
    return tool_outputs


def drive_run(openai_client, thread_id: str, run_id: str, tools: List[ToolDescriptor], policy: PollPolicy,
              cancel_event: Optional[threading.Event] = None, sleep: Callable[[float], None] = time.sleep) -> List[UsedTool]:
    """
    Poll a run to completion, answering every round of tool calls along the way.
    Returns the tools used, in call order.
    """
    poller = RunPoller(openai_client, policy, cancel_event=cancel_event, sleep=sleep)
    used_tools: List[UsedTool] = []
    while True:
        outcome = poller.poll(thread_id, run_id)
        if isinstance(outcome, Completed):
            LOGGER.info(f"Run {run_id} on thread {thread_id} completed using {len(used_tools)} tool calls")
            return used_tools
        if isinstance(outcome, Failed):
            raise RunFailedError(thread_id=thread_id, run_id=run_id, status=outcome.status, last_error=outcome.last_error)

        tool_outputs = execute_tool_calls(outcome.calls, tools, used_tools)
        if not tool_outputs:
            raise ToolOutputsEmptyError(thread_id=thread_id, run_id=run_id)
        openai_client.beta.threads.runs.submit_tool_outputs(run_id=run_id, thread_id=thread_id, tool_outputs=tool_outputs)
        LOGGER.debug(f"Submitted {len(tool_outputs)} tool outputs to run {run_id}")
