"""Chat agent runtime: one agent per session, streaming one turn at a time."""

from __future__ import annotations

import json
from collections.abc import AsyncIterator, Callable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from ...core.config import AgentSettings
from ...core.context import agent_context
from ...core.logging_config import get_logger
from ...mcp.server import EXECUTIONS, call_tool, load_tool_set
from ...mcp.toolset import Execution, ToolSet
from ..schemas.chat import (
    ChatMessage,
    TextPart,
    ToolCallPart,
    ToolCallState,
    generate_id,
)
from .openai_client import OpenAIClient
from .scheduler import Schedule, Scheduler, ScheduleWhen
from .tool_calls import (
    cleanup_messages,
    convert_to_model_messages,
    process_tool_calls,
    serialize_output,
)

logger = get_logger(__name__)

_SYSTEM_PROMPT = """You are a helpful assistant that can do various tasks.

{schedule_prompt}

If the user asks to schedule a task, use the scheduleTask tool to schedule the task."""

_SCHEDULE_PROMPT = """The current date and time is {now}.

When scheduling a task, describe when it should run with the `when` argument:
- {{"type": "scheduled", "date": "<ISO 8601 datetime>"}} to run once at a specific time
- {{"type": "delayed", "delayInSeconds": <seconds>}} to run once after a delay
- {{"type": "cron", "cron": "<cron expression>"}} to run on a recurring schedule
- {{"type": "no-schedule"}} when the request does not describe a valid time"""


def build_system_prompt(now: datetime) -> str:
    return _SYSTEM_PROMPT.format(schedule_prompt=_SCHEDULE_PROMPT.format(now=now.isoformat()))


@dataclass(slots=True)
class AgentConfig:
    """Everything an agent needs to run a turn, built once and shared by agents."""

    client: OpenAIClient
    tools: ToolSet
    executions: Mapping[str, Execution]
    max_steps: int = 10
    scheduler_poll_interval: float = 1.0
    system_prompt: Callable[[datetime], str] = build_system_prompt


async def build_agent_config(settings: AgentSettings) -> AgentConfig:
    return AgentConfig(
        client=OpenAIClient.from_settings(settings),
        tools=await load_tool_set(),
        executions=EXECUTIONS,
        max_steps=settings.max_steps,
        scheduler_poll_interval=settings.scheduler_poll_interval,
    )


def _tool_output_event(part: ToolCallPart) -> dict[str, Any]:
    return {
        "type": "tool-output-available",
        "toolCallId": part.tool_call_id,
        "output": part.output,
    }


def _accumulate_tool_call(calls: dict[int, dict[str, str]], delta: Mapping[str, Any]) -> None:
    """Merge one streamed tool-call fragment into the call at its index."""

    slot = calls.setdefault(delta.get("index") or 0, {"id": "", "name": "", "arguments": ""})
    if delta.get("id"):
        slot["id"] = delta["id"]
    function = delta.get("function") or {}
    slot["name"] += function.get("name") or ""
    slot["arguments"] += function.get("arguments") or ""


def _parse_arguments(raw: str) -> dict[str, Any]:
    arguments = json.loads(raw or "{}")
    if not isinstance(arguments, dict):
        raise ValueError("Tool arguments must be a JSON object")
    return arguments


class ChatAgent:
    """Holds one session's history and schedules and runs its chat turns."""

    def __init__(self, name: str, config: AgentConfig) -> None:
        self.name = name
        self.config = config
        self.messages: list[ChatMessage] = []
        self.scheduler = Scheduler(self, poll_interval=config.scheduler_poll_interval)

    def persist_messages(self, messages: list[ChatMessage]) -> None:
        self.messages = list(messages)

    async def save_messages(self, messages: list[ChatMessage]) -> None:
        """Persist `messages` and reply to them with a full turn."""

        self.persist_messages(messages)
        async for _ in self.on_chat_message():
            pass

    async def execute_task(self, description: str, schedule: Schedule) -> None:
        logger.info(
            "scheduled_task_running",
            agent=self.name,
            schedule_id=schedule.id,
            description=description,
        )
        await self.save_messages(
            [
                *self.messages,
                ChatMessage(
                    role="user",
                    parts=[TextPart(text=f"Running scheduled task: {description}")],
                ),
            ]
        )

    def schedule(self, when: ScheduleWhen, callback: str, payload: Any = None) -> Schedule:
        return self.scheduler.schedule(when, callback, payload)

    def get_schedules(self) -> list[Schedule]:
        return self.scheduler.get_schedules()

    def cancel_schedule(self, schedule_id: str) -> bool:
        return self.scheduler.cancel(schedule_id)

    async def on_chat_message(self) -> AsyncIterator[dict[str, Any]]:
        """Run one turn over the stored history and yield UI stream events."""

        message_id = generate_id()
        logger.info("chat_turn_started", agent=self.name, history=len(self.messages))
        yield {"type": "start", "messageId": message_id}

        cleaned = cleanup_messages(self.messages, self.config.executions)
        with agent_context(self):
            resolution = await process_tool_calls(cleaned, self.config.executions)
        self.messages = resolution.messages
        for part in resolution.resolved:
            yield _tool_output_event(part)

        model_messages = [
            {"role": "system", "content": self.config.system_prompt(datetime.now(tz=timezone.utc))},
            *convert_to_model_messages(self.messages),
        ]
        assistant = ChatMessage(id=message_id, role="assistant")
        try:
            async for event in self._run_steps(model_messages, assistant):
                yield event
        except Exception as exc:
            logger.exception("chat_turn_failed", agent=self.name)
            yield {"type": "error", "errorText": str(exc)}

        if assistant.parts:
            self.messages.append(assistant)
        logger.info(
            "chat_turn_completed",
            agent=self.name,
            parts=len(assistant.parts),
            resolved_confirmations=len(resolution.resolved),
        )
        yield {"type": "finish"}

    async def _run_steps(
        self, model_messages: list[dict[str, Any]], assistant: ChatMessage
    ) -> AsyncIterator[dict[str, Any]]:
        tool_schema = self.config.tools.schema()

        for step in range(self.config.max_steps):
            text_id = generate_id()
            text: list[str] = []
            calls: dict[int, dict[str, str]] = {}

            async for chunk in self.config.client.stream_chat_completion(
                model_messages, tools=tool_schema
            ):
                for choice in chunk.get("choices") or []:
                    delta = choice.get("delta") or {}
                    content = delta.get("content")
                    if content:
                        text.append(content)
                        yield {"type": "text-delta", "id": text_id, "delta": content}
                    for call_delta in delta.get("tool_calls") or []:
                        _accumulate_tool_call(calls, call_delta)

            step_text = "".join(text)
            if step_text:
                assistant.parts.append(TextPart(text=step_text))
            if not calls:
                return

            ordered = [calls[index] for index in sorted(calls)]
            for call in ordered:
                call["id"] = call["id"] or generate_id()
            model_messages.append(
                {
                    "role": "assistant",
                    "content": step_text or None,
                    "tool_calls": [
                        {
                            "id": call["id"],
                            "type": "function",
                            "function": {"name": call["name"], "arguments": call["arguments"]},
                        }
                        for call in ordered
                    ],
                }
            )

            awaiting_confirmation = False
            for call in ordered:
                part, parse_error = self._tool_call_part(call)
                yield {
                    "type": "tool-input-available",
                    "toolCallId": part.tool_call_id,
                    "toolName": part.tool_name,
                    "input": part.input,
                }
                if parse_error is None and self.config.tools.requires_confirmation(part.tool_name):
                    assistant.parts.append(part)
                    awaiting_confirmation = True
                    continue

                if parse_error is not None:
                    output = f"Error parsing arguments for {part.tool_name}: {parse_error}"
                else:
                    output = await self._run_auto_tool(part)
                resolved = part.resolve(output, ToolCallState.COMPLETED)
                assistant.parts.append(resolved)
                yield _tool_output_event(resolved)
                model_messages.append(
                    {
                        "role": "tool",
                        "tool_call_id": resolved.tool_call_id,
                        "content": serialize_output(output),
                    }
                )

            if awaiting_confirmation:
                logger.info("chat_turn_awaiting_confirmation", agent=self.name, step=step + 1)
                return

        logger.warning("chat_turn_step_limit_reached", agent=self.name, max_steps=self.config.max_steps)

    def _tool_call_part(self, call: Mapping[str, str]) -> tuple[ToolCallPart, Exception | None]:
        try:
            arguments = _parse_arguments(call["arguments"])
        except ValueError as exc:
            arguments, error = {}, exc
        else:
            error = None
        part = ToolCallPart(
            tool_call_id=call["id"],
            tool_name=call["name"],
            input=arguments,
        )
        return part, error

    async def _run_auto_tool(self, part: ToolCallPart) -> Any:
        try:
            with agent_context(self):
                output = await call_tool(part.tool_name, part.input)
        except Exception as exc:
            logger.warning("tool_call_failed", tool=part.tool_name, error=str(exc))
            return f"Error executing tool {part.tool_name}: {exc}"
        logger.info(
            "tool_call_executed",
            tool=part.tool_name,
            arguments=part.input,
            result_summary=str(output)[:200],
        )
        return output
