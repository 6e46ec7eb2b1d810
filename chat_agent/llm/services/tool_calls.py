"""Tool-call hygiene and human-confirmation resolution for chat histories."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from ...core.logging_config import get_logger
from ...mcp.toolset import Execution
from ..schemas.chat import ChatMessage, TextPart, ToolCallPart, ToolCallState

logger = get_logger(__name__)

DENIED_MESSAGE = "Error: User denied access to tool execution"


@dataclass(slots=True)
class ToolCallResolution:
    messages: list[ChatMessage]
    resolved: list[ToolCallPart] = field(default_factory=list)


def _is_dangling(part: Any, executions: Mapping[str, Execution]) -> bool:
    return (
        isinstance(part, ToolCallPart)
        and not part.has_result
        and part.tool_name not in executions
    )


def cleanup_messages(
    messages: Sequence[ChatMessage], executions: Mapping[str, Execution]
) -> list[ChatMessage]:
    """Drop tool-call parts with no result that no execution can ever resolve.

    The model API rejects tool calls without a matching result, so these parts
    must not reach it. Input messages are left untouched; surviving parts are
    carried over as the same objects.
    """

    cleaned: list[ChatMessage] = []
    for message in messages:
        if not any(_is_dangling(part, executions) for part in message.parts):
            cleaned.append(message)
            continue
        kept = [part for part in message.parts if not _is_dangling(part, executions)]
        logger.debug(
            "dangling_tool_calls_removed",
            message_id=message.id,
            removed=len(message.parts) - len(kept),
        )
        cleaned.append(message.model_copy(update={"parts": kept}))
    return cleaned


async def _execute(part: ToolCallPart, execution: Execution) -> Any:
    try:
        return await execution(**part.input)
    except Exception as exc:
        logger.warning(
            "confirmed_tool_failed",
            tool=part.tool_name,
            tool_call_id=part.tool_call_id,
            error=str(exc),
        )
        return f"Error executing tool {part.tool_name}: {exc}"


async def process_tool_calls(
    messages: Sequence[ChatMessage], executions: Mapping[str, Execution]
) -> ToolCallResolution:
    """Resolve human-decided pending tool calls in the last message.

    Approved calls run their execution and become `completed`; denied calls
    become `cancelled` without running. Calls without a decision stay pending.
    Calls are processed one at a time in part order.
    """

    history = list(messages)
    if not history:
        return ToolCallResolution(messages=history)

    last = history[-1]
    resolved: list[ToolCallPart] = []
    parts = []
    for part in last.parts:
        if (
            not isinstance(part, ToolCallPart)
            or part.state is not ToolCallState.PENDING
            or part.tool_name not in executions
            or part.approval is None
        ):
            parts.append(part)
            continue

        if part.approval == "approved":
            output = await _execute(part, executions[part.tool_name])
            updated = part.resolve(output, ToolCallState.COMPLETED)
        else:
            updated = part.resolve(DENIED_MESSAGE, ToolCallState.CANCELLED)

        logger.info(
            "tool_call_resolved",
            tool=part.tool_name,
            tool_call_id=part.tool_call_id,
            state=updated.state.value,
        )
        parts.append(updated)
        resolved.append(updated)

    if resolved:
        history[-1] = last.model_copy(update={"parts": parts})
    return ToolCallResolution(messages=history, resolved=resolved)


def serialize_output(output: Any) -> str:
    if isinstance(output, str):
        return output
    return json.dumps(output, ensure_ascii=False, default=str)


def _assistant_to_model(message: ChatMessage) -> list[dict[str, Any]]:
    """Split an assistant message into model steps of text + calls + results."""

    steps: list[dict[str, Any]] = []
    text: list[str] = []
    calls: list[ToolCallPart] = []

    def flush() -> None:
        if not text and not calls:
            return
        step: dict[str, Any] = {"role": "assistant", "content": "".join(text) or None}
        if calls:
            step["tool_calls"] = [
                {
                    "id": call.tool_call_id,
                    "type": "function",
                    "function": {
                        "name": call.tool_name,
                        "arguments": json.dumps(call.input, ensure_ascii=False),
                    },
                }
                for call in calls
            ]
        steps.append(step)
        steps.extend(
            {
                "role": "tool",
                "tool_call_id": call.tool_call_id,
                "content": serialize_output(call.output),
            }
            for call in calls
        )
        text.clear()
        calls.clear()

    for part in message.parts:
        if isinstance(part, TextPart):
            if calls:
                flush()
            text.append(part.text)
        elif part.has_result:
            calls.append(part)
    flush()
    return steps


def convert_to_model_messages(messages: Sequence[ChatMessage]) -> list[dict[str, Any]]:
    """Convert chat history into OpenAI chat-completion messages.

    Tool calls still awaiting a decision are omitted because they have no
    result the model could pair them with.
    """

    payload: list[dict[str, Any]] = []
    for message in messages:
        if message.role == "assistant":
            payload.extend(_assistant_to_model(message))
            continue
        content = message.text()
        if content:
            payload.append({"role": message.role, "content": content})
    return payload
