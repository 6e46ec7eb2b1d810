"""Chat endpoints streaming agent turns as UI message stream events."""

import json
from collections.abc import AsyncIterator
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from ...core.logging_config import get_logger
from ..schemas.chat import ChatMessage, ChatRequest
from ..services.registry import AgentRegistry, get_agent_registry

router = APIRouter(prefix="/chat", tags=["chat"])
logger = get_logger(__name__)

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "x-vercel-ai-ui-message-stream": "v1",
}


def format_sse_event(event: dict[str, Any]) -> str:
    return f"data: {json.dumps(event, ensure_ascii=False, default=str)}\n\n"


async def _sse_stream(events: AsyncIterator[dict[str, Any]]) -> AsyncIterator[str]:
    async for event in events:
        yield format_sse_event(event)
    yield "data: [DONE]\n\n"


@router.post("/{session_id}")
async def create_chat_turn(
    session_id: str,
    request: ChatRequest,
    registry: AgentRegistry = Depends(get_agent_registry),
) -> StreamingResponse:
    logger.info(
        "chat_request_received",
        session_id=session_id,
        message_count=len(request.messages),
    )
    agent = await registry.get(session_id)
    agent.persist_messages(request.messages)

    return StreamingResponse(
        _sse_stream(agent.on_chat_message()),
        media_type="text/event-stream",
        headers=STREAM_HEADERS,
    )


@router.get("/{session_id}/messages", response_model=list[ChatMessage])
async def get_chat_messages(
    session_id: str,
    registry: AgentRegistry = Depends(get_agent_registry),
) -> list[ChatMessage]:
    agent = await registry.peek(session_id)
    if agent is None:
        return []
    return agent.messages


@router.delete("/{session_id}", status_code=204)
async def clear_chat(
    session_id: str,
    registry: AgentRegistry = Depends(get_agent_registry),
) -> None:
    if not await registry.clear(session_id):
        raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
    logger.info("chat_session_cleared", session_id=session_id)
