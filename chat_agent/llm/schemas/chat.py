"""Pydantic schemas for chat messages and their tool-call parts."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

RoleLiteral = Literal["user", "assistant", "system"]
ApprovalLiteral = Literal["approved", "denied"]


def generate_id() -> str:
    return uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class ToolCallState(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TextPart(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ToolCallPart(BaseModel):
    """A model-requested tool invocation and, once resolved, its result."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["tool-call"] = "tool-call"
    tool_call_id: str = Field(..., alias="toolCallId")
    tool_name: str = Field(..., alias="toolName")
    input: dict[str, Any] = Field(default_factory=dict)
    output: Any = None
    state: ToolCallState = ToolCallState.PENDING
    approval: ApprovalLiteral | None = Field(
        None, description="Human decision for a confirmation-required call"
    )

    @property
    def has_result(self) -> bool:
        return self.state is not ToolCallState.PENDING

    def resolve(self, output: Any, state: ToolCallState) -> ToolCallPart:
        """Return a copy carrying `output`; a recorded result is never replaced."""

        if self.has_result:
            msg = f"Tool call {self.tool_call_id} already has a result"
            raise ValueError(msg)
        if state is ToolCallState.PENDING:
            raise ValueError("A resolved tool call cannot stay pending")
        return self.model_copy(update={"output": output, "state": state})


MessagePart = Annotated[TextPart | ToolCallPart, Field(discriminator="type")]


class MessageMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    created_at: datetime = Field(default_factory=_utcnow, alias="createdAt")


class ChatMessage(BaseModel):
    id: str = Field(default_factory=generate_id)
    role: RoleLiteral
    parts: list[MessagePart] = Field(default_factory=list)
    metadata: MessageMetadata = Field(default_factory=MessageMetadata)

    def text(self) -> str:
        return "".join(part.text for part in self.parts if isinstance(part, TextPart))

    def tool_calls(self) -> list[ToolCallPart]:
        return [part for part in self.parts if isinstance(part, ToolCallPart)]


class ChatRequest(BaseModel):
    messages: list[ChatMessage] = Field(..., description="Full chat history from the client")
