"""Access to the agent currently handling a turn or a scheduled callback."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..llm.services.chat_agent import ChatAgent

_current_agent: ContextVar[ChatAgent | None] = ContextVar("current_agent", default=None)


@contextmanager
def agent_context(agent: ChatAgent) -> Iterator[ChatAgent]:
    """Bind `agent` as the current agent for the duration of the block."""

    token = _current_agent.set(agent)
    try:
        yield agent
    finally:
        _current_agent.reset(token)


def get_current_agent() -> ChatAgent:
    """Return the bound agent or raise when tools run outside an agent turn."""

    agent = _current_agent.get()
    if agent is None:
        raise RuntimeError("No agent is bound to the current context")
    return agent
