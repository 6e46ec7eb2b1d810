"""In-memory registry of chat agents keyed by session name."""

from __future__ import annotations

import asyncio
from functools import lru_cache

from ...core.config import get_settings
from ...core.logging_config import get_logger
from .chat_agent import AgentConfig, ChatAgent, build_agent_config

logger = get_logger(__name__)


class AgentRegistry:
    """Create agents on first use and own their scheduler lifecycles."""

    def __init__(self, config: AgentConfig | None = None, *, start_schedulers: bool = True) -> None:
        self._config = config
        self._start_schedulers = start_schedulers
        self._agents: dict[str, ChatAgent] = {}
        self._lock = asyncio.Lock()

    async def config(self) -> AgentConfig:
        if self._config is None:
            self._config = await build_agent_config(get_settings())
        return self._config

    async def get(self, name: str) -> ChatAgent:
        config = await self.config()
        async with self._lock:
            agent = self._agents.get(name)
            if agent is None:
                agent = ChatAgent(name, config)
                self._agents[name] = agent
                if self._start_schedulers:
                    agent.scheduler.start()
                logger.info("agent_created", agent=name)
            return agent

    async def peek(self, name: str) -> ChatAgent | None:
        async with self._lock:
            return self._agents.get(name)

    async def clear(self, name: str) -> bool:
        async with self._lock:
            agent = self._agents.pop(name, None)
        if agent is None:
            return False
        await agent.scheduler.stop()
        logger.info("agent_cleared", agent=name)
        return True

    async def shutdown(self) -> None:
        async with self._lock:
            agents = list(self._agents.values())
            self._agents.clear()
        for agent in agents:
            await agent.scheduler.stop()


@lru_cache
def get_agent_registry() -> AgentRegistry:
    """Return the process-wide registry used by the HTTP layer."""

    return AgentRegistry()
