"""Core infrastructure utilities."""

from .config import AgentSettings, get_settings
from .context import agent_context, get_current_agent
from .logging_config import configure_logging, get_logger

__all__ = [
    "AgentSettings",
    "agent_context",
    "configure_logging",
    "get_current_agent",
    "get_logger",
    "get_settings",
]
