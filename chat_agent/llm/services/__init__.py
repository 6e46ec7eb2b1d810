"""Service layer exports."""

from .chat_agent import AgentConfig, ChatAgent, build_agent_config
from .cron_trigger import CronTrigger
from .openai_client import OpenAIClient
from .registry import AgentRegistry, get_agent_registry
from .scheduler import Schedule, Scheduler
from .tool_calls import cleanup_messages, convert_to_model_messages, process_tool_calls

__all__ = [
    "AgentConfig",
    "AgentRegistry",
    "ChatAgent",
    "CronTrigger",
    "OpenAIClient",
    "Schedule",
    "Scheduler",
    "build_agent_config",
    "cleanup_messages",
    "convert_to_model_messages",
    "get_agent_registry",
    "process_tool_calls",
]
