"""Custom exception hierarchy for the chat agent service."""


class AgentError(Exception):
    """Base exception for agent-level issues."""


class ExternalServiceError(AgentError):
    """Raised when an external dependency responds with an error."""


class ToolExecutionError(AgentError):
    """Raised when a tool cannot be located or executed."""
