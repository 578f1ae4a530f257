# editagent: Exception taxonomy. Tool-level errors are turned into "Error: ..." text at the tool boundary;
# registry, provider and conversation errors propagate to the caller of send_message.

from typing import Optional


class AgentError(Exception):
    """Root of all editagent errors."""


class InvalidParametersError(AgentError):
    """Tool parameters are missing, empty or of the wrong type."""


class ToolExecutionError(AgentError):
    """A tool body failed (I/O, permissions, timeout)."""


class UnknownToolError(AgentError):
    def __init__(self, tool_name: str) -> None:
        super().__init__(f"Unknown tool: {tool_name}")
        self.tool_name = tool_name


class ProviderError(AgentError):
    """Transport, auth or rate-limit failure while talking to a model backend."""

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.status_code = status_code


class ConversationError(AgentError):
    """Unexpected failure during tool execution or the follow-up round-trip."""
