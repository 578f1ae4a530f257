# editagent: Pydantic v2 value types shared by the orchestrator, the tool registry and the provider adapters.
# Conversation turns and tool specs are frozen so a snapshot handed to a provider cannot be altered afterwards.

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


class CustomBaseModel(BaseModel):
    """Pydantic base model configured to forbid unknown fields for strict validation."""
    model_config = ConfigDict(extra="forbid")


class FrozenModel(CustomBaseModel):
    """Strict and immutable once constructed."""
    model_config = ConfigDict(extra="forbid", frozen=True)


class Role(str, Enum):
    user = "user"
    assistant = "assistant"


class ChatMessage(FrozenModel):
    """One turn of the conversation. Empty content is allowed."""

    role: Role = Field(..., description="Who produced the turn")
    content: str = Field(..., description="Text of the turn")

    @classmethod
    def user(cls, content: str) -> "ChatMessage":
        return cls(role=Role.user, content=content)

    @classmethod
    def assistant(cls, content: str) -> "ChatMessage":
        return cls(role=Role.assistant, content=content)


class ToolSpec(FrozenModel):
    """Provider-agnostic description of a registered tool."""

    name: str = Field(..., description="Unique tool name")
    description: str = Field(..., description="What the tool does, shown to the model")
    parameter_schema: Dict[str, Any] = Field(..., description="JSON Schema of accepted parameters")

    @field_validator("name")
    @classmethod
    def _non_empty_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("tool name must be non-empty")
        return v


class ToolInvocation(FrozenModel):
    """A tool call requested by the model."""

    tool_name: str = Field(..., description="Name of the tool to run")
    parameters: Dict[str, Any] = Field(default_factory=dict, description="Structured arguments")
    call_id: Optional[str] = Field(default=None, description="Provider-assigned id of the call, if any")


class ModelRequest(FrozenModel):
    """Everything a provider needs for one round-trip. Built fresh per call."""

    messages: List[ChatMessage] = Field(..., description="Full history snapshot, oldest first")
    system_prompt: str = Field(..., description="Fixed system instruction")
    tools: Optional[List[ToolSpec]] = Field(default=None, description="Tool descriptions; None when no tools are offered")
    max_output_tokens: int = Field(..., gt=0, description="Output token budget for the reply")


class ModelResponse(FrozenModel):
    """Normalized provider reply."""

    text_content: str = Field(default="", description="Concatenated text of the reply, possibly empty")
    tool_invocations: List[ToolInvocation] = Field(default_factory=list, description="Tool calls in backend order")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_tool_use(self) -> bool:
        return bool(self.tool_invocations)
