# editagent: Anthropic Messages API adapter. Supports structured tool calling end to end.

from typing import Any, Dict, List, Optional

from .context import Context
from .errors import ProviderError
from .models import ChatMessage, ModelRequest, ModelResponse, ToolInvocation, ToolSpec
from .provider import HttpModelProvider

DEFAULT_BASE_URL = "https://api.anthropic.com"
DEFAULT_MODEL = "claude-3-5-haiku-latest"
ANTHROPIC_VERSION = "2023-06-01"


def to_anthropic_tools(specs: List[ToolSpec]) -> List[Dict[str, Any]]:
    return [
        {"name": s.name, "description": s.description, "input_schema": s.parameter_schema}
        for s in specs
    ]


def to_anthropic_messages(messages: List[ChatMessage]) -> List[Dict[str, Any]]:
    return [{"role": m.role.value, "content": m.content} for m in messages]


def parse_anthropic_response(resp: Dict[str, Any]) -> ModelResponse:
    """Concatenate text blocks; turn tool_use blocks into ToolInvocations in order."""
    text_chunks: List[str] = []
    invocations: List[ToolInvocation] = []
    for block in resp.get("content") or []:
        if not isinstance(block, dict):
            continue
        btype = block.get("type")
        if btype == "text":
            text_chunks.append(str(block.get("text") or ""))
        elif btype == "tool_use":
            params = block.get("input")
            invocations.append(
                ToolInvocation(
                    tool_name=str(block.get("name") or ""),
                    parameters=params if isinstance(params, dict) else {},
                    call_id=block.get("id"),
                )
            )
    return ModelResponse(text_content="".join(text_chunks), tool_invocations=invocations)


class AnthropicProvider(HttpModelProvider):
    display_name = "Anthropic Claude"
    secret_headers = ("x-api-key",)

    def __init__(
        self,
        api_key: Optional[str],
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = 240.0,
        max_retries: int = 2,
        ctx: Optional[Context] = None,
    ) -> None:
        super().__init__(
            api_key,
            model or DEFAULT_MODEL,
            base_url or DEFAULT_BASE_URL,
            timeout=timeout,
            max_retries=max_retries,
            ctx=ctx,
        )
        self.session.headers.update({
            "x-api-key": self.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        })

    def supports_tool_calling(self) -> bool:
        return True

    def messages_url(self) -> str:
        return f"{self.base_url}/v1/messages"

    def build_payload(self, request: ModelRequest) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self.model,
            "max_tokens": request.max_output_tokens,
            "messages": to_anthropic_messages(request.messages),
        }
        if request.system_prompt:
            payload["system"] = request.system_prompt
        if request.tools:
            payload["tools"] = to_anthropic_tools(request.tools)
        return payload

    def send_message(self, request: ModelRequest) -> ModelResponse:
        payload = self.build_payload(request)
        self.ctx.log(f"Calling {self.display_name} (messages={len(request.messages)}, tools={len(request.tools or [])})")
        resp = self._post(self.messages_url(), payload)
        if resp.get("type") == "error":
            err = resp.get("error") or {}
            raise ProviderError(self.display_name, f"{err.get('type', 'error')}: {err.get('message', '')}")
        response = parse_anthropic_response(resp)
        usage = resp.get("usage") or {}
        if usage:
            self.ctx.log(
                f"Anthropic usage: input_tokens={usage.get('input_tokens')}, output_tokens={usage.get('output_tokens')}"
            )
        return response
