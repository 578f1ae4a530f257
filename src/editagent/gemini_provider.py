# editagent: Google Gemini generateContent adapter. Text only: tool descriptions are never sent
# and tool results are not routed back, so this provider never reports tool use.

from typing import Any, Dict, List, Optional

from .context import Context
from .models import ChatMessage, ModelRequest, ModelResponse, Role
from .provider import HttpModelProvider

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com"
DEFAULT_MODEL = "gemini-2.0-flash-001"


def to_gemini_contents(messages: List[ChatMessage]) -> List[Dict[str, Any]]:
    """Map history to Gemini contents; assistant turns use role 'model'."""
    contents = []
    for m in messages:
        role = "model" if m.role == Role.assistant else "user"
        contents.append({"role": role, "parts": [{"text": m.content}]})
    return contents


def parse_gemini_response(resp: Dict[str, Any]) -> ModelResponse:
    """Concatenate the text parts of the first candidate."""
    candidates = resp.get("candidates") or []
    if not candidates or not isinstance(candidates[0], dict):
        return ModelResponse(text_content="")
    content = candidates[0].get("content") or {}
    chunks = [
        str(part.get("text"))
        for part in content.get("parts") or []
        if isinstance(part, dict) and part.get("text") is not None
    ]
    return ModelResponse(text_content="".join(chunks))


class GeminiProvider(HttpModelProvider):
    display_name = "Google Gemini"
    secret_headers = ("x-goog-api-key",)

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
        self.session.headers.update({"x-goog-api-key": self.api_key})

    def generate_url(self) -> str:
        return f"{self.base_url}/v1beta/models/{self.model}:generateContent"

    def build_payload(self, request: ModelRequest) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "contents": to_gemini_contents(request.messages),
            "generationConfig": {"maxOutputTokens": request.max_output_tokens},
        }
        if request.system_prompt:
            payload["systemInstruction"] = {"parts": [{"text": request.system_prompt}]}
        return payload

    def send_message(self, request: ModelRequest) -> ModelResponse:
        if request.tools:
            self.ctx.log(f"{self.display_name}: ignoring {len(request.tools)} tool description(s); tool calling is not supported")
        self.ctx.log(f"Calling {self.display_name} (messages={len(request.messages)})")
        resp = self._post(self.generate_url(), self.build_payload(request))
        return parse_gemini_response(resp)
