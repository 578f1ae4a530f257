# editagent: ConversationService, the orchestration loop. One send_message call may expand into several
# provider round-trips interleaved with local tool execution; history is appended as it goes and never rolled back.

from enum import Enum
from typing import List, Optional, Tuple

from .context import Context
from .errors import AgentError, ConversationError
from .history import ConversationHistory
from .models import ModelRequest, ModelResponse, ToolInvocation
from .prompts import get_prompt
from .provider import ModelProvider
from .tools import ToolRegistry, is_error_result

DEFAULT_SYSTEM_PROMPT = get_prompt("system_prompt.txt").strip()
DEFAULT_MAX_OUTPUT_TOKENS = 1024
DEFAULT_MAX_TOOL_HOPS = 1


class ConversationState(str, Enum):
    awaiting_input = "AwaitingInput"
    request_sent = "RequestSent"
    tools_pending = "ToolsPending"
    tools_executed = "ToolsExecuted"
    follow_up_sent = "FollowUpSent"
    text_resolved = "TextResolved"


class ConversationService:
    """
    Drives the request / tool-execution / follow-up cycle for one conversation.

    Per call to `send_message`:
      1. the user turn is appended (kept even if later steps fail)
      2. a ModelRequest is built from the full history, the system prompt and,
         for providers that support tool calling, the registry's tool specs
      3. a reply without tool calls ends the turn; its text is appended when non-empty
      4. otherwise each tool runs in backend order, a synthetic assistant note and a
         synthetic user turn with the results are appended, and a follow-up request is sent
      5. step 4 repeats at most `max_tool_hops` times; follow-ups only offer tools while
         hops remain, and tool calls requested after the budget is spent are not run

    Callers must serialize calls on one instance. ProviderError and UnknownToolError
    propagate unchanged; any other failure after the first reply is wrapped in
    ConversationError.
    """

    def __init__(
        self,
        provider: ModelProvider,
        registry: Optional[ToolRegistry] = None,
        history: Optional[ConversationHistory] = None,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS,
        max_tool_hops: int = DEFAULT_MAX_TOOL_HOPS,
        ctx: Optional[Context] = None,
    ) -> None:
        if max_tool_hops < 1:
            raise ValueError("max_tool_hops must be at least 1")
        self.provider = provider
        self.registry = registry if registry is not None else ToolRegistry()
        self._history = history if history is not None else ConversationHistory()
        self.system_prompt = system_prompt
        self.max_output_tokens = max_output_tokens
        self.max_tool_hops = max_tool_hops
        self.ctx = ctx or Context()
        self.state = ConversationState.awaiting_input

    @property
    def history(self) -> ConversationHistory:
        return self._history

    @property
    def provider_name(self) -> str:
        return self.provider.provider_name()

    def _set_state(self, state: ConversationState) -> None:
        self.state = state
        self.ctx.log(f"conversation: {state.value}")

    def _build_request(self, offer_tools: bool) -> ModelRequest:
        tools = None
        if offer_tools and self.provider.supports_tool_calling():
            specs = self.registry.describe_all()
            # an empty tool list is never sent
            tools = specs or None
        return ModelRequest(
            messages=list(self._history.snapshot()),
            system_prompt=self.system_prompt,
            tools=tools,
            max_output_tokens=self.max_output_tokens,
        )

    def _resolve(self, response: ModelResponse) -> str:
        text = response.text_content
        if text:
            self._history.append_assistant(text)
        self._set_state(ConversationState.text_resolved)
        return text

    def _run_tools(self, invocations: List[ToolInvocation]) -> List[Tuple[str, str]]:
        """Run each invocation in order. A failed tool contributes its error text; later tools still run."""
        results: List[Tuple[str, str]] = []
        for inv in invocations:
            self.ctx.log(f"Executing tool: {inv.tool_name}")
            result = self.registry.invoke(inv.tool_name, dict(inv.parameters))
            if is_error_result(result):
                self.ctx.log(f"Tool {inv.tool_name} reported an error: {result[:200]}")
            else:
                self.ctx.log(f"Tool {inv.tool_name} returned {len(result)} characters")
            results.append((inv.tool_name, result))
        return results

    def _record_tool_turns(self, response: ModelResponse, results: List[Tuple[str, str]]) -> None:
        lines: List[str] = []
        if response.text_content:
            lines.append(response.text_content)
        lines.extend(f"Tool {name} executed: {result}" for name, result in results)
        self._history.append_assistant("\n".join(lines))
        self._history.append_user("Tool results: " + "\n".join(result for _, result in results))

    def send_message(self, user_input: str) -> str:
        self._history.append_user(user_input)

        self._set_state(ConversationState.request_sent)
        try:
            response = self.provider.send_message(self._build_request(offer_tools=True))
        except AgentError:
            self._set_state(ConversationState.awaiting_input)
            raise

        if not response.has_tool_use:
            return self._resolve(response)

        hops = 0
        try:
            while response.has_tool_use:
                if hops >= self.max_tool_hops:
                    names = ", ".join(inv.tool_name for inv in response.tool_invocations)
                    self.ctx.log(
                        f"conversation: tool-hop limit ({self.max_tool_hops}) reached; not running requested tool(s): {names}"
                    )
                    break
                hops += 1
                self._set_state(ConversationState.tools_pending)
                results = self._run_tools(response.tool_invocations)
                self._record_tool_turns(response, results)
                self._set_state(ConversationState.tools_executed)

                self._set_state(ConversationState.follow_up_sent)
                response = self.provider.send_message(
                    self._build_request(offer_tools=hops < self.max_tool_hops)
                )
        except AgentError:
            self._set_state(ConversationState.awaiting_input)
            raise
        except Exception as e:
            self._set_state(ConversationState.awaiting_input)
            raise ConversationError(f"Tool execution failed: {e}") from e

        return self._resolve(response)
