# editagent: In-memory, append-only conversation history replayed to the model on every request.

from typing import Iterator, List, Tuple

from .models import ChatMessage, Role


class ConversationHistory:
    """
    Ordered record of user and assistant turns.

    Turns are never edited or removed. `snapshot()` hands out an immutable tuple
    so callers cannot reach the underlying list. There is no size bound; the
    history lives as long as the process.
    """

    def __init__(self) -> None:
        self._messages: List[ChatMessage] = []

    def append_user(self, text: str) -> ChatMessage:
        msg = ChatMessage.user(text)
        self._messages.append(msg)
        return msg

    def append_assistant(self, text: str) -> ChatMessage:
        msg = ChatMessage.assistant(text)
        self._messages.append(msg)
        return msg

    def snapshot(self) -> Tuple[ChatMessage, ...]:
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[ChatMessage]:
        return iter(self.snapshot())

    def render(self) -> str:
        """Human-readable transcript, one `Role: content` line per turn."""
        lines = []
        for msg in self._messages:
            label = "User" if msg.role == Role.user else "Assistant"
            lines.append(f"{label}: {msg.content}")
        return "".join(line + "\n" for line in lines)
