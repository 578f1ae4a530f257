"""Shared fixtures: a recording Context and a scripted model provider."""

import pathlib
from typing import List

import pytest

from editagent.context import Context
from editagent.models import ModelRequest, ModelResponse, ToolInvocation
from editagent.provider import ModelProvider


class RecordingContext(Context):
    """Context that keeps output in lists instead of printing."""

    def __init__(self, root=None, settings=None):
        super().__init__(root, settings=settings, verbose=True)
        self.sent: List[str] = []
        self.logs: List[str] = []
        self.errors: List[str] = []

    def send_to_user(self, message: str) -> None:
        self.sent.append(message)

    def log(self, message: str) -> None:
        self.logs.append(message)

    def error_message(self, message: str) -> None:
        self.errors.append(message)


class ScriptedProvider(ModelProvider):
    """Returns queued responses (or raises queued exceptions) and records every request."""

    display_name = "Scripted"

    def __init__(self, responses=None, tool_calling=True):
        self.responses = list(responses or [])
        self.requests: List[ModelRequest] = []
        self.tool_calling = tool_calling

    def supports_tool_calling(self) -> bool:
        return self.tool_calling

    def send_message(self, request: ModelRequest) -> ModelResponse:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError("no scripted response left")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def text_reply(text: str) -> ModelResponse:
    return ModelResponse(text_content=text)


def tool_reply(name: str, params=None, text: str = "", call_id: str = "call_1") -> ModelResponse:
    return ModelResponse(
        text_content=text,
        tool_invocations=[ToolInvocation(tool_name=name, parameters=params or {}, call_id=call_id)],
    )


@pytest.fixture
def ctx(tmp_path):
    return RecordingContext(tmp_path)


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run the test with tmp_path as the process working directory."""
    monkeypatch.chdir(tmp_path)
    return pathlib.Path.cwd()
