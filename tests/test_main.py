"""Tests for the console front end in editagent.main"""

import pytest

from conftest import ScriptedProvider, text_reply
from editagent import config
from editagent.conversation import ConversationService
from editagent.errors import ProviderError
from editagent.main import _parse_args, main, run_chat
from editagent.tools import ToolRegistry


def scripted_input(lines):
    """read_line stand-in: returns queued lines, raises queued exceptions, then EOF."""
    queue = list(lines)

    def read_line(prompt):
        if not queue:
            raise EOFError
        item = queue.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    return read_line


class TestRunChat:

    def test_banner_and_reply(self, ctx):
        service = ConversationService(ScriptedProvider([text_reply("4")]), ToolRegistry(), ctx=ctx)
        run_chat(ctx, service, read_line=scripted_input(["What's 2+2?", ""]))
        assert ctx.sent[0] == "Chat with Scripted (use 'ctrl-c' to quit)"
        assert any(msg.endswith("4\u001b[0m") for msg in ctx.sent)
        assert len(service.history) == 2

    def test_empty_line_quits(self, ctx):
        provider = ScriptedProvider()
        run_chat(ctx, ConversationService(provider, ctx=ctx), read_line=scripted_input([""]))
        assert provider.requests == []

    def test_ctrl_c_quits(self, ctx):
        service = ConversationService(ScriptedProvider(), ctx=ctx)
        run_chat(ctx, service, read_line=scripted_input([KeyboardInterrupt()]))
        assert ctx.sent[-1] == "\nGoodbye."

    def test_eof_quits(self, ctx):
        service = ConversationService(ScriptedProvider(), ctx=ctx)
        run_chat(ctx, service, read_line=scripted_input([]))
        assert ctx.sent[-1] == "\nGoodbye."

    def test_error_reported_and_loop_continues(self, ctx):
        provider = ScriptedProvider([ProviderError("Scripted", "API error 500: boom"), text_reply("ok")])
        service = ConversationService(provider, ctx=ctx)
        run_chat(ctx, service, read_line=scripted_input(["first", "second", ""]))
        assert ctx.errors == ["Scripted: API error 500: boom"]
        assert [m.content for m in service.history] == ["first", "second", "ok"]


class TestParseArgs:

    def test_defaults(self):
        assert _parse_args([]) == (None, False, None, None)

    def test_all_options(self):
        assert _parse_args(["-p", "gemini", "-q", "proj"]) == ("gemini", True, "proj", None)

    def test_long_forms(self):
        assert _parse_args(["--provider=claude", "--quiet"]) == ("claude", True, None, None)

    def test_provider_needs_value(self):
        assert _parse_args(["--provider"])[3] == "--provider requires a NAME argument"

    def test_unknown_option(self):
        assert _parse_args(["--frobnicate"])[3] == "unknown option: --frobnicate"


class TestMain:

    def test_help(self, capsys):
        assert main(["--help"]) == 0
        assert "Usage: editagent" in capsys.readouterr().out

    def test_bad_option(self, capsys):
        assert main(["--bogus"]) == 2

    def test_root_must_be_directory(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing")]) == 2
        assert "not a directory" in capsys.readouterr().out

    def test_missing_key_exits_with_error(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(config, "AI_PROVIDER", "anthropic")
        monkeypatch.setattr(config, "ANTHROPIC_API_KEY", "")
        assert main([str(tmp_path)]) == 1
        assert "no API key" in capsys.readouterr().err

    def test_unknown_provider(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        assert main(["-p", "nope", str(tmp_path)]) == 1
        assert "Unknown provider" in capsys.readouterr().err

    def test_session_starts(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(config, "ANTHROPIC_API_KEY", "sk-test")
        monkeypatch.setattr("builtins.input", lambda prompt="": "")
        assert main(["-q", "-p", "anthropic", str(tmp_path)]) == 0
        out = capsys.readouterr().out
        assert "Chat with Anthropic Claude (use 'ctrl-c' to quit)" in out
        assert "[LOG]" not in out
