# editagent: Console front end. Reads a line, hands it to the ConversationService, prints the reply.

import os
import pathlib
import shlex
import sys
from typing import Callable, List, Optional

from . import config
from .context import Context
from .conversation import DEFAULT_SYSTEM_PROMPT, ConversationService
from .errors import AgentError
from .factory import create_provider
from .settings import load_settings, section
from .tools import default_registry

USAGE = "Usage: editagent [--provider NAME|-p NAME] [--quiet|-q] [root]"

YOU = "\u001b[94mYou\u001b[0m: "
ASSISTANT = "\u001b[95mAssistant\u001b[0m: "
GREEN = "\u001b[92m"
RESET = "\u001b[0m"


def run_chat(ctx: Context, service: ConversationService, read_line: Optional[Callable[[str], str]] = None) -> None:
    """
    Interactive loop. An empty line, EOF or Ctrl-C ends the session.

    AgentError from a turn is reported and the loop continues; the history keeps
    whatever was recorded before the failure.
    """
    read_line = read_line or input
    ctx.send_to_user(f"Chat with {service.provider_name} (use 'ctrl-c' to quit)")
    while True:
        try:
            text = read_line(YOU)
        except (EOFError, KeyboardInterrupt):
            ctx.send_to_user("\nGoodbye.")
            return
        if not text.strip():
            return
        try:
            response = service.send_message(text)
        except AgentError as e:
            ctx.error_message(str(e))
            continue
        except KeyboardInterrupt:
            ctx.send_to_user("\nGoodbye.")
            return
        if response:
            ctx.send_to_user(f"{ASSISTANT}{GREEN}{response}{RESET}")


def _parse_args(args: List[str]):
    """Return (provider, quiet, root, error). Supports --provider=NAME, --provider NAME and -p NAME."""
    provider: Optional[str] = None
    quiet = False
    root: Optional[str] = None
    i = 0
    while i < len(args):
        a = args[i]
        if a in ("-p", "--provider"):
            if i + 1 >= len(args):
                return None, quiet, root, f"{a} requires a NAME argument"
            provider = args[i + 1]
            i += 2
            continue
        if a.startswith("--provider="):
            provider = a.split("=", 1)[1]
            i += 1
            continue
        if a in ("-q", "--quiet"):
            quiet = True
            i += 1
            continue
        if a.startswith("-"):
            return None, quiet, root, f"unknown option: {a}"
        # First non-flag is the working root
        if root is None:
            root = a
        i += 1
    return provider, quiet, root, None


def main(argv: Optional[List[str]] = None) -> int:
    """
    editagent CLI entrypoint.

    Notes:
        - AI_PROVIDER selects anthropic (default) or gemini; ANTHROPIC_API_KEY or GOOGLE_API_KEY must be set.
        - Optional settings live in <root>/.editagent/settings.yaml.
        - Tools operate relative to root, which defaults to the current directory.
    """
    args = sys.argv[1:] if argv is None else argv
    if any(a in ("-h", "--help") for a in args):
        print(USAGE)
        print("Options:")
        print("  -p, --provider NAME   anthropic or gemini (overrides settings and AI_PROVIDER)")
        print("  -q, --quiet           Hide [LOG] trace lines")
        print("Environment:")
        print("  AI_PROVIDER, ANTHROPIC_API_KEY, GOOGLE_API_KEY, ANTHROPIC_MODEL, GEMINI_MODEL")
        return 0

    provider_name, quiet, root_arg, err = _parse_args(args)
    if err:
        print(f"error: {err}")
        print(USAGE)
        return 2

    root = pathlib.Path(root_arg).resolve() if root_arg else pathlib.Path(".").resolve()
    if not root.is_dir():
        print(f"error: not a directory: {root}")
        return 2
    os.chdir(root)

    settings = load_settings(root)
    log_cfg = section(settings, "logging")
    conv_cfg = section(settings, "conversation")
    tools_cfg = section(settings, "tools")

    verbose = not quiet and bool(log_cfg.get("verbose", True))
    ctx = Context(root, settings=settings, verbose=verbose)

    try:
        provider = create_provider(provider_name, settings=settings, ctx=ctx)
    except (AgentError, ValueError) as e:
        ctx.error_message(str(e))
        return 1

    test_command = tools_cfg.get("test_command")
    if isinstance(test_command, str):
        test_command = shlex.split(test_command)
    registry = default_registry(
        ctx,
        test_command=test_command or None,
        test_timeout_sec=tools_cfg.get("test_timeout_sec", config.TEST_TIMEOUT_SEC),
    )

    service = ConversationService(
        provider,
        registry=registry,
        system_prompt=str(conv_cfg.get("system_prompt") or DEFAULT_SYSTEM_PROMPT),
        max_output_tokens=int(conv_cfg.get("max_output_tokens") or config.MAX_OUTPUT_TOKENS),
        max_tool_hops=int(conv_cfg.get("max_tool_hops") or config.MAX_TOOL_HOPS),
        ctx=ctx,
    )
    run_chat(ctx, service)
    return 0


if __name__ == "__main__":
    sys.exit(main())
