# editagent: Console I/O and logging wrapper handed to the orchestrator, tools and providers.

import pathlib
import sys
from typing import Any, Dict, Optional


class Context:
    """
    Thin wrapper around console I/O and logging.

    Components receive a Context instead of printing directly so the front end
    decides where output goes and tests can substitute a recording double.
    `root` is the working directory tools and HTTP dumps resolve against.
    """

    def __init__(
        self,
        root: Optional[pathlib.Path] = None,
        settings: Optional[Dict[str, Any]] = None,
        verbose: bool = True,
    ) -> None:
        self.root = pathlib.Path(root).resolve() if root else pathlib.Path.cwd()
        self.settings = settings or {}
        self.verbose = verbose

    def send_to_user(self, message: str) -> None:
        """Send a user-facing message to stdout."""
        print(message)

    def log(self, message: str) -> None:
        """Emit a trace line to stdout, prefixed for readability. Silent when not verbose."""
        if self.verbose:
            print(f"[LOG] {message}")

    def error_message(self, message: str) -> None:
        """Print an error message to stderr."""
        print(f"Error: {message}", file=sys.stderr)
