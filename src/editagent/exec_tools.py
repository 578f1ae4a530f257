# editagent: run_tests tool. Runs the project's test command in a subprocess with a hard timeout and a capped output buffer.

import os
import pathlib
import signal
import subprocess
import sys
import threading
from typing import IO, List, Optional, Sequence

from .context import Context
from .errors import ToolExecutionError
from .tools import ERROR_PREFIX, Tool

DEFAULT_TIMEOUT_SEC = 60.0
MAX_OUTPUT_LENGTH = 10000
TRUNCATED_MARKER = "\n[Output truncated - too long]\n"
READ_CHUNK_SIZE = 8192
# how long to wait for the reader once the process is gone
READER_JOIN_SEC = 5.0

_PYTEST_MARKERS = ("pytest.ini", "pyproject.toml", "setup.cfg", "tox.ini", "conftest.py")


def detect_test_command(root: pathlib.Path) -> Optional[List[str]]:
    """
    Pick a test command for the project at root.

    Order: ./gradlew test, gradlew.bat test, then `python -m pytest -q` when the
    tree looks like a pytest project. Returns None when nothing fits.
    """
    if (root / "gradlew").exists():
        return ["./gradlew", "test"]
    if (root / "gradlew.bat").exists():
        return ["gradlew.bat", "test"]
    if any((root / m).exists() for m in _PYTEST_MARKERS) or (root / "tests").is_dir():
        return [sys.executable, "-m", "pytest", "-q"]
    return None


def _kill(proc: subprocess.Popen) -> None:
    # the command leads its own process group; kill the group, not just the wrapper
    if os.name == "posix":
        try:
            os.killpg(proc.pid, signal.SIGKILL)
            return
        except OSError:
            pass
    proc.kill()


class OutputCollector:
    """
    Drains a text stream on a background thread, keeping at most `limit` characters.

    Everything past the limit is read and discarded so the writer never blocks on a full pipe.
    """

    def __init__(self, stream: IO[str], limit: int = MAX_OUTPUT_LENGTH) -> None:
        self.stream = stream
        self.limit = limit
        self.overflow = False
        self._chunks: List[str] = []
        self._kept = 0
        self._thread = threading.Thread(target=self._pump, name="run_tests-output", daemon=True)

    def _pump(self) -> None:
        while True:
            chunk = self.stream.read(READ_CHUNK_SIZE)
            if not chunk:
                break
            room = self.limit - self._kept
            if room > 0:
                kept = chunk[:room]
                self._chunks.append(kept)
                self._kept += len(kept)
            if len(chunk) > room:
                self.overflow = True

    def start(self) -> "OutputCollector":
        self._thread.start()
        return self

    def join(self, timeout: Optional[float] = None) -> None:
        self._thread.join(timeout)

    @property
    def finished(self) -> bool:
        return not self._thread.is_alive()

    def text(self) -> str:
        out = "".join(self._chunks)
        return out + TRUNCATED_MARKER if self.overflow else out


class RunTestsTool(Tool):
    name = "run_tests"
    description = (
        "Runs the project's test suite (Gradle wrapper or pytest) in the current working directory. "
        "Reports the exit code and the combined test output."
    )

    def __init__(
        self,
        ctx: Optional[Context] = None,
        command: Optional[Sequence[str]] = None,
        timeout_sec: float = DEFAULT_TIMEOUT_SEC,
    ) -> None:
        super().__init__(ctx)
        self.command = list(command) if command else None
        self.timeout_sec = timeout_sec

    def run(self) -> str:
        cwd = pathlib.Path.cwd()
        command = self.command or detect_test_command(cwd)
        if not command:
            raise ToolExecutionError(
                "No test command found in current directory. Configure tools.test_command "
                "or run inside a Gradle (gradlew) or pytest project."
            )
        self.ctx.log(f"run_tests: {' '.join(command)} (timeout {self.timeout_sec:g}s)")

        try:
            proc = subprocess.Popen(
                command,
                cwd=str(cwd),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
                start_new_session=(os.name == "posix"),
            )
        except OSError as e:
            raise ToolExecutionError(f"Failed to execute {' '.join(command)}: {e}")

        collector = OutputCollector(proc.stdout).start()
        try:
            exit_code = proc.wait(timeout=self.timeout_sec)
        except subprocess.TimeoutExpired:
            _kill(proc)
            proc.wait()
            self._finish(proc, collector)
            self.ctx.log(f"run_tests: killed after {self.timeout_sec:g}s")
            return (
                f"{ERROR_PREFIX}Test execution timed out after {self.timeout_sec:g} seconds."
                f"\n\nPartial output:\n{collector.text()}"
            )
        self._finish(proc, collector)

        if collector.overflow:
            self.ctx.log(f"run_tests: output cut at {MAX_OUTPUT_LENGTH} characters")
        verdict = "All tests passed!" if exit_code == 0 else "Some tests failed or there were errors."
        return (
            f"Test execution completed with exit code: {exit_code}\n\n"
            f"{verdict}\n\n"
            f"Output:\n{collector.text()}"
        )

    def _finish(self, proc: subprocess.Popen, collector: OutputCollector) -> None:
        collector.join(READER_JOIN_SEC)
        if collector.finished:
            proc.stdout.close()
        else:
            # a leftover grandchild still holds the pipe; the daemon reader ends with it
            self.ctx.log("run_tests: output pipe still open after exit; not waiting for it")
