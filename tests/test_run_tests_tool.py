"""Tests for editagent.exec_tools: test command detection and the run_tests tool"""

import io
import sys

from editagent.exec_tools import MAX_OUTPUT_LENGTH, TRUNCATED_MARKER, OutputCollector, RunTestsTool, detect_test_command


def py(code: str):
    return [sys.executable, "-c", code]


class TestDetectTestCommand:

    def test_gradle_wrapper(self, tmp_path):
        (tmp_path / "gradlew").write_text("#!/bin/sh\n", encoding="utf-8")
        assert detect_test_command(tmp_path) == ["./gradlew", "test"]

    def test_gradle_wrapper_windows(self, tmp_path):
        (tmp_path / "gradlew.bat").write_text("", encoding="utf-8")
        assert detect_test_command(tmp_path) == ["gradlew.bat", "test"]

    def test_pytest_project(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text("", encoding="utf-8")
        assert detect_test_command(tmp_path) == [sys.executable, "-m", "pytest", "-q"]

    def test_tests_directory(self, tmp_path):
        (tmp_path / "tests").mkdir()
        assert detect_test_command(tmp_path)[-2:] == ["pytest", "-q"]

    def test_gradle_wins_over_pytest(self, tmp_path):
        (tmp_path / "gradlew").write_text("", encoding="utf-8")
        (tmp_path / "tests").mkdir()
        assert detect_test_command(tmp_path) == ["./gradlew", "test"]

    def test_nothing(self, tmp_path):
        assert detect_test_command(tmp_path) is None


class TestRunTestsTool:

    def test_passing_run(self, workdir, ctx):
        tool = RunTestsTool(ctx, command=py("print('3 passed')"))
        result = tool.execute({})
        assert result.startswith("Test execution completed with exit code: 0\n\nAll tests passed!\n\nOutput:\n")
        assert "3 passed" in result

    def test_failing_run(self, workdir, ctx):
        tool = RunTestsTool(ctx, command=py("import sys; print('1 failed'); sys.exit(1)"))
        result = tool.execute({})
        assert "exit code: 1" in result
        assert "Some tests failed or there were errors." in result
        assert "1 failed" in result

    def test_stderr_merged(self, workdir, ctx):
        tool = RunTestsTool(ctx, command=py("import sys; sys.stderr.write('trace here')"))
        assert "trace here" in tool.execute({})

    def test_runs_in_working_directory(self, workdir, ctx):
        tool = RunTestsTool(ctx, command=py("import os; print(os.getcwd())"))
        assert str(workdir) in tool.execute({})

    def test_output_truncated(self, workdir, ctx):
        tool = RunTestsTool(ctx, command=py(f"print('x' * {MAX_OUTPUT_LENGTH + 500})"))
        result = tool.execute({})
        assert result.endswith(TRUNCATED_MARKER)
        output = result.split("Output:\n", 1)[1]
        assert output == "x" * MAX_OUTPUT_LENGTH + TRUNCATED_MARKER

    def test_large_output_stays_bounded(self, workdir, ctx):
        code = "import sys\nfor _ in range(800):\n    sys.stdout.write('z' * 8191 + '\\n')\n"
        result = RunTestsTool(ctx, command=py(code), timeout_sec=30).execute({})
        assert result.startswith("Test execution completed with exit code: 0")
        output = result.split("Output:\n", 1)[1]
        assert len(output) == MAX_OUTPUT_LENGTH + len(TRUNCATED_MARKER)
        assert output.endswith(TRUNCATED_MARKER)

    def test_timeout(self, workdir, ctx):
        tool = RunTestsTool(
            ctx,
            command=py("import sys, time; print('started', flush=True); time.sleep(30)"),
            timeout_sec=1,
        )
        result = tool.execute({})
        assert result.startswith("Error: Test execution timed out after 1 seconds.")
        assert "Partial output:" in result

    def test_no_command_found(self, workdir, ctx):
        result = RunTestsTool(ctx).execute({})
        assert result.startswith("Error: No test command found")

    def test_missing_executable(self, workdir, ctx):
        result = RunTestsTool(ctx, command=["definitely-not-a-real-binary-xyz"]).execute({})
        assert result.startswith("Error: Failed to execute definitely-not-a-real-binary-xyz")

    def test_no_parameters_in_schema(self, ctx):
        schema = RunTestsTool(ctx).parameter_schema()
        assert schema["properties"] == {}
        assert schema["required"] == []


class TestOutputCollector:

    def test_keeps_everything_under_limit(self):
        collector = OutputCollector(io.StringIO("short output\n"), limit=100).start()
        collector.join(5)
        assert collector.finished
        assert collector.overflow is False
        assert collector.text() == "short output\n"

    def test_discards_past_limit_but_drains(self):
        stream = io.StringIO("a" * 50000)
        collector = OutputCollector(stream, limit=1000).start()
        collector.join(5)
        assert collector.overflow is True
        assert collector.text() == "a" * 1000 + TRUNCATED_MARKER
        assert stream.read() == ""

    def test_exact_limit_is_not_overflow(self):
        collector = OutputCollector(io.StringIO("b" * 1000), limit=1000).start()
        collector.join(5)
        assert collector.overflow is False
        assert collector.text() == "b" * 1000
