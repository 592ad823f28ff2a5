from __future__ import annotations

import sys
from pathlib import Path

import pytest

from gitty.core.diagnostics import ExternalTool, check_dependencies, missing_required
from gitty.core.runner import NOT_FOUND_RETURNCODE, CommandResult, run_command, run_interactive


class TestRunCommand:
    @pytest.mark.asyncio
    async def test_combines_stdout_and_stderr(self) -> None:
        script = "import sys; print('out'); print('err', file=sys.stderr); sys.exit(3)"
        result = await run_command(sys.executable, ["-c", script])

        assert result.returncode == 3
        assert not result.exit_succeeded
        assert "out" in result.output
        assert "err" in result.output

    @pytest.mark.asyncio
    async def test_runs_in_cwd(self, tmp_path: Path) -> None:
        result = await run_command(sys.executable, ["-c", "import os; print(os.getcwd())"], tmp_path)
        assert result.exit_succeeded
        assert Path(result.output.strip()).resolve() == tmp_path.resolve()

    @pytest.mark.asyncio
    async def test_missing_program(self) -> None:
        result = await run_command("gitty-no-such-program", ["--help"])
        assert result.returncode == NOT_FOUND_RETURNCODE
        assert "not found" in result.output


def test_command_result_success() -> None:
    assert CommandResult(0, "").exit_succeeded


def test_run_interactive_missing_program() -> None:
    assert run_interactive("gitty-no-such-program") == NOT_FOUND_RETURNCODE


def test_run_interactive_exit_code() -> None:
    assert run_interactive(sys.executable, ["-c", "raise SystemExit(4)"]) == 4


class TestDependencyCheck:
    def test_all_present(self) -> None:
        checks = check_dependencies(which=lambda binary: f"/usr/bin/{binary}")
        assert [check.status for check in checks] == ["ok", "ok", "ok"]
        assert missing_required(checks) == []

    def test_only_git_is_required(self) -> None:
        checks = check_dependencies(which=lambda binary: None)
        assert [check.tool.binary for check in missing_required(checks)] == ["git"]

    def test_custom_tools(self) -> None:
        tools = [ExternalTool(name="Tool", binary="tool", required=False)]
        checks = check_dependencies(tools, which=lambda binary: None)
        assert checks[0].missing
        assert checks[0].describe() == "tool (optional)"
        assert missing_required(checks) == []
