"""Tests for external command execution."""

import sys
from unittest.mock import AsyncMock, patch

import pytest

from core.models import CommandOutcome
from core.shell import CommandRunner


class TestCommandRunner:
    """Test best-effort command execution."""

    @pytest.mark.asyncio
    async def test_successful_command(self, tmp_path):
        """Should capture stdout of a successful command."""
        runner = CommandRunner()

        outcome = await runner.run([sys.executable, "-c", "print('hello')"], cwd=tmp_path)

        assert outcome.ok is True
        assert outcome.stdout == "hello"
        assert outcome.reason is None

    @pytest.mark.asyncio
    async def test_failing_command(self, tmp_path):
        """Should return a failed outcome for a non-zero exit."""
        runner = CommandRunner()

        outcome = await runner.run(
            [sys.executable, "-c", "import sys; sys.stderr.write('bad'); sys.exit(3)"],
            cwd=tmp_path,
        )

        assert outcome.ok is False
        assert "exited with code 3" in outcome.reason
        assert outcome.stderr == "bad"

    @pytest.mark.asyncio
    async def test_missing_executable(self, tmp_path):
        """Should return a failed outcome when the command does not exist."""
        runner = CommandRunner()

        outcome = await runner.run(["definitely-not-a-real-command-xyz"], cwd=tmp_path)

        assert outcome.ok is False
        assert "Could not start" in outcome.reason

    @pytest.mark.asyncio
    async def test_timeout(self, tmp_path):
        """Should kill and report commands that run too long."""
        runner = CommandRunner(timeout=0.2)

        outcome = await runner.run(
            [sys.executable, "-c", "import time; time.sleep(5)"], cwd=tmp_path
        )

        assert outcome.ok is False
        assert "timed out" in outcome.reason

    @pytest.mark.asyncio
    async def test_install_lock_runs_npm_install(self, tmp_path):
        """Should run npm install in the repository."""
        runner = CommandRunner()

        with patch.object(runner, "run", new=AsyncMock(return_value=CommandOutcome.success())) as mock_run:
            outcome = await runner.install_lock(tmp_path)

        assert outcome.ok is True
        mock_run.assert_awaited_once_with(["npm", "install"], cwd=tmp_path)

    @pytest.mark.asyncio
    async def test_tidy_modules_runs_go_mod_tidy(self, tmp_path):
        """Should run go mod tidy in the repository."""
        runner = CommandRunner()
        failed = CommandOutcome.failed("go: not found")

        with patch.object(runner, "run", new=AsyncMock(return_value=failed)) as mock_run:
            outcome = await runner.tidy_modules(tmp_path)

        assert outcome.ok is False
        mock_run.assert_awaited_once_with(["go", "mod", "tidy"], cwd=tmp_path)
