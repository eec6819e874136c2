"""External package manager and toolchain commands.

Every command is best effort: failures come back as a failed
:class:`CommandOutcome` and are never raised.
"""

import asyncio
import logging
from pathlib import Path

from .models import CommandOutcome

logger = logging.getLogger(__name__)


class CommandRunner:
    """Runs external commands inside a repository."""

    def __init__(self, timeout: float = 300.0):
        self.timeout = timeout

    async def run(self, args: list[str], cwd: Path) -> CommandOutcome:
        """Run a command and wait for it.

        stdin is closed so commands that prompt for input fail instead of
        hanging.

        Args:
            args: Command and arguments, e.g. ``["npm", "install"]``
            cwd: Directory to run the command in

        Returns:
            Outcome carrying stdout, stderr and a failure reason if any
        """
        command = " ".join(args)
        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                cwd=cwd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            return CommandOutcome.failed(f"Could not start {command}: {e}")

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), self.timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            return CommandOutcome.failed(f"{command} timed out after {self.timeout:g}s")

        out = stdout.decode(errors="replace").strip()
        err = stderr.decode(errors="replace").strip()
        if process.returncode != 0:
            return CommandOutcome.failed(
                f"{command} exited with code {process.returncode}: {err or out}",
                stdout=out,
                stderr=err,
            )
        return CommandOutcome.success(stdout=out, stderr=err)

    async def install_lock(self, repo_path: Path) -> CommandOutcome:
        """Refresh package-lock.json with ``npm install``."""
        logger.info("Running npm install in %s...", repo_path)
        outcome = await self.run(["npm", "install"], cwd=repo_path)

        if outcome.ok:
            warnings = [
                line for line in outcome.stderr.splitlines()
                if line.strip() and not line.startswith("npm notice")
            ]
            if warnings:
                logger.warning("Warning during npm install: %s", "\n".join(warnings))
        else:
            logger.error("Error running npm install in %s: %s", repo_path, outcome.reason)
        return outcome

    async def tidy_modules(self, repo_path: Path) -> CommandOutcome:
        """Tidy go.mod and go.sum with ``go mod tidy``."""
        logger.info("Running go mod tidy in %s...", repo_path)
        outcome = await self.run(["go", "mod", "tidy"], cwd=repo_path)
        if not outcome.ok:
            logger.warning("Failed to run go mod tidy: %s", outcome.reason)
        return outcome
