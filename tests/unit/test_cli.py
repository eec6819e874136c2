"""Tests for CLI functionality."""

import json
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from apps.cli.main import app
from core.errors import NoRepositoriesError
from core.models import PackageChange, RepositoryKind, RepositoryReport, UpdateType
from core.pipeline import RunResult
from core.report import build_consolidated_report, build_error_report

ENV_VARS = (
    "REPO_PATHS", "BASE_DIR", "REPORT_PATH", "DOCUMENT_PATH", "DOCUMENT_FORMAT",
    "GENERATE_SEPARATE_REPORTS", "NPM_REGISTRY_URL", "REGISTRY_TIMEOUT",
    "COMMAND_TIMEOUT", "GO_LATEST_VERSION", "DRY_RUN", "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Run every CLI test without configuration from the environment."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def no_logging_setup():
    """Keep the CLI from replacing the root logging handlers."""
    with patch("apps.cli.main.configure_logging") as mock_configure:
        yield mock_configure


def sample_report():
    repo = RepositoryReport(
        path=Path("/work/web-app"),
        name="web-app",
        kind=RepositoryKind.NPM,
        package_count=2,
        auto_update_packages={"axios": PackageChange("^0.21.1", "^0.21.4", UpdateType.PATCH)},
        manual_update_packages={"react": PackageChange("17.0.2", "18.2.0", UpdateType.MAJOR)},
    )
    return build_consolidated_report([repo], timestamp=datetime(2024, 1, 2, tzinfo=timezone.utc))


class TestCLI:
    """Test CLI command interface."""

    def setup_method(self):
        """Setup test fixtures."""
        self.runner = CliRunner()

    def test_cli_help_command(self):
        """Should display help when called with --help."""
        result = self.runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "run" in result.output
        assert "check" in result.output

    def test_run_reports_summary(self, tmp_path):
        """Should run the pipeline and print where outputs went."""
        run_result = RunResult(
            report=sample_report(),
            report_path=tmp_path / "report.json",
            document_paths=[tmp_path / "packages.md"],
        )

        with patch("apps.cli.main.run_pipeline", new=AsyncMock(return_value=run_result)) as mock_run:
            result = self.runner.invoke(app, ["run", "--repo", str(tmp_path)])

        assert result.exit_code == 0
        assert "Report saved to" in result.output
        assert "Document saved to" in result.output
        settings = mock_run.await_args.args[0]
        assert settings.repo_paths == (tmp_path,)
        assert settings.dry_run is False

    def test_run_passes_options(self, tmp_path):
        """Should turn command line options into settings."""
        run_result = RunResult(report=sample_report())

        with patch("apps.cli.main.run_pipeline", new=AsyncMock(return_value=run_result)) as mock_run:
            result = self.runner.invoke(app, [
                "run",
                "--base-dir", str(tmp_path),
                "--format", "HTML",
                "--document", str(tmp_path / "out" / "packages.html"),
                "--no-separate",
                "--dry-run",
            ])

        assert result.exit_code == 0
        settings = mock_run.await_args.args[0]
        assert settings.repo_paths == ()
        assert settings.base_dir == tmp_path
        assert settings.document_format == "html"
        assert settings.generate_separate_reports is False
        assert settings.dry_run is True

    def test_run_reads_environment(self, tmp_path, monkeypatch):
        """Should pick up REPO_PATHS when no option is given."""
        monkeypatch.setenv("REPO_PATHS", str(tmp_path))
        run_result = RunResult(report=sample_report())

        with patch("apps.cli.main.run_pipeline", new=AsyncMock(return_value=run_result)) as mock_run:
            result = self.runner.invoke(app, ["run"])

        assert result.exit_code == 0
        assert mock_run.await_args.args[0].repo_paths == (tmp_path,)

    def test_run_without_repositories(self, tmp_path):
        """Should exit with status 1 when nothing is found."""
        empty = tmp_path / "empty"
        empty.mkdir()

        result = self.runner.invoke(app, ["run", "--repo", str(empty)])

        assert result.exit_code == 1
        assert "No repositories found" in result.output

    def test_run_pipeline_error(self, tmp_path):
        """Should exit with status 1 on a fatal error."""
        failing = AsyncMock(side_effect=NoRepositoriesError("No repositories found."))

        with patch("apps.cli.main.run_pipeline", new=failing):
            result = self.runner.invoke(app, ["run", "--repo", str(tmp_path)])

        assert result.exit_code == 1
        assert "Error" in result.output

    def test_invalid_configuration(self, monkeypatch):
        """Should exit with status 1 for invalid environment values."""
        monkeypatch.setenv("DOCUMENT_FORMAT", "pdf")

        result = self.runner.invoke(app, ["run"])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output

    def test_invalid_format_option(self, tmp_path):
        """Should reject unsupported document formats."""
        result = self.runner.invoke(app, ["run", "--repo", str(tmp_path), "--format", "pdf"])

        assert result.exit_code == 1

    def test_check_prints_packages(self, npm_repo):
        """Should classify one repository without writing anything."""
        with patch("apps.cli.main.analyze", new=AsyncMock(return_value=sample_report())) as mock_analyze:
            result = self.runner.invoke(app, ["check", str(npm_repo.path)])

        assert result.exit_code == 0
        assert "axios" in result.output
        assert "react" in result.output
        repositories, settings = mock_analyze.await_args.args
        assert [r.path for r in repositories] == [npm_repo.path]
        assert settings.dry_run is True
        assert json.loads(npm_repo.manifest_path.read_text())["dependencies"]["axios"] == "^0.21.1"

    def test_check_without_manifest(self, tmp_path):
        """Should fail when the directory has no manifest."""
        result = self.runner.invoke(app, ["check", str(tmp_path)])

        assert result.exit_code == 1
        assert "No package.json or go.mod found" in result.output

    def test_check_repository_error(self, go_repo):
        """Should exit with status 1 when the repository cannot be read."""
        report = build_consolidated_report([build_error_report(go_repo, "no module declaration")])

        with patch("apps.cli.main.analyze", new=AsyncMock(return_value=report)):
            result = self.runner.invoke(app, ["check", str(go_repo.path)])

        assert result.exit_code == 1
        assert "no module declaration" in result.output
