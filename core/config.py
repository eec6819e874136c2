"""Run configuration loaded from environment variables."""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, ValidationError

from .errors import ConfigError

DEFAULT_REPORT_PATH = Path("reports") / "report.json"
DEFAULT_DOCUMENT_PATH = Path("reports") / "packages.md"
DEFAULT_REGISTRY_URL = "https://registry.npmjs.org"
DEFAULT_GO_VERSION = "1.22.0"

TRUE_VALUES = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Immutable settings for one run.

    Built once at startup and handed to every component that needs it.
    """

    model_config = ConfigDict(frozen=True)

    repo_paths: tuple[Path, ...] = ()
    base_dir: Path | None = None
    report_path: Path = DEFAULT_REPORT_PATH
    document_path: Path = DEFAULT_DOCUMENT_PATH
    document_format: Literal["markdown", "html"] = "markdown"
    generate_separate_reports: bool = True
    registry_url: str = DEFAULT_REGISTRY_URL
    registry_timeout: float = 30.0
    command_timeout: float = 300.0
    go_latest_version: str = DEFAULT_GO_VERSION
    dry_run: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        cwd: Path | None = None,
    ) -> "Settings":
        """Build settings from environment variables.

        Args:
            environ: Mapping to read from, defaults to ``os.environ``
            cwd: Directory used when no repository path is configured

        Returns:
            Settings for the run

        Raises:
            ConfigError: If a variable holds an invalid value
        """
        env = os.environ if environ is None else environ
        values: dict = {}

        # REPO_PATHS wins over BASE_DIR; neither means the working directory
        if env.get("REPO_PATHS"):
            values["repo_paths"] = tuple(
                Path(os.path.normpath(p.strip()))
                for p in env["REPO_PATHS"].split(",")
                if p.strip()
            )
        elif env.get("BASE_DIR"):
            values["base_dir"] = Path(os.path.normpath(env["BASE_DIR"]))
        else:
            values["repo_paths"] = (Path(cwd or Path.cwd()),)

        if env.get("REPORT_PATH"):
            values["report_path"] = Path(os.path.normpath(env["REPORT_PATH"]))
        if env.get("DOCUMENT_PATH"):
            values["document_path"] = Path(os.path.normpath(env["DOCUMENT_PATH"]))
        if env.get("DOCUMENT_FORMAT"):
            values["document_format"] = env["DOCUMENT_FORMAT"].strip().lower()

        # Separate reports stay on unless explicitly disabled
        if "GENERATE_SEPARATE_REPORTS" in env:
            values["generate_separate_reports"] = (
                env["GENERATE_SEPARATE_REPORTS"].strip().lower() != "false"
            )

        if env.get("NPM_REGISTRY_URL"):
            values["registry_url"] = env["NPM_REGISTRY_URL"].rstrip("/")
        if env.get("REGISTRY_TIMEOUT"):
            values["registry_timeout"] = env["REGISTRY_TIMEOUT"]
        if env.get("COMMAND_TIMEOUT"):
            values["command_timeout"] = env["COMMAND_TIMEOUT"]
        if env.get("GO_LATEST_VERSION"):
            values["go_latest_version"] = env["GO_LATEST_VERSION"].strip().lstrip("v")
        if "DRY_RUN" in env:
            values["dry_run"] = env["DRY_RUN"].strip().lower() in TRUE_VALUES
        if env.get("LOG_LEVEL"):
            values["log_level"] = env["LOG_LEVEL"].strip().upper()

        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    def with_overrides(self, **changes) -> "Settings":
        """Return a copy with the given fields replaced (``None`` values ignored)."""
        changes = {key: value for key, value in changes.items() if value is not None}
        if not changes:
            return self
        try:
            return self.model_validate({**self.model_dump(), **changes})
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    @property
    def document_extension(self) -> str:
        return ".html" if self.document_format == "html" else ".md"
