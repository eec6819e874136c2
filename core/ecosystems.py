"""Per-ecosystem read / classify / update behaviour.

Each repository kind has one handler; the pipeline picks it by
:class:`RepositoryKind` through :func:`build_handlers`.
"""

import logging
from typing import Protocol

from . import update_go, update_node
from .config import Settings
from .models import DependencyRecord, Repository, RepositoryKind, UpdateResult
from .parse_go import read_go_mod
from .parse_node import (
    extract_dependencies,
    read_package_json,
    read_package_lock,
    resolve_installed_versions,
)
from .resolve_go import latest_go_version
from .resolve_node import NpmResolver
from .shell import CommandRunner
from .update_go import TOOLCHAIN
from .versions import classify_all

logger = logging.getLogger(__name__)


class EcosystemHandler(Protocol):
    """Operations the pipeline needs for one repository kind."""

    def read(self, repository: Repository) -> dict[str, str]:
        """Return name -> installed version; raises ManifestError."""

    async def classify_all(self, installed: dict[str, str]) -> dict[str, DependencyRecord]:
        """Look up latest versions and classify every dependency."""

    async def apply_updates(
        self, repository: Repository, approved: dict[str, str]
    ) -> UpdateResult:
        """Write approved versions; never raises."""


class NpmHandler:
    """package.json / package-lock.json repositories."""

    def __init__(self, resolver: NpmResolver, runner: CommandRunner):
        self.resolver = resolver
        self.runner = runner

    def read(self, repository: Repository) -> dict[str, str]:
        logger.info("Reading package.json...")
        package_json = read_package_json(repository.manifest_path)

        lock = None
        if repository.lock_path:
            logger.info("Reading package-lock.json...")
            lock = read_package_lock(repository.lock_path)

        declared = extract_dependencies(package_json)
        logger.info("Found %d dependencies", len(declared))
        return resolve_installed_versions(lock, declared)

    async def classify_all(self, installed: dict[str, str]) -> dict[str, DependencyRecord]:
        if not installed:
            return {}
        logger.info("Fetching latest versions from npm...")
        latest = await self.resolver.fetch_latest(installed)
        return classify_all(installed, latest)

    async def apply_updates(
        self, repository: Repository, approved: dict[str, str]
    ) -> UpdateResult:
        return await update_node.apply_updates(repository, approved, self.runner)


class GoHandler:
    """go.mod repositories; only the toolchain version is tracked."""

    def __init__(self, latest_version: str, runner: CommandRunner):
        self.latest_version = latest_version
        self.runner = runner

    def read(self, repository: Repository) -> dict[str, str]:
        logger.info("Reading go.mod...")
        go_mod = read_go_mod(repository.manifest_path)
        logger.info("Module: %s", go_mod.module)
        logger.info("Go version: %s", go_mod.go or "(not declared)")
        return {TOOLCHAIN: go_mod.go}

    async def classify_all(self, installed: dict[str, str]) -> dict[str, DependencyRecord]:
        return classify_all(installed, {TOOLCHAIN: self.latest_version})

    async def apply_updates(
        self, repository: Repository, approved: dict[str, str]
    ) -> UpdateResult:
        return await update_go.apply_updates(repository, approved, self.runner)


def build_handlers(
    settings: Settings,
    resolver: NpmResolver,
    runner: CommandRunner,
) -> dict[RepositoryKind, EcosystemHandler]:
    """Create one handler per repository kind."""
    return {
        RepositoryKind.NPM: NpmHandler(resolver, runner),
        RepositoryKind.GO: GoHandler(latest_go_version(settings), runner),
    }
