"""Repository discovery."""

import logging
import os
from pathlib import Path

from .config import Settings
from .detect import GO_MANIFEST, NPM_LOCK, NPM_MANIFEST
from .models import Repository, RepositoryKind

logger = logging.getLogger(__name__)

IGNORED_DIRS = {"node_modules", "vendor"}


def _npm_repository(repo_path: Path, manifest_path: Path) -> Repository:
    lock_path = repo_path / NPM_LOCK
    return Repository(
        path=repo_path,
        kind=RepositoryKind.NPM,
        manifest_path=manifest_path,
        lock_path=lock_path if lock_path.exists() else None,
    )


def _inspect(repo_path: Path) -> Repository | None:
    """Classify a single configured repository path."""
    manifest = repo_path / NPM_MANIFEST
    if manifest.is_file():
        return _npm_repository(repo_path, manifest)

    go_mod = repo_path / GO_MANIFEST
    if go_mod.is_file():
        return Repository(path=repo_path, kind=RepositoryKind.GO, manifest_path=go_mod)

    return None


def find_files(base_dir: Path, filename: str) -> list[Path]:
    """Find files by name below ``base_dir``, skipping dependency install dirs.

    Args:
        base_dir: Directory to search recursively
        filename: Exact file name, e.g. ``package.json``

    Returns:
        Sorted list of matching file paths
    """
    matches = []
    for root, dirnames, filenames in os.walk(base_dir):
        # Pruned in place so dependency install dirs are never entered
        dirnames[:] = [d for d in dirnames if d not in IGNORED_DIRS]
        if filename in filenames:
            matches.append(Path(root) / filename)
    return sorted(matches)


def discover(settings: Settings) -> list[Repository]:
    """Find the repositories to scan.

    Explicit ``repo_paths`` win over ``base_dir``. Configured paths that do
    not exist or hold no manifest are skipped.

    Args:
        settings: Run settings

    Returns:
        Repositories in discovery order
    """
    repositories: list[Repository] = []

    if settings.repo_paths:
        for repo_path in settings.repo_paths:
            repo_path = Path(repo_path)
            if not repo_path.is_dir():
                logger.debug("Skipping %s: not a directory", repo_path)
                continue
            repository = _inspect(repo_path)
            if repository is None:
                logger.debug("Skipping %s: no %s or %s", repo_path, NPM_MANIFEST, GO_MANIFEST)
                continue
            repositories.append(repository)
        return repositories

    if settings.base_dir is None:
        return repositories

    base_dir = Path(settings.base_dir)
    if not base_dir.is_dir():
        logger.debug("Skipping base directory %s: not a directory", base_dir)
        return repositories

    for manifest in find_files(base_dir, NPM_MANIFEST):
        repositories.append(_npm_repository(manifest.parent, manifest))

    # A directory holding both files is treated as an npm repository
    npm_paths = {repository.path for repository in repositories}
    for go_mod in find_files(base_dir, GO_MANIFEST):
        if go_mod.parent in npm_paths:
            continue
        repositories.append(
            Repository(path=go_mod.parent, kind=RepositoryKind.GO, manifest_path=go_mod)
        )

    return repositories
