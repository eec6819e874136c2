"""Apply approved version bumps to package.json."""

import json
import logging
from pathlib import Path

from .errors import UpdateError
from .models import ChangedDependency, Repository, UpdateResult
from .parse_node import DEPENDENCY_SECTIONS
from .shell import CommandRunner

logger = logging.getLogger(__name__)


def bump_dependencies(
    package_json: dict, approved: dict[str, str]
) -> dict[str, ChangedDependency]:
    """Set every approved package to ``^<version>`` in all dependency sections.

    Entries that already hold the target value are left alone, so a second
    call with the same versions changes nothing.

    Args:
        package_json: Parsed manifest, modified in place
        approved: Package name to new exact version

    Returns:
        Package name to the change written (last section wins)
    """
    changed: dict[str, ChangedDependency] = {}

    for section in DEPENDENCY_SECTIONS:
        entries = package_json.get(section)
        if not isinstance(entries, dict):
            continue

        for name, version in approved.items():
            if name not in entries:
                continue
            current = str(entries[name])
            target = f"^{version}"
            if current == target:
                continue
            entries[name] = target
            changed[name] = ChangedDependency(
                section=section, from_version=current, to_version=target
            )

    return changed


def update_package_json(path: Path, approved: dict[str, str]) -> dict[str, ChangedDependency]:
    """Rewrite package.json with the approved versions.

    The file is rewritten as a whole, and only when something changed.

    Raises:
        UpdateError: If the file cannot be read, parsed or written
    """
    path = Path(path)
    try:
        package_json = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise UpdateError(f"Failed to update package.json at {path}: {e}") from e

    changed = bump_dependencies(package_json, approved)
    if not changed:
        return changed

    try:
        path.write_text(json.dumps(package_json, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    except OSError as e:
        raise UpdateError(f"Failed to update package.json at {path}: {e}") from e

    return changed


async def apply_updates(
    repository: Repository,
    approved: dict[str, str],
    runner: CommandRunner,
) -> UpdateResult:
    """Apply approved versions to an npm repository.

    A failing ``npm install`` only clears ``lock_updated``; the manifest edit
    stays in place.

    Args:
        repository: npm repository to update
        approved: Package name to new exact version
        runner: Runner for the ``npm install`` step

    Returns:
        Update result; errors are reported in it rather than raised
    """
    if not approved:
        return UpdateResult(updated=False, message="No packages to update")

    logger.info("Updating %d packages in %s...", len(approved), repository.path)
    try:
        changed = update_package_json(repository.manifest_path, approved)
    except UpdateError as e:
        logger.error("%s", e)
        return UpdateResult(updated=False, error=str(e))

    if not changed:
        return UpdateResult(updated=False, message="Manifest already up to date")

    lock_updated = False
    if repository.lock_path:
        outcome = await runner.install_lock(repository.path)
        lock_updated = outcome.ok

    return UpdateResult(
        updated=True,
        changed=changed,
        manifest_updated=True,
        lock_updated=lock_updated,
    )
