"""Apply an approved toolchain version to go.mod."""

import logging
from pathlib import Path

from .errors import UpdateError
from .models import ChangedDependency, Repository, UpdateResult
from .parse_go import GO_LINE
from .shell import CommandRunner

logger = logging.getLogger(__name__)

TOOLCHAIN = "go"


def update_go_version(path: Path, new_version: str) -> ChangedDependency | None:
    """Rewrite the ``go`` directive of a go.mod file.

    Args:
        path: Path to go.mod
        new_version: Version to write, without ``v`` prefix

    Returns:
        The change written, or None if the file already held that version

    Raises:
        UpdateError: If the file cannot be read, has no go directive, or
            cannot be written
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise UpdateError(f"Failed to update Go version: {e}") from e

    match = GO_LINE.search(content)
    if not match:
        raise UpdateError(f"Failed to update Go version: no go directive in {path}")

    current = match.group(1)
    if current == new_version:
        return None

    updated = content[:match.start(1)] + new_version + content[match.end(1):]
    try:
        path.write_text(updated, encoding="utf-8")
    except OSError as e:
        raise UpdateError(f"Failed to update Go version: {e}") from e

    return ChangedDependency(section=TOOLCHAIN, from_version=current, to_version=new_version)


async def apply_updates(
    repository: Repository,
    approved: dict[str, str],
    runner: CommandRunner,
) -> UpdateResult:
    """Apply an approved toolchain version to a Go repository.

    Only the ``go`` entry of ``approved`` is used. ``go mod tidy`` runs after
    a rewrite; if it fails only ``tidied`` is cleared.
    """
    new_version = approved.get(TOOLCHAIN)
    if not new_version:
        return UpdateResult(updated=False, message="No packages to update", tidied=False)

    try:
        change = update_go_version(repository.manifest_path, new_version)
    except UpdateError as e:
        logger.error("%s", e)
        return UpdateResult(updated=False, error=str(e), tidied=False)

    if change is None:
        return UpdateResult(updated=False, message="Go version already up to date", tidied=False)

    outcome = await runner.tidy_modules(repository.path)
    return UpdateResult(
        updated=True,
        changed={TOOLCHAIN: change},
        manifest_updated=True,
        tidied=outcome.ok,
    )
