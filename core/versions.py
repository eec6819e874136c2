"""Version comparison and update classification.

Only patch-level changes are considered safe to apply unattended; any change
in the major or minor component is left for a human.
"""

import logging
import re

from packaging.version import InvalidVersion, Version

from .models import DependencyRecord, UpdateType

logger = logging.getLogger(__name__)

RANGE_OPERATORS = re.compile(r"[\^~>=<]")
# Semver prerelease and build metadata, e.g. -next.5 or +incompatible
VERSION_SUFFIX = re.compile(r"[-+].*$")


def normalize(version: str) -> str:
    """Strip range operators, whitespace and a leading ``v`` from a version."""
    stripped = RANGE_OPERATORS.sub("", version).strip()
    if stripped[:1] in ("v", "V"):
        stripped = stripped[1:]
    return stripped


def parse_triple(version: str) -> tuple[int, int, int] | None:
    """Coerce a version string to ``(major, minor, patch)``.

    Missing components count as zero, so ``1.21`` becomes ``(1, 21, 0)``.

    Args:
        version: Raw or normalized version string

    Returns:
        The triple, or None if the string is not a version
    """
    text = VERSION_SUFFIX.sub("", normalize(version))
    if not text:
        return None
    try:
        parsed = Version(text)
    except InvalidVersion:
        return None
    release = tuple(parsed.release) + (0, 0, 0)
    return release[0], release[1], release[2]


def classify(installed: str, latest: str | None) -> tuple[UpdateType, bool]:
    """Classify the update from ``installed`` to ``latest``.

    The first differing component of the two triples decides the update type.
    Direction is not considered: a locally newer version is classified by the
    same magnitude rule (see :func:`is_downgrade`).

    Args:
        installed: Installed version
        latest: Latest published version, None when the lookup failed

    Returns:
        Tuple of (update type, whether it can be applied automatically)
    """
    if latest is None:
        return UpdateType.UNKNOWN, False

    if normalize(installed) == normalize(latest):
        return UpdateType.CURRENT, False

    old = parse_triple(installed)
    new = parse_triple(latest)
    if old is None or new is None:
        return UpdateType.UNKNOWN, False

    if old[0] != new[0]:
        return UpdateType.MAJOR, False
    if old[1] != new[1]:
        return UpdateType.MINOR, False
    if old[2] != new[2]:
        return UpdateType.PATCH, True

    return UpdateType.CURRENT, False


def is_downgrade(installed: str, latest: str | None) -> bool:
    """Check whether the installed version is ahead of the latest one."""
    if latest is None:
        return False
    old = parse_triple(installed)
    new = parse_triple(latest)
    if old is None or new is None:
        return False
    return old > new


def classify_all(
    installed: dict[str, str], latest: dict[str, str | None]
) -> dict[str, DependencyRecord]:
    """Classify every installed dependency against its latest version.

    Args:
        installed: Package name to installed version
        latest: Package name to latest version (missing means lookup failed)

    Returns:
        Package name to dependency record, in ``installed`` order
    """
    records: dict[str, DependencyRecord] = {}
    for name, version in installed.items():
        newest = latest.get(name)
        update_type, can_auto_update = classify(version, newest)
        if update_type not in (UpdateType.CURRENT, UpdateType.UNKNOWN) and is_downgrade(
            version, newest
        ):
            logger.warning(
                "%s: installed %s is newer than registry latest %s; classified as %s",
                name, version, newest, update_type.value,
            )
        records[name] = DependencyRecord(
            name=name,
            installed=version,
            latest=newest,
            update_type=update_type,
            can_auto_update=can_auto_update,
        )
    return records
