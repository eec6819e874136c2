"""Node.js package.json and package-lock.json parsing."""

import json
import logging
from pathlib import Path

from .errors import ManifestError
from .versions import RANGE_OPERATORS

logger = logging.getLogger(__name__)

# Merge order matters: later sections overwrite earlier ones
DEPENDENCY_SECTIONS = ("dependencies", "devDependencies", "optionalDependencies")


def read_package_json(path: Path) -> dict:
    """Read and parse a package.json file.

    Args:
        path: Path to package.json

    Returns:
        Parsed manifest

    Raises:
        ManifestError: If the file is unreadable or not a JSON object
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ManifestError(f"Failed to read package.json at {path}: {e}") from e

    if not isinstance(data, dict):
        raise ManifestError(f"Failed to read package.json at {path}: not a JSON object")
    return data


def read_package_lock(path: Path | None) -> dict | None:
    """Read a package-lock.json file, tolerating failure.

    Args:
        path: Path to package-lock.json, or None

    Returns:
        Parsed lock file, or None if absent or unreadable
    """
    if not path:
        return None

    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("Failed to read package-lock.json at %s: %s", path, e)
        return None

    if not isinstance(data, dict):
        logger.warning("Ignoring package-lock.json at %s: not a JSON object", path)
        return None
    return data


def extract_dependencies(package_json: dict) -> dict[str, str]:
    """Merge all dependency sections into one name -> declared range map.

    Sections are applied in order dependencies, devDependencies,
    optionalDependencies, so a name declared in several keeps the value of
    the last one.
    """
    dependencies: dict[str, str] = {}
    for section in DEPENDENCY_SECTIONS:
        entries = package_json.get(section)
        if isinstance(entries, dict):
            dependencies.update({name: str(spec) for name, spec in entries.items()})
    return dependencies


def strip_range(spec: str) -> str:
    """Remove range operators from a declared range, e.g. ``^1.2.3`` -> ``1.2.3``."""
    return RANGE_OPERATORS.sub("", spec)


def _lock_version(lock: dict, name: str) -> str | None:
    # lockfileVersion 1 keys entries by package name
    legacy = lock.get("dependencies")
    if isinstance(legacy, dict):
        entry = legacy.get(name)
        if isinstance(entry, dict) and entry.get("version"):
            return str(entry["version"])
        return None

    # lockfileVersion 2+ keys entries by install path
    packages = lock.get("packages")
    if isinstance(packages, dict):
        entry = packages.get(f"node_modules/{name}")
        if isinstance(entry, dict) and entry.get("version"):
            return str(entry["version"])

    return None


def resolve_installed_versions(lock: dict | None, declared: dict[str, str]) -> dict[str, str]:
    """Find the exact installed version of each declared dependency.

    Args:
        lock: Parsed package-lock.json, or None
        declared: Name to declared range from :func:`extract_dependencies`

    Returns:
        Name to installed version. Falls back to the declared range with its
        operators stripped when there is no lock file or no lock entry.
    """
    installed: dict[str, str] = {}
    for name, spec in declared.items():
        version = _lock_version(lock, name) if lock else None
        installed[name] = version if version is not None else strip_range(spec)
    return installed
