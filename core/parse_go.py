"""Go go.mod parsing."""

import re
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ManifestError

MODULE_LINE = re.compile(r"^\s*module\s+(\S+)", re.MULTILINE)
GO_LINE = re.compile(r"^\s*go\s+(\d+\.\d+(?:\.\d+)?)", re.MULTILINE)
REQUIRE_LINE = re.compile(r"^\s*require\s+([^\s(]\S*)\s+(\S+)", re.MULTILINE)
REQUIRE_BLOCK = re.compile(r"^\s*require\s*\(([^)]*)\)", re.MULTILINE)


@dataclass
class GoModule:
    """A parsed go.mod file."""

    module: str = ""
    go: str = ""
    requires: dict[str, str] = field(default_factory=dict)


def _strip_v(version: str) -> str:
    return version[1:] if version.startswith("v") else version


def _strip_comment(line: str) -> str:
    return line.split("//", 1)[0].strip()


def parse_go_mod(content: str) -> GoModule:
    """Parse go.mod content.

    Single-line requires are read before require blocks; a module declared in
    both keeps the block version.

    Args:
        content: The go.mod file content

    Returns:
        Parsed module with leading ``v`` removed from every version
    """
    go_mod = GoModule()

    module_match = MODULE_LINE.search(content)
    if module_match:
        go_mod.module = module_match.group(1).strip()

    go_match = GO_LINE.search(content)
    if go_match:
        go_mod.go = go_match.group(1).strip()

    for match in REQUIRE_LINE.finditer(content):
        go_mod.requires[match.group(1)] = _strip_v(match.group(2))

    for block in REQUIRE_BLOCK.finditer(content):
        for line in block.group(1).splitlines():
            parts = _strip_comment(line).split()
            if len(parts) >= 2:
                go_mod.requires[parts[0]] = _strip_v(parts[1])

    return go_mod


def read_go_mod(path: Path) -> GoModule:
    """Read and parse a go.mod file.

    Raises:
        ManifestError: If the file is unreadable or declares no module
    """
    try:
        content = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestError(f"Failed to read go.mod file at {path}: {e}") from e

    go_mod = parse_go_mod(content)
    if not go_mod.module:
        raise ManifestError(f"Failed to read go.mod file at {path}: no module declaration")
    return go_mod
