"""Ecosystem detection for dependency manifests."""

import re

from .models import RepositoryKind

NPM_MANIFEST = "package.json"
NPM_LOCK = "package-lock.json"
GO_MANIFEST = "go.mod"


def identify(content: str, filename: str | None = None) -> RepositoryKind | None:
    """Detect ecosystem from content and filename hints.

    Args:
        content: The manifest file content
        filename: Optional filename for additional context

    Returns:
        Detected ecosystem, or None when it cannot be told
    """
    # Filename-based detection (takes precedence)
    if filename:
        if filename.endswith(NPM_MANIFEST):
            return RepositoryKind.NPM
        if filename.endswith(GO_MANIFEST):
            return RepositoryKind.GO

    # Content-based detection
    # go.mod patterns
    go_patterns = [
        r"^module\s+\S+",  # module example.com/app
        r"^go\s+\d+\.\d+",  # go 1.21
    ]

    if all(re.search(pattern, content, re.MULTILINE) for pattern in go_patterns):
        return RepositoryKind.GO

    # package.json patterns
    npm_patterns = [
        r'"dependencies"\s*:',
        r'"devDependencies"\s*:',
        r'"optionalDependencies"\s*:',
    ]

    for pattern in npm_patterns:
        if re.search(pattern, content):
            return RepositoryKind.NPM

    return None
