"""Test that project structure is correct and modules can be imported."""

from pathlib import Path

import core.detect
import core.models
import core.parse_go
import core.parse_node
import core.versions
from core.models import Repository, RepositoryKind


def test_core_modules_importable():
    """Ensure core modules can be imported."""
    # This will fail if modules have syntax errors or missing dependencies

    # Basic smoke test - ensure key classes exist
    assert hasattr(core.models, "Repository")
    assert hasattr(core.models, "DependencyRecord")
    assert hasattr(core.models, "UpdateResult")
    assert hasattr(core.detect, "identify")
    assert hasattr(core.versions, "classify")
    assert hasattr(core.parse_node, "extract_dependencies")
    assert hasattr(core.parse_go, "parse_go_mod")


def test_model_creation():
    """Test that basic models can be instantiated."""
    repo = Repository(
        path=Path("/work/app"),
        kind=RepositoryKind.NPM,
        manifest_path=Path("/work/app/package.json"),
    )
    assert repo.name == "app"
    assert repo.lock_path is None
    assert repo.kind.value == "npm"
