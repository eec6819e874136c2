"""Pytest configuration and fixtures."""

import json
from unittest.mock import AsyncMock

import pytest

from core.config import Settings
from core.models import CommandOutcome, Repository, RepositoryKind


@pytest.fixture
def sample_package_json():
    """Sample package.json content for testing."""
    return {
        "name": "test-project",
        "version": "1.0.0",
        "dependencies": {
            "axios": "^0.21.1",
            "react": "^17.0.2",
        },
        "devDependencies": {
            "jest": "~29.0.0",
        },
    }


@pytest.fixture
def sample_lock_v1():
    """package-lock.json in the lockfileVersion 1 layout."""
    return {
        "name": "test-project",
        "lockfileVersion": 1,
        "dependencies": {
            "axios": {"version": "0.21.1"},
            "react": {"version": "17.0.2"},
            "jest": {"version": "29.0.3"},
        },
    }


@pytest.fixture
def sample_lock_v3():
    """package-lock.json in the lockfileVersion 2+ layout."""
    return {
        "name": "test-project",
        "lockfileVersion": 3,
        "packages": {
            "": {"name": "test-project"},
            "node_modules/axios": {"version": "0.21.1"},
            "node_modules/react": {"version": "17.0.2"},
            "node_modules/jest": {"version": "29.0.3"},
        },
    }


@pytest.fixture
def sample_go_mod():
    """Sample go.mod content for testing."""
    return """module example.com/service

go 1.21.5

require github.com/pkg/errors v0.9.1

require (
\tgithub.com/stretchr/testify v1.8.4
\tgolang.org/x/sync v0.5.0 // indirect
)
"""


@pytest.fixture
def npm_repo(tmp_path, sample_package_json):
    """npm repository on disk without a lock file."""
    repo = tmp_path / "web-app"
    repo.mkdir()
    manifest = repo / "package.json"
    manifest.write_text(json.dumps(sample_package_json, indent=2))
    return Repository(path=repo, kind=RepositoryKind.NPM, manifest_path=manifest)


@pytest.fixture
def npm_repo_with_lock(tmp_path, sample_package_json, sample_lock_v3):
    """npm repository on disk with a package-lock.json."""
    repo = tmp_path / "locked-app"
    repo.mkdir()
    manifest = repo / "package.json"
    manifest.write_text(json.dumps(sample_package_json, indent=2))
    lock = repo / "package-lock.json"
    lock.write_text(json.dumps(sample_lock_v3, indent=2))
    return Repository(path=repo, kind=RepositoryKind.NPM, manifest_path=manifest, lock_path=lock)


@pytest.fixture
def go_repo(tmp_path, sample_go_mod):
    """Go repository on disk."""
    repo = tmp_path / "service"
    repo.mkdir()
    go_mod = repo / "go.mod"
    go_mod.write_text(sample_go_mod)
    return Repository(path=repo, kind=RepositoryKind.GO, manifest_path=go_mod)


@pytest.fixture
def runner():
    """Command runner whose commands always succeed."""
    mock_runner = AsyncMock()
    mock_runner.install_lock.return_value = CommandOutcome.success()
    mock_runner.tidy_modules.return_value = CommandOutcome.success()
    return mock_runner


@pytest.fixture
def settings(tmp_path):
    """Settings writing reports into a temporary directory."""
    return Settings(
        repo_paths=(),
        report_path=tmp_path / "reports" / "report.json",
        document_path=tmp_path / "reports" / "packages.md",
    )
