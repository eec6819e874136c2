"""Core data models for depsweep."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path


class RepositoryKind(str, Enum):
    """Ecosystem a repository belongs to."""

    NPM = "npm"  # package.json + optional package-lock.json
    GO = "go"  # go.mod toolchain version


class UpdateType(str, Enum):
    """Outcome of comparing an installed version to the latest one."""

    CURRENT = "current"
    PATCH = "patch"
    MINOR = "minor"
    MAJOR = "major"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Repository:
    """A discovered repository and the files that describe its dependencies."""

    path: Path
    kind: RepositoryKind
    manifest_path: Path
    lock_path: Path | None = None

    @property
    def name(self) -> str:
        return self.path.name


@dataclass
class DependencyRecord:
    """Classification of one dependency of one repository."""

    name: str
    installed: str
    latest: str | None
    update_type: UpdateType = UpdateType.UNKNOWN
    can_auto_update: bool = False


@dataclass(frozen=True)
class ChangedDependency:
    """A manifest entry rewritten by an update."""

    section: str  # dependencies, devDependencies, optionalDependencies, go
    from_version: str
    to_version: str


@dataclass
class UpdateResult:
    """Outcome of applying approved versions to a repository."""

    updated: bool
    changed: dict[str, ChangedDependency] = field(default_factory=dict)
    manifest_updated: bool = False
    lock_updated: bool | None = None  # npm only
    tidied: bool | None = None  # go only
    error: str | None = None
    message: str | None = None


@dataclass(frozen=True)
class CommandOutcome:
    """Result of a best-effort external command.

    Failures are returned, never raised, so callers can only degrade a flag.
    """

    ok: bool
    reason: str | None = None
    stdout: str = ""
    stderr: str = ""

    @classmethod
    def success(cls, stdout: str = "", stderr: str = "") -> "CommandOutcome":
        return cls(ok=True, stdout=stdout, stderr=stderr)

    @classmethod
    def failed(cls, reason: str, stdout: str = "", stderr: str = "") -> "CommandOutcome":
        return cls(ok=False, reason=reason, stdout=stdout, stderr=stderr)


@dataclass(frozen=True)
class PackageChange:
    """Entry of the auto-updated or manual-update bucket."""

    from_version: str
    to_version: str
    update_type: UpdateType


@dataclass(frozen=True)
class UnresolvedPackage:
    """Entry of the unresolved bucket (classification ``unknown``)."""

    installed: str
    latest: str | None


@dataclass
class RepositoryReport:
    """Per-repository summary derived from dependency records."""

    path: Path
    name: str
    kind: RepositoryKind
    package_count: int = 0
    auto_updated: bool = False
    auto_update_packages: dict[str, PackageChange] = field(default_factory=dict)
    manual_update_packages: dict[str, PackageChange] = field(default_factory=dict)
    current_packages: dict[str, str] = field(default_factory=dict)
    unresolved_packages: dict[str, UnresolvedPackage] = field(default_factory=dict)
    update_results: dict | None = None
    error: str | None = None

    @property
    def auto_update_count(self) -> int:
        return len(self.auto_update_packages)

    @property
    def manual_update_count(self) -> int:
        return len(self.manual_update_packages)

    @property
    def current_count(self) -> int:
        return len(self.current_packages)

    @property
    def unresolved_count(self) -> int:
        return len(self.unresolved_packages)


@dataclass(frozen=True)
class ReportSummary:
    """Totals across all repository reports."""

    repository_count: int = 0
    total_packages: int = 0
    total_auto_updated: int = 0
    total_manual_update_needed: int = 0
    total_current: int = 0
    total_unresolved: int = 0


@dataclass
class ConsolidatedReport:
    """Report for a whole run; the only artifact persisted to disk."""

    timestamp: datetime
    summary: ReportSummary
    repositories: list[RepositoryReport]
