"""Repository and consolidated reports.

Usage:
    repo_report = build_repository_report(repository, records, update_result)
    report = build_consolidated_report([repo_report, ...])
    write_report(report, settings.report_path)
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .models import (
    ConsolidatedReport,
    DependencyRecord,
    PackageChange,
    Repository,
    RepositoryKind,
    RepositoryReport,
    ReportSummary,
    UnresolvedPackage,
    UpdateResult,
    UpdateType,
)

logger = logging.getLogger(__name__)

MANUAL_TYPES = (UpdateType.MINOR, UpdateType.MAJOR)


def _update_results(kind: RepositoryKind, result: UpdateResult) -> dict[str, Any]:
    if kind is RepositoryKind.GO:
        details: dict[str, Any] = {
            "goModUpdated": result.manifest_updated,
            "goModTidied": bool(result.tidied),
        }
    else:
        details = {
            "packageLockUpdated": bool(result.lock_updated),
            "updatedDependencies": {
                name: {
                    "type": change.section,
                    "from": change.from_version,
                    "to": change.to_version,
                }
                for name, change in result.changed.items()
            },
        }
    if result.error:
        details["error"] = result.error
    return details


def build_repository_report(
    repository: Repository,
    records: dict[str, DependencyRecord],
    update_result: UpdateResult | None = None,
) -> RepositoryReport:
    """Partition classified dependencies into report buckets.

    ``current`` goes to the current bucket, auto-updatable (patch) records to
    the auto-updated bucket, ``minor``/``major`` to the manual bucket and
    ``unknown`` to the unresolved bucket.

    Args:
        repository: Repository the records belong to
        records: Classified dependencies
        update_result: Outcome of the update step, if one ran

    Returns:
        Report for the repository
    """
    changed = update_result.changed if update_result else {}
    report = RepositoryReport(
        path=repository.path,
        name=repository.name,
        kind=repository.kind,
        package_count=len(records),
        auto_updated=bool(update_result and update_result.updated),
    )

    for name, record in records.items():
        if record.update_type is UpdateType.CURRENT:
            report.current_packages[name] = record.installed
        elif record.can_auto_update:
            # Prefer the manifest values actually written, e.g. ^0.21.1 -> ^0.21.4
            change = changed.get(name)
            report.auto_update_packages[name] = PackageChange(
                from_version=change.from_version if change else record.installed,
                to_version=change.to_version if change else str(record.latest),
                update_type=record.update_type,
            )
        elif record.update_type in MANUAL_TYPES:
            report.manual_update_packages[name] = PackageChange(
                from_version=record.installed,
                to_version=str(record.latest),
                update_type=record.update_type,
            )
        else:
            report.unresolved_packages[name] = UnresolvedPackage(
                installed=record.installed, latest=record.latest
            )

    if update_result and (update_result.updated or update_result.error):
        report.update_results = _update_results(repository.kind, update_result)

    return report


def build_error_report(repository: Repository, message: str) -> RepositoryReport:
    """Report entry for a repository that could not be processed."""
    return RepositoryReport(
        path=repository.path,
        name=repository.name,
        kind=repository.kind,
        error=message,
    )


def build_consolidated_report(
    repository_reports: list[RepositoryReport],
    timestamp: datetime | None = None,
) -> ConsolidatedReport:
    """Sum repository counts into one report stamped with the current time."""
    summary = ReportSummary(
        repository_count=len(repository_reports),
        total_packages=sum(r.package_count for r in repository_reports),
        total_auto_updated=sum(r.auto_update_count for r in repository_reports),
        total_manual_update_needed=sum(r.manual_update_count for r in repository_reports),
        total_current=sum(r.current_count for r in repository_reports),
        total_unresolved=sum(r.unresolved_count for r in repository_reports),
    )
    return ConsolidatedReport(
        timestamp=timestamp or datetime.now(timezone.utc),
        summary=summary,
        repositories=list(repository_reports),
    )


def _change_dict(change: PackageChange) -> dict[str, str]:
    return {
        "from": change.from_version,
        "to": change.to_version,
        "updateType": change.update_type.value,
    }


def repository_to_dict(report: RepositoryReport) -> dict[str, Any]:
    """Build the JSON-serializable form of one repository report."""
    data: dict[str, Any] = {
        "path": str(report.path),
        "name": report.name,
        "type": report.kind.value,
        "packageCount": report.package_count,
        "autoUpdateCount": report.auto_update_count,
        "manualUpdateCount": report.manual_update_count,
        "currentCount": report.current_count,
        "unresolvedCount": report.unresolved_count,
        "autoUpdated": report.auto_updated,
        "autoUpdatePackages": {
            name: _change_dict(change) for name, change in report.auto_update_packages.items()
        },
        "manualUpdatePackages": {
            name: _change_dict(change) for name, change in report.manual_update_packages.items()
        },
        "currentPackages": {
            name: {"version": version} for name, version in report.current_packages.items()
        },
        "unresolvedPackages": {
            name: {"installed": pkg.installed, "latest": pkg.latest}
            for name, pkg in report.unresolved_packages.items()
        },
    }
    if report.update_results is not None:
        data["updateResults"] = report.update_results
    if report.error is not None:
        data["error"] = report.error
    return data


def to_dict(report: ConsolidatedReport) -> dict[str, Any]:
    """Build the JSON-serializable form of a consolidated report."""
    s = report.summary
    return {
        "timestamp": report.timestamp.isoformat(),
        "summary": {
            "repositoryCount": s.repository_count,
            "totalPackages": s.total_packages,
            "totalAutoUpdated": s.total_auto_updated,
            "totalManualUpdateNeeded": s.total_manual_update_needed,
            "totalCurrent": s.total_current,
            "totalUnresolved": s.total_unresolved,
        },
        "repositories": [repository_to_dict(r) for r in report.repositories],
    }


def _change_from_dict(data: dict) -> PackageChange:
    return PackageChange(
        from_version=data["from"],
        to_version=data["to"],
        update_type=UpdateType(data["updateType"]),
    )


def repository_from_dict(data: dict[str, Any]) -> RepositoryReport:
    """Rebuild a repository report from its JSON form."""
    return RepositoryReport(
        path=Path(data["path"]),
        name=data["name"],
        kind=RepositoryKind(data.get("type", RepositoryKind.NPM.value)),
        package_count=data.get("packageCount", 0),
        auto_updated=data.get("autoUpdated", False),
        auto_update_packages={
            name: _change_from_dict(change)
            for name, change in data.get("autoUpdatePackages", {}).items()
        },
        manual_update_packages={
            name: _change_from_dict(change)
            for name, change in data.get("manualUpdatePackages", {}).items()
        },
        current_packages={
            name: pkg["version"] for name, pkg in data.get("currentPackages", {}).items()
        },
        unresolved_packages={
            name: UnresolvedPackage(installed=pkg["installed"], latest=pkg.get("latest"))
            for name, pkg in data.get("unresolvedPackages", {}).items()
        },
        update_results=data.get("updateResults"),
        error=data.get("error"),
    )


def from_dict(data: dict[str, Any]) -> ConsolidatedReport:
    """Rebuild a consolidated report from its JSON form."""
    repositories = [repository_from_dict(r) for r in data.get("repositories", [])]
    return build_consolidated_report(
        repositories, timestamp=datetime.fromisoformat(data["timestamp"])
    )


def render_json(report: ConsolidatedReport, indent: int = 2) -> str:
    """Render the report as JSON string."""
    return json.dumps(to_dict(report), indent=indent, ensure_ascii=False)


def write_report(report: ConsolidatedReport, path: Path) -> Path:
    """Write the JSON report, creating parent directories.

    Returns:
        The path written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_json(report) + "\n", encoding="utf-8")
    logger.debug("Wrote JSON report to %s", path)
    return path


def read_report(path: Path) -> ConsolidatedReport | None:
    """Load a previously written JSON report, None if there is none."""
    path = Path(path)
    if not path.is_file():
        return None
    return from_dict(json.loads(path.read_text(encoding="utf-8")))
