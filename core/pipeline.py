"""Scan → classify → update → report, one repository at a time."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from .config import Settings
from .ecosystems import EcosystemHandler, build_handlers
from .errors import DepsweepError, NoRepositoriesError
from .models import ConsolidatedReport, Repository, RepositoryKind, RepositoryReport, UpdateType
from .render import write_documents
from .report import build_consolidated_report, build_error_report, build_repository_report, write_report
from .resolve_node import NpmResolver
from .scanner import discover
from .shell import CommandRunner

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """What a run produced."""

    report: ConsolidatedReport
    report_path: Path | None = None
    document_paths: list[Path] = field(default_factory=list)


async def process_repository(
    repository: Repository,
    handlers: dict[RepositoryKind, EcosystemHandler],
    dry_run: bool = False,
) -> RepositoryReport:
    """Classify one repository and apply its patch-level updates.

    Raises:
        ManifestError: If the repository's manifest cannot be read
    """
    handler = handlers[repository.kind]

    installed = handler.read(repository)
    if not installed:
        logger.info("No dependencies found in this repository.")

    logger.info("Comparing versions...")
    records = await handler.classify_all(installed)

    approved = {
        name: record.latest
        for name, record in records.items()
        if record.can_auto_update and record.latest
    }
    manual = sum(
        1 for record in records.values()
        if record.update_type in (UpdateType.MINOR, UpdateType.MAJOR)
    )
    logger.info("Found %d packages that can be automatically updated", len(approved))
    logger.info("Found %d packages that need manual updates", manual)

    update_result = None
    if approved and dry_run:
        logger.info("Dry run: leaving %s untouched", repository.manifest_path)
    elif approved:
        update_result = await handler.apply_updates(repository, approved)
        if update_result.updated:
            logger.info("Packages updated successfully")
        elif update_result.error:
            logger.warning("Failed to update packages: %s", update_result.error)
        else:
            logger.info("No packages updated: %s", update_result.message)

    return build_repository_report(repository, records, update_result)


async def analyze(
    repositories: list[Repository],
    settings: Settings,
    resolver: NpmResolver | None = None,
    runner: CommandRunner | None = None,
) -> ConsolidatedReport:
    """Process repositories in order and consolidate their reports.

    A failure in one repository becomes an ``error`` entry for it; the other
    repositories are still processed.
    """
    resolver = resolver or NpmResolver(
        registry_url=settings.registry_url, timeout=settings.registry_timeout
    )
    runner = runner or CommandRunner(timeout=settings.command_timeout)
    handlers = build_handlers(settings, resolver, runner)

    repository_reports: list[RepositoryReport] = []
    for repository in repositories:
        logger.info("Processing repository: %s", repository.path)
        try:
            repo_report = await process_repository(repository, handlers, settings.dry_run)
        except DepsweepError as e:
            logger.error("Error processing repository %s: %s", repository.path, e)
            repo_report = build_error_report(repository, str(e))
        except Exception as e:
            logger.exception("Unexpected error processing repository %s", repository.path)
            repo_report = build_error_report(repository, str(e) or type(e).__name__)
        repository_reports.append(repo_report)

    return build_consolidated_report(repository_reports)


async def run(
    settings: Settings,
    resolver: NpmResolver | None = None,
    runner: CommandRunner | None = None,
    write: bool = True,
) -> RunResult:
    """Run the whole pipeline for the configured repositories.

    Args:
        settings: Run settings
        resolver: npm resolver to use instead of the default one
        runner: Command runner to use instead of the default one
        write: Whether to write the JSON report and documents

    Returns:
        The consolidated report and the files written

    Raises:
        NoRepositoriesError: If discovery finds no repositories
    """
    logger.info("Scanning for repositories...")
    repositories = discover(settings)
    logger.info("Found %d repositories", len(repositories))
    if not repositories:
        raise NoRepositoriesError("No repositories found. Please check your configuration.")

    report = await analyze(repositories, settings, resolver, runner)
    result = RunResult(report=report)

    if write:
        logger.info("Generating consolidated report...")
        result.report_path = write_report(report, settings.report_path)
        logger.info("Report saved to: %s", result.report_path)

        result.document_paths = write_documents(report, settings)
        logger.info("Main document saved to: %s", result.document_paths[0])
        if len(result.document_paths) > 1:
            logger.info(
                "Generated %d individual repository reports", len(result.document_paths) - 1
            )

    return result
