"""CLI application for depsweep."""

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from core.config import Settings
from core.errors import ConfigError
from core.log import configure_logging
from core.models import ConsolidatedReport, RepositoryReport
from core.pipeline import analyze, run as run_pipeline
from core.render import manual_status
from core.scanner import discover

console = Console()


def summary_table(report: ConsolidatedReport) -> Table:
    """Build a per-repository summary table."""
    table = Table(title="depsweep summary")
    table.add_column("Repository")
    table.add_column("Type")
    table.add_column("Packages", justify="right")
    table.add_column("Auto-updated", justify="right", style="green")
    table.add_column("Manual", justify="right", style="red")
    table.add_column("Current", justify="right", style="magenta")
    table.add_column("Unresolved", justify="right", style="yellow")

    for repo in report.repositories:
        if repo.error:
            table.add_row(repo.name, repo.kind.value, f"[red]error: {escape(repo.error)}[/red]", "", "", "", "")
            continue
        table.add_row(
            repo.name,
            repo.kind.value,
            str(repo.package_count),
            str(repo.auto_update_count),
            str(repo.manual_update_count),
            str(repo.current_count),
            str(repo.unresolved_count),
        )

    s = report.summary
    table.add_section()
    table.add_row(
        "Total",
        "",
        str(s.total_packages),
        str(s.total_auto_updated),
        str(s.total_manual_update_needed),
        str(s.total_current),
        str(s.total_unresolved),
    )
    return table


def packages_table(repo: RepositoryReport) -> Table:
    """Build a package table for one repository."""
    table = Table(title=f"{repo.name} ({repo.kind.value})")
    table.add_column("Package Name")
    table.add_column("Current Version")
    table.add_column("Latest Version")
    table.add_column("Status")

    for name, change in repo.auto_update_packages.items():
        table.add_row(name, change.from_version, change.to_version, "[green]Patch update available[/green]")
    for name, change in repo.manual_update_packages.items():
        table.add_row(name, change.from_version, change.to_version, f"[red]{manual_status(change)}[/red]")
    for name, version in repo.current_packages.items():
        table.add_row(name, version, version, "Current")
    for name, pkg in repo.unresolved_packages.items():
        table.add_row(name, pkg.installed, pkg.latest or "-", "[yellow]Unresolved[/yellow]")
    return table


def load_settings() -> Settings:
    try:
        return Settings.from_env()
    except ConfigError as e:
        console.print(f"Error: {e}", style="red", markup=False)
        raise typer.Exit(1)


app = typer.Typer(
    name="depsweep",
    help="depsweep - Find outdated npm packages and Go versions, apply patch updates",
    add_completion=False,
)


@app.command()
def run(
    repo: list[Path] | None = typer.Option(None, "--repo", "-r", help="Repository path (repeatable); overrides REPO_PATHS"),
    base_dir: Path | None = typer.Option(None, "--base-dir", "-b", help="Directory to search for package.json and go.mod"),
    report_path: Path | None = typer.Option(None, "--report", help="JSON report path"),
    document_path: Path | None = typer.Option(None, "--document", help="Rendered document path"),
    document_format: str | None = typer.Option(None, "--format", help="Document format: markdown or html"),
    separate: bool | None = typer.Option(None, "--separate/--no-separate", help="Write one document per repository"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Report updates without applying them"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Scan repositories, apply patch updates and write the reports."""
    settings = load_settings()

    try:
        settings = settings.with_overrides(
            repo_paths=tuple(repo) if repo else None,
            base_dir=base_dir,
            report_path=report_path,
            document_path=document_path,
            document_format=document_format.lower() if document_format else None,
            generate_separate_reports=separate,
            dry_run=True if dry_run else None,
            log_level="DEBUG" if verbose else None,
        )
        # --base-dir on its own means: ignore repositories from the environment
        if base_dir and not repo:
            settings = settings.model_copy(update={"repo_paths": ()})
    except ConfigError as e:
        console.print(f"Error: {e}", style="red", markup=False)
        raise typer.Exit(1)

    configure_logging(settings.log_level)

    try:
        result = asyncio.run(run_pipeline(settings))
    except Exception as e:
        console.print(f"Error: {e}", style="red", markup=False)
        raise typer.Exit(1)

    console.print(summary_table(result.report))
    if result.report_path:
        console.print(f"Report saved to: {result.report_path}")
    for path in result.document_paths:
        console.print(f"Document saved to: {path}")


@app.command()
def check(
    path: Path = typer.Argument(Path("."), help="Repository containing package.json or go.mod"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Classify one repository without changing or writing anything."""
    settings = load_settings().with_overrides(repo_paths=(path,), dry_run=True)
    configure_logging("DEBUG" if verbose else "WARNING")

    repositories = discover(settings)
    if not repositories:
        console.print(f"Error: No package.json or go.mod found in {path}", style="red")
        raise typer.Exit(1)

    try:
        report = asyncio.run(analyze(repositories, settings))
    except Exception as e:
        console.print(f"Error: {e}", style="red", markup=False)
        raise typer.Exit(1)

    for repo in report.repositories:
        if repo.error:
            console.print(f"Error: {repo.error}", style="red", markup=False)
            raise typer.Exit(1)
        console.print(packages_table(repo))


if __name__ == "__main__":
    app()
