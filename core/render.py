"""Markdown and HTML documents built from a consolidated report.

Renderers are pure functions of the report; only :func:`write_documents`
touches the filesystem.
"""

import logging
from datetime import datetime
from html import escape
from pathlib import Path

from .config import Settings
from .models import ConsolidatedReport, PackageChange, RepositoryReport

logger = logging.getLogger(__name__)

TITLE = "Package Report"
COLUMNS = ("Package Name", "Current Version", "Latest Version", "Status")

HTML_STYLE = """
    body {
      font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Helvetica, Arial, sans-serif;
      line-height: 1.6;
      color: #333;
      max-width: 1200px;
      margin: 0 auto;
      padding: 20px;
    }
    h1, h2, h3 { color: #0366d6; }
    table { border-collapse: collapse; width: 100%; margin-bottom: 20px; }
    th, td { text-align: left; padding: 8px; border-bottom: 1px solid #ddd; }
    th { background-color: #f6f8fa; }
    tr:hover { background-color: #f6f8fa; }
    .updated { color: #22863a; }
    .available { color: #b08800; }
    .manual { color: #cb2431; }
    .current { color: #6f42c1; }
    .error { color: #cb2431; font-weight: bold; }
    .summary { background-color: #f6f8fa; padding: 15px; border-radius: 5px; margin-bottom: 20px; }
"""


def format_timestamp(timestamp: datetime) -> str:
    return timestamp.strftime("%Y-%m-%d %H:%M:%S %Z").strip()


def manual_status(change: PackageChange) -> str:
    """Status text for a package that needs a manual update."""
    return f"{change.update_type.value.capitalize()} update required"


def auto_status(change: PackageChange, applied: bool) -> tuple[str, str]:
    """Status text and css class for an auto-updatable package."""
    if applied:
        return f"Updated ({change.update_type.value})", "updated"
    # Dry run or failed manifest write: nothing was changed on disk
    return f"{change.update_type.value.capitalize()} update available", "available"


def package_rows(repo_report: RepositoryReport) -> list[tuple[str, str, str, str, str]]:
    """Table rows as (name, current, latest, status, css class).

    Auto-updatable packages come first, then manual updates, then current ones.
    """
    rows = []
    for name, change in repo_report.auto_update_packages.items():
        status, css = auto_status(change, repo_report.auto_updated)
        rows.append((name, change.from_version, change.to_version, status, css))
    for name, change in repo_report.manual_update_packages.items():
        rows.append((name, change.from_version, change.to_version, manual_status(change), "manual"))
    for name, version in repo_report.current_packages.items():
        rows.append((name, version, version, "Current", "current"))
    return rows


def summary_lines(report: ConsolidatedReport) -> list[str]:
    s = report.summary
    return [
        f"Repositories scanned: {s.repository_count}",
        f"Total packages: {s.total_packages}",
        f"Packages automatically updated: {s.total_auto_updated}",
        f"Packages requiring manual updates: {s.total_manual_update_needed}",
        f"Packages already at latest version: {s.total_current}",
        f"Packages with unresolved versions: {s.total_unresolved}",
    ]


def repository_summary_lines(repo_report: RepositoryReport) -> list[str]:
    return [
        f"Total packages: {repo_report.package_count}",
        f"Packages automatically updated: {repo_report.auto_update_count}",
        f"Packages requiring manual updates: {repo_report.manual_update_count}",
        f"Packages already at latest version: {repo_report.current_count}",
        f"Packages with unresolved versions: {repo_report.unresolved_count}",
    ]


# Markdown


def _md_cell(value: str) -> str:
    return str(value).replace("|", "\\|")


def _markdown_repository_body(repo_report: RepositoryReport) -> list[str]:
    lines = [f"Path: {repo_report.path}", "", f"Type: {repo_report.kind.value}", ""]

    if repo_report.error:
        lines += [f"**Error:** {repo_report.error}", ""]
        return lines

    lines += ["### Packages", ""]
    lines.append("| " + " | ".join(COLUMNS) + " |")
    lines.append("|" + "|".join("-" * (len(c) + 2) for c in COLUMNS) + "|")
    for name, current, latest, status, _ in package_rows(repo_report):
        lines.append(f"| {_md_cell(name)} | {_md_cell(current)} | {_md_cell(latest)} | {status} |")
    lines.append("")

    if repo_report.unresolved_packages:
        lines += ["### Unresolved", ""]
        for name, pkg in repo_report.unresolved_packages.items():
            latest = pkg.latest or "lookup failed"
            lines.append(f"- {name}: installed {pkg.installed}, latest {latest}")
        lines.append("")

    return lines


def render_markdown(report: ConsolidatedReport) -> str:
    """Render the combined Markdown document for all repositories."""
    lines = [f"# {TITLE}", "", f"Generated on: {format_timestamp(report.timestamp)}", ""]
    lines += ["## Summary", ""]
    lines += [f"- {line}" for line in summary_lines(report)]
    lines.append("")

    for repo_report in report.repositories:
        lines += [f"## Repository: {repo_report.name}", ""]
        lines += _markdown_repository_body(repo_report)

    return "\n".join(lines)


def render_markdown_for_repository(repo_report: RepositoryReport, generated_at: datetime) -> str:
    """Render the Markdown document for one repository."""
    lines = [f"# {TITLE} - {repo_report.name}", ""]
    lines += [f"Generated on: {format_timestamp(generated_at)}", ""]
    lines += ["## Summary", ""]
    lines += [f"- {line}" for line in repository_summary_lines(repo_report)]
    lines += ["", f"## Repository: {repo_report.name}", ""]
    lines += _markdown_repository_body(repo_report)
    return "\n".join(lines)


# HTML


def _html_page(title: str, body: list[str]) -> str:
    head = [
        "<!DOCTYPE html>",
        '<html lang="en">',
        "<head>",
        '  <meta charset="UTF-8">',
        '  <meta name="viewport" content="width=device-width, initial-scale=1.0">',
        f"  <title>{escape(title)}</title>",
        f"  <style>{HTML_STYLE}  </style>",
        "</head>",
        "<body>",
    ]
    return "\n".join(head + body + ["</body>", "</html>", ""])


def _html_list(items: list[str]) -> list[str]:
    return ["  <ul>"] + [f"    <li>{escape(item)}</li>" for item in items] + ["  </ul>"]


def _html_repository_body(repo_report: RepositoryReport) -> list[str]:
    body = [
        f"  <p>Path: {escape(str(repo_report.path))}</p>",
        f"  <p>Type: {escape(repo_report.kind.value)}</p>",
    ]

    if repo_report.error:
        body.append(f'  <p class="error">Error: {escape(repo_report.error)}</p>')
        return body

    body += ["  <h3>Packages</h3>", "  <table>", "    <thead>", "      <tr>"]
    body += [f"        <th>{column}</th>" for column in COLUMNS]
    body += ["      </tr>", "    </thead>", "    <tbody>"]
    for name, current, latest, status, css in package_rows(repo_report):
        body += [
            "      <tr>",
            f"        <td>{escape(name)}</td>",
            f"        <td>{escape(current)}</td>",
            f"        <td>{escape(latest)}</td>",
            f'        <td class="{css}">{escape(status)}</td>',
            "      </tr>",
        ]
    body += ["    </tbody>", "  </table>"]

    if repo_report.unresolved_packages:
        body.append("  <h3>Unresolved</h3>")
        body += _html_list([
            f"{name}: installed {pkg.installed}, latest {pkg.latest or 'lookup failed'}"
            for name, pkg in repo_report.unresolved_packages.items()
        ])

    return body


def render_html(report: ConsolidatedReport) -> str:
    """Render the combined HTML document for all repositories."""
    body = [
        f"  <h1>{TITLE}</h1>",
        f"  <p>Generated on: {escape(format_timestamp(report.timestamp))}</p>",
        '  <div class="summary">',
        "  <h2>Summary</h2>",
    ]
    body += _html_list(summary_lines(report))
    body.append("  </div>")

    for repo_report in report.repositories:
        body.append(f"  <h2>Repository: {escape(repo_report.name)}</h2>")
        body += _html_repository_body(repo_report)

    return _html_page(TITLE, body)


def render_html_for_repository(repo_report: RepositoryReport, generated_at: datetime) -> str:
    """Render the HTML document for one repository."""
    title = f"{TITLE} - {repo_report.name}"
    body = [
        f"  <h1>{escape(title)}</h1>",
        f"  <p>Generated on: {escape(format_timestamp(generated_at))}</p>",
        '  <div class="summary">',
        "  <h2>Summary</h2>",
    ]
    body += _html_list(repository_summary_lines(repo_report))
    body.append("  </div>")
    body.append(f"  <h2>Repository: {escape(repo_report.name)}</h2>")
    body += _html_repository_body(repo_report)
    return _html_page(title, body)


def render_document(report: ConsolidatedReport, document_format: str) -> str:
    """Render the combined document in ``markdown`` or ``html``."""
    if document_format == "html":
        return render_html(report)
    return render_markdown(report)


def render_repository_document(
    repo_report: RepositoryReport, generated_at: datetime, document_format: str
) -> str:
    """Render one repository's document in ``markdown`` or ``html``."""
    if document_format == "html":
        return render_html_for_repository(repo_report, generated_at)
    return render_markdown_for_repository(repo_report, generated_at)


def repository_document_paths(report: ConsolidatedReport, settings: Settings) -> list[Path]:
    """File path of each per-repository document, beside the combined one.

    Names are ``<repository name><ext>``; clashes get a numeric suffix.
    """
    directory = settings.document_path.parent
    extension = settings.document_extension
    taken = {settings.document_path.name}
    paths = []
    for repo_report in report.repositories:
        stem = repo_report.name or "repository"
        candidate = f"{stem}{extension}"
        counter = 2
        while candidate in taken:
            candidate = f"{stem}-{counter}{extension}"
            counter += 1
        taken.add(candidate)
        paths.append(directory / candidate)
    return paths


def write_documents(report: ConsolidatedReport, settings: Settings) -> list[Path]:
    """Write the combined document and, if enabled, one per repository.

    Returns:
        Paths written, combined document first
    """
    combined = settings.document_path
    combined.parent.mkdir(parents=True, exist_ok=True)
    combined.write_text(render_document(report, settings.document_format), encoding="utf-8")
    written = [combined]

    if settings.generate_separate_reports:
        paths = repository_document_paths(report, settings)
        for repo_report, path in zip(report.repositories, paths):
            content = render_repository_document(
                repo_report, report.timestamp, settings.document_format
            )
            path.write_text(content, encoding="utf-8")
            written.append(path)

    logger.debug("Wrote %d documents", len(written))
    return written
