"""FastAPI web application for depsweep."""

import json
from functools import lru_cache
from html import escape
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel

from core.config import Settings
from core.detect import GO_MANIFEST, NPM_MANIFEST, identify
from core.errors import ConfigError
from core.models import Repository, RepositoryKind
from core.parse_go import parse_go_mod
from core.parse_node import extract_dependencies, resolve_installed_versions
from core.render import render_html
from core.report import build_repository_report, read_report, repository_to_dict, to_dict
from core.resolve_node import NpmResolver
from core.update_go import TOOLCHAIN
from core.versions import classify_all

app = FastAPI(
    title="depsweep",
    description="Find outdated npm packages and Go versions across repositories",
    version="0.1.0",
)


@lru_cache
def get_settings() -> Settings:
    """Settings read once from the environment."""
    return Settings.from_env()


class AnalyzeRequest(BaseModel):
    """Request model for analyzing a single manifest."""
    content: str
    lock_content: Optional[str] = None
    filename: Optional[str] = None
    ecosystem: Optional[str] = None
    name: str = "uploaded"


@app.get("/", response_class=HTMLResponse)
async def home(settings: Settings = Depends(get_settings)):
    """Serve the latest report as HTML."""
    try:
        report = read_report(settings.report_path)
    except (OSError, ValueError, KeyError) as e:
        raise HTTPException(status_code=500, detail=f"Error reading report: {e}")

    if report is None:
        return get_placeholder_html(settings.report_path)
    return render_html(report)


@app.get("/health")
async def health():
    """Liveness check."""
    return {"status": "ok"}


@app.get("/api/report")
async def latest_report(settings: Settings = Depends(get_settings)):
    """Return the latest JSON report."""
    try:
        report = read_report(settings.report_path)
    except (OSError, ValueError, KeyError) as e:
        raise HTTPException(status_code=500, detail=f"Error reading report: {e}")

    if report is None:
        raise HTTPException(status_code=404, detail="No report has been generated yet")
    return to_dict(report)


@app.post("/api/analyze")
async def analyze_manifest(request: AnalyzeRequest, settings: Settings = Depends(get_settings)):
    """Classify the dependencies of a posted manifest without changing anything."""
    try:
        content = request.content.strip()
        if not content:
            raise HTTPException(status_code=400, detail="No content provided")

        kind = _detect_kind(content, request)
        if kind is RepositoryKind.GO:
            go_mod = parse_go_mod(content)
            if not go_mod.module:
                raise HTTPException(status_code=400, detail="Invalid go.mod: no module declaration")
            records = classify_all({TOOLCHAIN: go_mod.go}, {TOOLCHAIN: settings.go_latest_version})
            manifest_name = GO_MANIFEST
        else:
            installed = _installed_npm_versions(content, request.lock_content)
            resolver = NpmResolver(
                registry_url=settings.registry_url, timeout=settings.registry_timeout
            )
            latest = await resolver.fetch_latest(installed)
            records = classify_all(installed, latest)
            manifest_name = NPM_MANIFEST

        repository = Repository(
            path=Path(request.name),
            kind=kind,
            manifest_path=Path(request.name) / manifest_name,
        )
        return repository_to_dict(build_repository_report(repository, records))

    except HTTPException:
        # Re-raise HTTP exceptions (don't convert to 500)
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error analyzing dependencies: {str(e)}")


def _detect_kind(content: str, request: AnalyzeRequest) -> RepositoryKind:
    if request.ecosystem:
        try:
            return RepositoryKind(request.ecosystem.lower())
        except ValueError:
            raise HTTPException(status_code=400, detail=f"Unsupported ecosystem: {request.ecosystem}")

    kind = identify(content, request.filename)
    if kind is None:
        raise HTTPException(
            status_code=400,
            detail="Unsupported ecosystem. Only package.json and go.mod are supported.",
        )
    return kind


def _installed_npm_versions(content: str, lock_content: Optional[str]) -> dict[str, str]:
    try:
        package_json = json.loads(content)
    except json.JSONDecodeError as e:
        raise HTTPException(status_code=400, detail=f"Invalid package.json: {e}")
    if not isinstance(package_json, dict):
        raise HTTPException(status_code=400, detail="Invalid package.json: not a JSON object")

    declared = extract_dependencies(package_json)
    if not declared:
        raise HTTPException(status_code=400, detail="No dependencies found to analyze")

    lock = None
    if lock_content:
        try:
            lock = json.loads(lock_content)
        except json.JSONDecodeError:
            lock = None  # same as an unreadable lock on disk
        if not isinstance(lock, dict):
            lock = None

    return resolve_installed_versions(lock, declared)


def get_placeholder_html(report_path: Path) -> str:
    """Page shown before the first run."""
    return f"""
    <!DOCTYPE html>
    <html lang="en">
    <head>
        <meta charset="UTF-8">
        <title>depsweep</title>
    </head>
    <body>
        <h1>depsweep</h1>
        <p>No report found at <code>{escape(str(report_path))}</code>.</p>
        <p>Run <code>depsweep run</code> to scan your repositories.</p>
    </body>
    </html>
    """


@app.exception_handler(ConfigError)
async def config_error_handler(request: Request, exc: ConfigError):
    """Map configuration errors to 500 responses."""
    return JSONResponse(status_code=500, content={"detail": str(exc)})
