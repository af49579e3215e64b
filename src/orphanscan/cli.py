"""Command line interface for orphanscan."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

import typer
from rich.console import Console
from rich.table import Table

from orphanscan.catalog.locator import AssetLocator
from orphanscan.catalog.scanner import BatchScanner
from orphanscan.catalog.storage import SQLiteCatalogStore
from orphanscan.config import AppConfig, EnvScanLimitProvider, resolve_scan_limit
from orphanscan.errors import OrphanScanError
from orphanscan.models import AssetSummary, MissingFile, ScanResult
from orphanscan.web.app import app as web_app


console = Console()
app = typer.Typer(help="orphanscan - audit a media catalog for missing and orphaned assets")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _build_config(
    db: Optional[Path],
    uploads_dir: Optional[Path],
    base_url: Optional[str],
    scan_limit: Optional[int] = None,
) -> AppConfig:
    defaults = AppConfig()
    return AppConfig(
        db_path=db if db is not None else defaults.db_path,
        uploads_dir=uploads_dir if uploads_dir is not None else defaults.uploads_dir,
        base_url=base_url if base_url is not None else defaults.base_url,
        scan_limit=scan_limit if scan_limit is not None else defaults.scan_limit,
    )


def _render_summary(result: ScanResult) -> None:
    table = Table(title="Summary", show_header=False)
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Total assets in catalog", str(result.total_assets))
    table.add_row("Assets scanned this run", str(result.scanned))
    table.add_row("Assets with missing files", str(len(result.missing_files)))
    table.add_row("Unattached assets in scan set", str(len(result.unattached)))
    table.add_row("Likely unused assets in scan set", str(len(result.unused)))
    if result.undetermined:
        table.add_row("Unattached assets that could not be assessed", str(len(result.undetermined)))
    console.print(table)


def _render_missing(rows: Sequence[MissingFile]) -> None:
    if not rows:
        console.print("[green]No assets with missing files in this scan.[/green]")
        return
    table = Table(title="Assets with missing files", header_style="bold magenta")
    for column in ("ID", "Title", "Mime type", "Stored path", "URL"):
        table.add_column(column)
    for row in rows:
        table.add_row(str(row.id), row.title, row.mime_type, row.file_path or "", row.url)
    console.print(table)


def _render_assets(title: str, rows: Sequence[AssetSummary], empty: str) -> None:
    if not rows:
        console.print(f"[green]{empty}[/green]")
        return
    table = Table(title=title, header_style="bold magenta")
    for column in ("ID", "Title", "Mime type", "URL"):
        table.add_column(column)
    for row in rows:
        table.add_row(str(row.id), row.title, row.mime_type, row.url)
    console.print(table)


def render_report(result: ScanResult) -> None:
    _render_summary(result)
    _render_missing(result.missing_files)
    _render_assets(
        "Unattached assets",
        result.unattached,
        "No unattached assets in this scan set.",
    )
    _render_assets(
        "Likely unused assets",
        result.unused,
        "No likely unused assets in this scan set.",
    )
    if result.undetermined:
        _render_assets("Unattached assets without a usable URL", result.undetermined, "")
    if result.is_partial:
        console.print(
            f"[yellow]Only the newest {result.scanned} of {result.total_assets} assets were "
            "scanned. Raise --limit to cover more.[/yellow]"
        )


@app.command()
def scan(
    db: Path = typer.Option(None, "--db", help="SQLite catalog path"),
    uploads_dir: Path = typer.Option(None, "--uploads-dir", help="Directory holding asset files"),
    base_url: str = typer.Option(None, "--base-url", help="Public URL of the uploads directory"),
    limit: Optional[int] = typer.Option(
        None, "--limit", help="Assets to examine per run (default 500)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Audit the newest assets of a catalog. Nothing is modified."""
    _setup_logging(verbose)
    config = _build_config(db, uploads_dir, base_url)
    resolved_db = config.resolve_db_path(Path.cwd())

    if not resolved_db.exists():
        raise typer.BadParameter(f"Database not found: {resolved_db}")

    scan_limit = resolve_scan_limit(limit, [EnvScanLimitProvider()], fallback=config.scan_limit)
    locator = AssetLocator(config.resolve_uploads_dir(Path.cwd()), config.base_url)

    try:
        store = SQLiteCatalogStore.open_for_scan(resolved_db)
        try:
            result = BatchScanner(store, locator).scan(scan_limit)
        finally:
            store.close()
    except OrphanScanError as exc:
        console.print(f"[red]Scan failed: {exc}[/red]")
        raise typer.Exit(code=1) from exc

    render_report(result)


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
    db: Path = typer.Option(None, "--db", help="SQLite catalog path"),
    uploads_dir: Path = typer.Option(None, "--uploads-dir", help="Directory holding asset files"),
    base_url: str = typer.Option(None, "--base-url", help="Public URL of the uploads directory"),
    limit: Optional[int] = typer.Option(
        None, "--limit", help="Default assets to examine per request (default 500)"
    ),
) -> None:
    """Start the JSON audit API."""
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover - defensive
        raise typer.BadParameter(
            "uvicorn is not installed. Install the web extras with \"python -m pip install '.[web]'\""
        ) from exc

    config = _build_config(db, uploads_dir, base_url, limit)
    resolved_db = config.resolve_db_path(Path.cwd())
    if not resolved_db.exists():
        console.print("[yellow]Warning: database not found, scans will fail.[/yellow]")

    web_app.state.config = config
    console.print(f"Starting audit API on http://{host}:{port} (database: {resolved_db})")
    uvicorn.run(
        web_app,
        host=host,
        port=port,
        reload=False,
        log_level="info",
    )
