"""FastAPI application exposing catalog audits as JSON."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from orphanscan import __version__
from orphanscan.catalog.locator import AssetLocator
from orphanscan.catalog.scanner import BatchScanner
from orphanscan.catalog.storage import SQLiteCatalogStore
from orphanscan.config import AppConfig, EnvScanLimitProvider, resolve_scan_limit
from orphanscan.errors import OrphanScanError
from orphanscan.models import ScanResult

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="orphanscan", version=__version__)


class ScanPayload(BaseModel):
    db: Path | None = None
    uploads_dir: Path | None = None
    base_url: str | None = None
    limit: int | None = None


def _base_config() -> AppConfig:
    return getattr(app.state, "config", None) or AppConfig()


def _resolve_config(payload: ScanPayload) -> AppConfig:
    base = _base_config()
    return AppConfig(
        db_path=payload.db if payload.db is not None else base.db_path,
        uploads_dir=payload.uploads_dir if payload.uploads_dir is not None else base.uploads_dir,
        base_url=payload.base_url if payload.base_url is not None else base.base_url,
        scan_limit=base.scan_limit,
    )


def _run_scan(config: AppConfig, resolved_db: Path, limit: int) -> ScanResult:
    locator = AssetLocator(config.resolve_uploads_dir(Path.cwd()), config.base_url)
    store = SQLiteCatalogStore.open_for_scan(resolved_db)
    try:
        return BatchScanner(store, locator).scan(limit)
    finally:
        store.close()


@app.on_event("startup")
async def startup_event() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/scan")
async def scan_catalog(payload: ScanPayload) -> dict[str, Any]:
    config = _resolve_config(payload)
    resolved_db = config.resolve_db_path(Path.cwd())
    if not resolved_db.exists():
        raise HTTPException(status_code=404, detail=f"Database not found at {resolved_db}")

    limit = resolve_scan_limit(
        payload.limit, [EnvScanLimitProvider()], fallback=config.scan_limit
    )
    try:
        result = await asyncio.to_thread(_run_scan, config, resolved_db, limit)
    except OrphanScanError as exc:
        LOGGER.error("Scan of %s failed: %s", resolved_db, exc)
        raise HTTPException(status_code=503, detail=f"Scan failed: {exc}") from exc

    return {"status": "ok", "db": str(resolved_db), "result": result.to_dict()}
