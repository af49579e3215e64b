"""Tests for CLI commands."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from orphanscan.catalog.storage import SQLiteCatalogStore
from orphanscan.cli import _build_config, _setup_logging, app
from orphanscan.config import SCAN_LIMIT_ENV, AppConfig
from orphanscan.errors import StorageError
from orphanscan.models import Asset, ScanResult
from orphanscan.web.app import app as web_app


runner = CliRunner()


@pytest.fixture
def catalog(tmp_path: Path) -> tuple[Path, Path]:
    """Catalog with one unused asset and one missing file."""
    uploads = tmp_path / "uploads"
    (uploads / "2024").mkdir(parents=True)
    (uploads / "2024" / "lonely.jpg").write_bytes(b"jpeg")

    db_path = tmp_path / "catalog.db"
    store = SQLiteCatalogStore(db_path)
    store.add_asset(Asset(id=1, title="Lonely", mime_type="image/jpeg", stored_file="2024/lonely.jpg"))
    store.add_asset(Asset(id=2, title="Gone", mime_type="image/jpeg", parent_id=7, stored_file="2024/gone.jpg"))
    store.close()
    return db_path, uploads


class TestSetupLogging:
    """Tests for _setup_logging helper."""

    def test_setup_logging_verbose(self) -> None:
        """Verbose mode sets DEBUG level."""
        with patch("orphanscan.cli.logging.basicConfig") as mock_config:
            _setup_logging(verbose=True)
            mock_config.assert_called_once()
            assert mock_config.call_args[1]["level"] == logging.DEBUG

    def test_setup_logging_normal(self) -> None:
        """Normal mode sets INFO level."""
        with patch("orphanscan.cli.logging.basicConfig") as mock_config:
            _setup_logging(verbose=False)
            mock_config.assert_called_once()
            assert mock_config.call_args[1]["level"] == logging.INFO


class TestBuildConfig:
    """Tests for _build_config helper."""

    def test_defaults(self) -> None:
        config = _build_config(None, None, None)
        assert config.db_path == Path("data/catalog.db")
        assert config.base_url == "/uploads"

    def test_overrides(self, tmp_path: Path) -> None:
        config = _build_config(tmp_path / "c.db", tmp_path, "https://cdn.example.com")
        assert config.db_path == tmp_path / "c.db"
        assert config.uploads_dir == tmp_path
        assert config.base_url == "https://cdn.example.com"


class TestScanCommand:
    """Tests for the scan command."""

    def test_database_not_found(self, tmp_path: Path) -> None:
        """Fails when the catalog does not exist."""
        result = runner.invoke(app, ["scan", "--db", str(tmp_path / "missing.db")])
        assert result.exit_code != 0

    def test_scan_renders_report(self, catalog: tuple[Path, Path]) -> None:
        """Prints the summary and lists."""
        db_path, uploads = catalog

        result = runner.invoke(
            app,
            ["scan", "--db", str(db_path), "--uploads-dir", str(uploads), "--base-url", "/up"],
        )

        assert result.exit_code == 0
        assert "Summary" in result.stdout
        assert "Assets with missing files" in result.stdout
        assert "Likely unused assets" in result.stdout
        assert "Lonely" in result.stdout
        assert "Gone" in result.stdout

    def test_scan_passes_limit(self, catalog: tuple[Path, Path]) -> None:
        db_path, uploads = catalog
        with patch("orphanscan.cli.BatchScanner") as mock_scanner_class:
            mock_scanner_class.return_value.scan.return_value = ScanResult()
            result = runner.invoke(
                app, ["scan", "--db", str(db_path), "--uploads-dir", str(uploads), "--limit", "25"]
            )

        assert result.exit_code == 0
        mock_scanner_class.return_value.scan.assert_called_once_with(25)

    def test_scan_limit_from_environment(
        self, catalog: tuple[Path, Path], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        db_path, uploads = catalog
        monkeypatch.setenv(SCAN_LIMIT_ENV, "3")
        with patch("orphanscan.cli.BatchScanner") as mock_scanner_class:
            mock_scanner_class.return_value.scan.return_value = ScanResult()
            runner.invoke(app, ["scan", "--db", str(db_path), "--uploads-dir", str(uploads)])

        mock_scanner_class.return_value.scan.assert_called_once_with(3)

    def test_scan_non_positive_limit(self, catalog: tuple[Path, Path]) -> None:
        db_path, uploads = catalog
        with patch("orphanscan.cli.BatchScanner") as mock_scanner_class:
            mock_scanner_class.return_value.scan.return_value = ScanResult()
            runner.invoke(
                app, ["scan", "--db", str(db_path), "--uploads-dir", str(uploads), "--limit", "0"]
            )

        mock_scanner_class.return_value.scan.assert_called_once_with(500)

    def test_partial_scan_notice(self, catalog: tuple[Path, Path]) -> None:
        db_path, uploads = catalog

        result = runner.invoke(
            app, ["scan", "--db", str(db_path), "--uploads-dir", str(uploads), "--limit", "1"]
        )

        assert result.exit_code == 0
        assert "Only the newest 1 of 2" in result.stdout

    def test_scan_limit_from_config(
        self, catalog: tuple[Path, Path], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Uses the configured scan limit when neither --limit nor the environment set one."""
        db_path, uploads = catalog
        monkeypatch.delenv(SCAN_LIMIT_ENV, raising=False)
        config = AppConfig(db_path=db_path, uploads_dir=uploads, scan_limit=7)
        with patch("orphanscan.cli._build_config", return_value=config), patch(
            "orphanscan.cli.BatchScanner"
        ) as mock_scanner_class:
            mock_scanner_class.return_value.scan.return_value = ScanResult()
            result = runner.invoke(app, ["scan"])

        assert result.exit_code == 0
        mock_scanner_class.return_value.scan.assert_called_once_with(7)

    def test_scan_leaves_catalog_unchanged(self, catalog: tuple[Path, Path]) -> None:
        """Scanning does not switch journal mode or add schema objects."""
        db_path, uploads = catalog
        conn = sqlite3.connect(db_path)
        conn.execute("PRAGMA journal_mode=DELETE")
        schema_before = conn.execute("SELECT name FROM sqlite_master ORDER BY name").fetchall()
        conn.close()
        raw_before = db_path.read_bytes()

        result = runner.invoke(app, ["scan", "--db", str(db_path), "--uploads-dir", str(uploads)])

        assert result.exit_code == 0
        conn = sqlite3.connect(db_path)
        try:
            assert conn.execute("PRAGMA journal_mode").fetchone()[0] == "delete"
            assert conn.execute("SELECT name FROM sqlite_master ORDER BY name").fetchall() == schema_before
        finally:
            conn.close()
        assert db_path.read_bytes() == raw_before

    def test_storage_failure(self, catalog: tuple[Path, Path]) -> None:
        """Reports an explicit error instead of an empty report."""
        db_path, uploads = catalog
        with patch("orphanscan.cli.BatchScanner") as mock_scanner_class:
            mock_scanner_class.return_value.scan.side_effect = StorageError("database is locked")
            result = runner.invoke(app, ["scan", "--db", str(db_path), "--uploads-dir", str(uploads)])

        assert result.exit_code == 1
        assert "Scan failed" in result.stdout
        assert "Summary" not in result.stdout


class TestWebCommand:
    """Tests for the web command."""

    def test_web_starts_uvicorn(self, catalog: tuple[Path, Path]) -> None:
        db_path, uploads = catalog
        mock_uvicorn = MagicMock()
        try:
            with patch.dict("sys.modules", {"uvicorn": mock_uvicorn}):
                result = runner.invoke(
                    app, ["web", "--port", "9001", "--db", str(db_path), "--uploads-dir", str(uploads)]
                )

            assert result.exit_code == 0
            mock_uvicorn.run.assert_called_once()
            assert mock_uvicorn.run.call_args[1]["port"] == 9001
            assert web_app.state.config.db_path == db_path
        finally:
            if hasattr(web_app.state, "config"):
                del web_app.state.config

    def test_web_limit_sets_config_default(self, catalog: tuple[Path, Path]) -> None:
        db_path, uploads = catalog
        mock_uvicorn = MagicMock()
        try:
            with patch.dict("sys.modules", {"uvicorn": mock_uvicorn}):
                result = runner.invoke(app, ["web", "--db", str(db_path), "--limit", "40"])

            assert result.exit_code == 0
            assert web_app.state.config.scan_limit == 40
        finally:
            if hasattr(web_app.state, "config"):
                del web_app.state.config
