"""Sync CLI commands: sync, test-connection, undo, collections."""

from __future__ import annotations

import asyncio
import time
from pathlib import Path
from typing import Annotated, Any

import typer

from raindrop_obsidian_sync.config import Config
from raindrop_obsidian_sync.exceptions import (
    ConfigurationError,
    MissingCredentialError,
    RaindropSyncError,
)

from .shared import console, get_config_and_logger
from .sync_handler import run_collections, run_sync, run_test_connection, run_undo

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="Path to config.yaml", exists=True),
]
LogLevelOption = Annotated[
    str | None,
    typer.Option("--log-level", help="Log level (DEBUG, INFO, WARN, ERROR)"),
]
VerboseOption = Annotated[
    bool,
    typer.Option(
        "--verbose",
        "-v",
        help="Show all log messages on terminal (for debugging)",
    ),
]


def _fail(exc: RaindropSyncError) -> typer.Exit:
    console.print(f"[red]✗ {exc.message}[/red]")
    if exc.suggestion:
        console.print(f"[yellow]{exc.suggestion}[/yellow]")
    return typer.Exit(code=1)


def _load(
    config_path: Path | None, log_level: str | None, verbose: bool
) -> tuple[Config, Any]:
    try:
        return get_config_and_logger(config_path, log_level, verbose=verbose)
    except ConfigurationError as exc:
        raise _fail(exc) from exc


def register(app: typer.Typer) -> None:
    """Register sync commands on the given Typer app."""

    @app.command()
    def sync(
        test_mode: Annotated[
            bool | None,
            typer.Option(
                "--test-mode/--no-test-mode",
                help="Only sync the first few bookmarks (overrides config)",
            ),
        ] = None,
        config_path: ConfigOption = None,
        log_level: LogLevelOption = None,
        verbose: VerboseOption = False,
    ) -> None:
        """Synchronize Raindrop bookmarks with the vault."""
        start_time = time.time()
        config, logger = _load(config_path, log_level, verbose)
        if test_mode is not None:
            config.test_mode = test_mode

        logger.info(
            "cli_command_started",
            command="sync",
            config_path=str(config_path) if config_path else None,
            vault_path=str(config.vault_path),
            test_mode=config.test_mode,
        )

        try:
            report = asyncio.run(run_sync(config, logger))
        except MissingCredentialError as exc:
            raise _fail(exc) from exc
        except RaindropSyncError as exc:
            logger.error(
                "cli_command_failed",
                command="sync",
                duration=round(time.time() - start_time, 2),
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise _fail(exc) from exc

        logger.info(
            "cli_command_completed",
            command="sync",
            duration=round(time.time() - start_time, 2),
            success=report.failed == 0,
        )
        if report.failed:
            console.print(
                f"[yellow]⚠ {report.failed} bookmark(s) failed to sync. "
                "Check the log file for details.[/yellow]"
            )

    @app.command(name="test-connection")
    def test_connection(
        config_path: ConfigOption = None,
        log_level: LogLevelOption = None,
        verbose: VerboseOption = False,
    ) -> None:
        """Check that the API token is accepted by Raindrop."""
        config, _ = _load(config_path, log_level, verbose)
        try:
            name = asyncio.run(run_test_connection(config))
        except RaindropSyncError as exc:
            raise _fail(exc) from exc
        console.print(f"[green]✓ Connected as {name}[/green]")

    @app.command()
    def undo(
        yes: Annotated[
            bool,
            typer.Option("--yes", "-y", help="Do not ask for confirmation"),
        ] = False,
        config_path: ConfigOption = None,
        log_level: LogLevelOption = None,
        verbose: VerboseOption = False,
    ) -> None:
        """Delete every synced bookmark note and the folders left empty."""
        config, _ = _load(config_path, log_level, verbose)
        if not yes:
            typer.confirm(
                f"Delete all Raindrop bookmark notes under '{config.resource_folder}'?",
                abort=True,
            )
        try:
            deleted = asyncio.run(run_undo(config))
        except RaindropSyncError as exc:
            raise _fail(exc) from exc
        console.print(f"[green]✓ Deleted {deleted} synced file(s)[/green]")

    @app.command()
    def collections(
        config_path: ConfigOption = None,
        log_level: LogLevelOption = None,
        verbose: VerboseOption = False,
    ) -> None:
        """List Raindrop collections and the folder each one maps to."""
        config, _ = _load(config_path, log_level, verbose)
        try:
            asyncio.run(run_collections(config))
        except RaindropSyncError as exc:
            raise _fail(exc) from exc
