"""Command implementations: each runs one engine operation to completion."""

from __future__ import annotations

from typing import Any

from rich.table import Table

from raindrop_obsidian_sync.config import Config
from raindrop_obsidian_sync.sync.engine import SyncEngine
from raindrop_obsidian_sync.sync.report import RunReport
from raindrop_obsidian_sync.vault.store import FileSystemDocumentStore

from .shared import build_engine, console


async def run_sync(config: Config, logger: Any) -> RunReport:
    """Execute one reconciliation run and print its summary.

    Raises:
        MissingCredentialError: If no API token is configured
        RaindropSyncError: If the run is aborted
    """
    engine, client = build_engine(config)
    async with client:
        with console.status("Starting sync...") as status:
            report = await engine.run(on_status=status.update)

    table = Table(title="Sync Results")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", style="magenta", justify="right")
    table.add_row("Total", str(report.total))
    table.add_row("Created", str(report.created))
    table.add_row("Updated", str(report.updated))
    table.add_row("Skipped", str(report.skipped))
    table.add_row("Deleted", str(report.deleted))
    if config.bidirectional_sync:
        table.add_row("Synced back", str(report.pushed))
    if report.failed:
        table.add_row("[red]Failed[/red]", f"[red]{report.failed}[/red]")
    console.print(table)

    if report.failures:
        failures = Table(title="Failed Bookmarks")
        failures.add_column("ID", style="yellow")
        failures.add_column("Title")
        failures.add_column("Error", style="red")
        for item in report.failures:
            failures.add_row(str(item.raindrop_id), item.title, item.error)
        console.print(failures)

    logger.debug("sync_report", **report.to_dict())
    return report


async def run_test_connection(config: Config) -> str:
    engine, client = build_engine(config)
    async with client:
        return await engine.test_connection()


async def run_undo(config: Config) -> int:
    # Only the local tree is touched, so no token is needed
    store = FileSystemDocumentStore(config.vault_path)
    return await SyncEngine(config, store).undo()


async def run_collections(config: Config) -> None:
    engine, client = build_engine(config)
    async with client:
        rows = await engine.list_collections()

    table = Table(title="Raindrop Collections")
    table.add_column("ID", style="yellow", justify="right")
    table.add_column("Title", style="cyan")
    table.add_column("Items", justify="right")
    table.add_column("Folder")
    for collection, folder in rows:
        table.add_row(
            str(collection.id),
            collection.title,
            str(collection.count),
            f"{config.resource_folder}/{folder}" if folder else config.resource_folder,
        )
    console.print(table)
