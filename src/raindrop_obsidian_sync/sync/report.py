"""Run report and the status document rendered from it."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

from raindrop_obsidian_sync.exceptions import DocumentStoreError
from raindrop_obsidian_sync.models import STATUS_DOCUMENT_TYPE, FailedItem, SyncOutcome
from raindrop_obsidian_sync.utils.logging import get_logger
from raindrop_obsidian_sync.utils.timestamps import ensure_utc, format_timestamp

if TYPE_CHECKING:
    from raindrop_obsidian_sync.config_settings import Config
    from raindrop_obsidian_sync.domain.interfaces.document_store import IDocumentStore

logger = get_logger(__name__)


@dataclass
class RunReport:
    """Counters for one reconciliation run."""

    total: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0
    deleted: int = 0
    pushed: int = 0
    push_failed: int = 0
    failures: list[FailedItem] = field(default_factory=list)
    finished_at: datetime | None = None

    @property
    def processed(self) -> int:
        return self.created + self.updated + self.skipped + self.failed

    @property
    def count_mismatch(self) -> bool:
        """True when not every fetched record reached a terminal outcome."""
        return self.processed != self.total

    def record(self, outcome: SyncOutcome) -> None:
        if outcome is SyncOutcome.CREATED:
            self.created += 1
        elif outcome is SyncOutcome.UPDATED:
            self.updated += 1
        else:
            self.skipped += 1

    def record_failure(self, item: FailedItem) -> None:
        self.failed += 1
        self.failures.append(item)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "created": self.created,
            "updated": self.updated,
            "skipped": self.skipped,
            "failed": self.failed,
            "deleted": self.deleted,
            "pushed": self.pushed,
            "push_failed": self.push_failed,
        }


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def render_status_document(report: RunReport, config: Config, now: datetime) -> str:
    """Render the singleton status document for the latest run."""
    now = ensure_utc(now)
    lines = [
        "---",
        f"type: {STATUS_DOCUMENT_TYPE}",
        f"last_sync: {format_timestamp(now)}",
        "---",
        "",
        "# Raindrop Sync Status",
        "",
        "## Last Full Sync",
        "",
        f"**Date:** {now.strftime('%A, %B')} {now.day}, {now.year}  ",
        f"**Time:** {now.strftime('%H:%M:%S')} UTC",
        "",
        "## Sync Statistics",
        "",
        f"- **Total Bookmarks:** {report.total}",
        f"- **Created:** {report.created}",
        f"- **Updated:** {report.updated}",
        f"- **Skipped:** {report.skipped}",
    ]
    if report.failed:
        lines.append(f"- **Failed:** {report.failed}")
    if report.deleted:
        lines.append(f"- **Deleted:** {report.deleted}")
    if config.bidirectional_sync:
        lines.append(f"- **Synced Back to Raindrop:** {report.pushed}")

    if report.failures:
        lines += ["", "## Failed Bookmarks", ""]
        for item in report.failures:
            label = item.raindrop_id if item.raindrop_id is not None else item.path
            lines.append(f"- `{label}` {item.title}: {item.error}")

    test_mode = f"Yes ({config.test_mode_limit} items)" if config.test_mode else "No"
    auto_sync = (
        f"Yes (every {config.sync_interval} minutes)" if config.auto_sync else "No"
    )
    lines += [
        "",
        "## Settings",
        "",
        f"- **Folder:** {config.resource_folder}",
        f"- **Use Collection Folders:** {_yes_no(config.use_collection_folders)}",
        f"- **Bidirectional Sync:** {_yes_no(config.bidirectional_sync)}",
        f"- **Auto Sync:** {auto_sync}",
        f"- **Test Mode:** {test_mode}",
        "",
        "---",
        "",
        "*This note is automatically updated after each sync.*",
        "",
    ]
    return "\n".join(lines)


async def write_status_document(
    store: IDocumentStore, report: RunReport, config: Config, now: datetime
) -> bool:
    """Regenerate the status document; failures are logged, never raised."""
    path = config.status_note_path
    try:
        await store.write(path, render_status_document(report, config, now))
    except DocumentStoreError as e:
        logger.error("status_document_write_failed", path=path, error=str(e))
        return False
    logger.debug("status_document_written", path=path)
    return True
