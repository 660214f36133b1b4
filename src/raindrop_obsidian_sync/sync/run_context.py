"""Per-run state threaded through the reconciliation passes."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from raindrop_obsidian_sync.sync.report import RunReport
from raindrop_obsidian_sync.utils.timestamps import utc_now

StatusCallback = Callable[[str], None]


def _ignore_status(_: str) -> None:
    return None


@dataclass
class RunContext:
    """State of one reconciliation run.

    Replaces process-wide "last sync time" and status-bar text: the engine
    creates one context per run and hands it to every pass.
    """

    started_at: datetime
    clock: Callable[[], datetime] = utc_now
    on_status: StatusCallback = _ignore_status
    report: RunReport = field(default_factory=RunReport)
    last_sync_time: datetime | None = None
    status: str = ""

    def set_status(self, text: str) -> None:
        """Record and publish the current progress text."""
        self.status = text
        self.on_status(text)

    def now(self) -> datetime:
        return self.clock()

    def finish(self) -> None:
        """Mark the run as completed successfully."""
        self.last_sync_time = self.clock()
        self.report.finished_at = self.last_sync_time
        self.set_status(f"Last sync: {self.last_sync_time.strftime('%H:%M:%S')}")
