"""Decide whether a document was edited locally since it was last synced."""

from __future__ import annotations

from datetime import datetime, timedelta

from raindrop_obsidian_sync.utils.timestamps import EPOCH, ensure_utc


def is_locally_edited(
    modified: datetime | None,
    last_synced: datetime | None,
    grace_seconds: float = 0.0,
) -> bool:
    """True when ``modified`` is later than ``last_synced`` plus the grace period.

    A missing ``last_synced`` counts as the epoch. A missing modification time
    never counts as an edit.
    """
    if modified is None:
        return False
    baseline = ensure_utc(last_synced) if last_synced is not None else EPOCH
    return ensure_utc(modified) > baseline + timedelta(seconds=grace_seconds)
