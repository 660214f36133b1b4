"""Reconciliation between Raindrop and the local document tree."""

from .engine import SyncEngine
from .indexer import LocalIndex, build_local_index
from .report import RunReport, render_status_document
from .run_context import RunContext

__all__ = [
    "LocalIndex",
    "RunContext",
    "RunReport",
    "SyncEngine",
    "build_local_index",
    "render_status_document",
]
