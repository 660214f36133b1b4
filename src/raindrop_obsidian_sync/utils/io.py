"""File I/O utilities for safe and atomic operations."""

import os
import tempfile
from contextlib import suppress
from pathlib import Path

from raindrop_obsidian_sync.utils.logging import get_logger

logger = get_logger(__name__)


def atomic_write_text(path: str | Path, content: str, encoding: str = "utf-8") -> None:
    """Write text to ``path`` atomically.

    The content goes to a temporary file in the same directory which is then
    renamed over the target, so readers never observe a partially written
    document. Parent directories are created as needed.
    """
    path = Path(path)
    parent = path.parent
    parent.mkdir(parents=True, exist_ok=True)

    temp_fd, temp_name = tempfile.mkstemp(dir=parent, prefix=f".tmp_{path.name}_")
    temp_path = Path(temp_name)
    try:
        with os.fdopen(temp_fd, "w", encoding=encoding, newline="") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        temp_path.replace(path)
    except OSError as e:
        with suppress(OSError):
            temp_path.unlink()
        logger.error("atomic_write_failed", path=str(path), error=str(e))
        raise
