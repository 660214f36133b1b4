"""Targeted header edits that leave the rest of a document untouched."""

from __future__ import annotations

import re
from datetime import datetime

from raindrop_obsidian_sync.error_codes import ErrorCode
from raindrop_obsidian_sync.exceptions import DocumentFormatError
from raindrop_obsidian_sync.utils.timestamps import format_timestamp
from raindrop_obsidian_sync.vault.codec import HEADER_DELIMITER

_LAST_SYNCED_LINE = re.compile(r"^last_synced:.*$")


def set_last_synced(content: str, synced_at: datetime) -> str:
    """Return ``content`` with only its ``last_synced`` header line replaced.

    When the header has no ``last_synced`` line, one is inserted just before
    the closing delimiter. Line endings of the original document are kept.

    Raises:
        DocumentFormatError: If the document has no delimited header
    """
    newline = "\r\n" if "\r\n" in content else "\n"
    lines = content.split(newline)
    if not lines or lines[0].lstrip("\ufeff").rstrip() != HEADER_DELIMITER:
        msg = "Document has no metadata header"
        raise DocumentFormatError(msg, error_code=ErrorCode.DOC_HEADER_MALFORMED.value)

    value = f"last_synced: {format_timestamp(synced_at)}"
    for index in range(1, len(lines)):
        line = lines[index]
        if line.rstrip() == HEADER_DELIMITER:
            lines.insert(index, value)
            return newline.join(lines)
        if _LAST_SYNCED_LINE.match(line):
            lines[index] = value
            return newline.join(lines)

    msg = "Metadata header is not terminated"
    raise DocumentFormatError(msg, error_code=ErrorCode.DOC_HEADER_MALFORMED.value)
