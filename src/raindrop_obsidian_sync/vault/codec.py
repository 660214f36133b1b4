"""Bookmark document codec.

A document is a metadata header followed by a rendered body::

    ---
    title: "Example: a title"
    url: https://example.com
    raindrop_id: 42
    collection: Reading
    tags:
      - raindrop-bookmarks
      - python
    created: 2024-01-05T10:00:00.000Z
    last_synced: 2024-02-01T08:30:00.000Z
    type: raindrop-bookmark
    domain: example.com
    added: 1/5/2024
    ---

    # Example: a title

    **URL:** [https://example.com](https://example.com)
    **Collection:** Reading
    **Tags:** #raindrop-bookmarks #python

    ## Notes

    free-form annotation

Header grammar (one entry per line)::

    entry     := key ":" [ " " value ]
    value     := quoted | "[" inline-list "]" | bare
    list-item := indent "-" " " value        (continues the previous empty key)

Quoted values use double quotes with backslash escapes for ``\\``, ``"``,
newline, carriage return and tab. Everything after the ``## Notes`` heading is
user content.
"""

from __future__ import annotations

import re
from datetime import datetime

from raindrop_obsidian_sync.domain.services.tag_service import TagService
from raindrop_obsidian_sync.error_codes import ErrorCode
from raindrop_obsidian_sync.exceptions import DocumentFormatError
from raindrop_obsidian_sync.models import (
    BOOKMARK_DOCUMENT_TYPE,
    BookmarkRecord,
    DocumentMetadata,
    ParsedDocument,
)
from raindrop_obsidian_sync.utils.timestamps import (
    format_timestamp,
    human_date,
    parse_timestamp,
)

HEADER_DELIMITER = "---"
NOTES_HEADING = "## Notes"

_NEEDS_QUOTING = re.compile(r"[:\[\]{}#&*!|>'\"%@`\n\r\t]")
_KEY_LINE = re.compile(r"^([A-Za-z_][\w-]*):(?:[ \t]+(.*?))?[ \t]*$")
_LIST_ITEM = re.compile(r"^[ \t]*-(?:[ \t]+(.*?))?[ \t]*$")

_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r", "\t": "\\t"}
_UNESCAPES = {"\\": "\\", '"': '"', "n": "\n", "r": "\r", "t": "\t"}

_KNOWN_KEYS = {
    "title",
    "url",
    "raindrop_id",
    "collection",
    "tags",
    "created",
    "last_synced",
    "type",
    "domain",
    "added",
}


def escape_value(value: str) -> str:
    """Quote a header value when it contains structurally significant characters."""
    if not value:
        return '""'
    needs_quoting = (
        bool(_NEEDS_QUOTING.search(value))
        or value != value.strip()
        or value[0] in "-?,"
    )
    if not needs_quoting:
        return value
    return '"' + "".join(_ESCAPES.get(ch, ch) for ch in value) + '"'


def _parse_quoted(raw: str, line_no: int) -> str:
    chars: list[str] = []
    i = 1
    while i < len(raw):
        ch = raw[i]
        if ch == "\\" and i + 1 < len(raw):
            nxt = raw[i + 1]
            chars.append(_UNESCAPES.get(nxt, "\\" + nxt))
            i += 2
            continue
        if ch == '"':
            rest = raw[i + 1 :].strip()
            if rest and not rest.startswith("#"):
                msg = f"Unexpected text after quoted value on header line {line_no}"
                raise DocumentFormatError(
                    msg, error_code=ErrorCode.DOC_HEADER_MALFORMED.value
                )
            return "".join(chars)
        chars.append(ch)
        i += 1
    msg = f"Unterminated quoted value on header line {line_no}"
    raise DocumentFormatError(msg, error_code=ErrorCode.DOC_HEADER_MALFORMED.value)


def _parse_single_quoted(raw: str, line_no: int) -> str:
    end = raw.rfind("'")
    if end <= 0:
        msg = f"Unterminated quoted value on header line {line_no}"
        raise DocumentFormatError(msg, error_code=ErrorCode.DOC_HEADER_MALFORMED.value)
    return raw[1:end].replace("''", "'")


def _parse_inline_list(array_content: str) -> list[str]:
    """Split ``a, "b, c", d`` into items, honouring quotes."""
    items = []
    current = ""
    quote_char: str | None = None

    for char in array_content:
        if char in ('"', "'") and quote_char is None:
            quote_char = char
        elif char == quote_char:
            quote_char = None
        elif char == "," and quote_char is None:
            item = current.strip()
            if item:
                items.append(item)
            current = ""
        else:
            current += char

    item = current.strip()
    if item:
        items.append(item)
    return items


def parse_scalar(raw: str, line_no: int = 0) -> str:
    """Decode a single header value (quoted or bare)."""
    raw = raw.strip()
    if raw.startswith('"'):
        return _parse_quoted(raw, line_no)
    if raw.startswith("'"):
        return _parse_single_quoted(raw, line_no)
    return raw


def split_header(text: str) -> tuple[list[str], str] | None:
    """Split a document into header lines and body.

    Returns None when the document does not start with a delimited header.
    """
    text = text.lstrip("\ufeff").replace("\r\n", "\n")
    lines = text.split("\n")
    if not lines or lines[0].rstrip() != HEADER_DELIMITER:
        return None
    for index in range(1, len(lines)):
        if lines[index].rstrip() == HEADER_DELIMITER:
            return lines[1:index], "\n".join(lines[index + 1 :])
    return None


def parse_header(lines: list[str]) -> dict[str, str | list[str]]:
    """Parse header lines into a mapping following the header grammar.

    Raises:
        DocumentFormatError: If a line does not follow the grammar
    """
    fields: dict[str, str | list[str]] = {}
    list_key: str | None = None

    for line_no, line in enumerate(lines, start=1):
        if not line.strip() or line.lstrip().startswith("#"):
            continue

        item = _LIST_ITEM.match(line)
        if item and (line[0] in " \t" or line.startswith("- ") or line == "-"):
            if list_key is None:
                msg = f"List item without a list key on header line {line_no}"
                raise DocumentFormatError(
                    msg, error_code=ErrorCode.DOC_HEADER_MALFORMED.value
                )
            value = parse_scalar(item.group(1) or "", line_no)
            current = fields[list_key]
            assert isinstance(current, list)
            if value:
                current.append(value)
            continue

        entry = _KEY_LINE.match(line)
        if not entry:
            msg = f"Expected 'key: value' on header line {line_no}"
            raise DocumentFormatError(
                msg,
                error_code=ErrorCode.DOC_HEADER_MALFORMED.value,
                context={"line": line},
            )

        key, raw = entry.group(1), (entry.group(2) or "")
        if not raw:
            fields[key] = []
            list_key = key
            continue

        list_key = None
        if raw.startswith("[") and raw.endswith("]"):
            fields[key] = [
                parse_scalar(part, line_no) for part in _parse_inline_list(raw[1:-1])
            ]
        else:
            fields[key] = parse_scalar(raw, line_no)

    return fields


def _as_text(value: str | list[str] | None) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(value)
    return value


def _as_list(value: str | list[str] | None) -> list[str]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [part for part in re.split(r"[,\s]+", value) if part]


def extract_annotation(body: str) -> str:
    """Everything after the first ``## Notes`` heading, trimmed."""
    lines = body.split("\n")
    for index, line in enumerate(lines):
        if line.rstrip() == NOTES_HEADING:
            return "\n".join(lines[index + 1 :]).strip()
    return ""


def decode(text: str) -> ParsedDocument | None:
    """Parse a document into metadata and annotation.

    Returns None when the document has no delimited header (ordinary notes).

    Raises:
        DocumentFormatError: If the header exists but is malformed
    """
    split = split_header(text)
    if split is None:
        return None
    header_lines, body = split
    fields = parse_header(header_lines)

    raw_id = _as_text(fields.get("raindrop_id")).strip()
    raindrop_id: int | None = None
    if raw_id:
        try:
            raindrop_id = int(raw_id)
        except ValueError as e:
            msg = f"raindrop_id is not an integer: {raw_id!r}"
            raise DocumentFormatError(
                msg, error_code=ErrorCode.DOC_HEADER_MALFORMED.value
            ) from e

    metadata = DocumentMetadata(
        title=_as_text(fields.get("title")),
        url=_as_text(fields.get("url")),
        raindrop_id=raindrop_id,
        collection=_as_text(fields.get("collection")),
        tags=[tag.lstrip("#") for tag in _as_list(fields.get("tags"))],
        created=_as_text(fields.get("created")),
        last_synced=parse_timestamp(_as_text(fields.get("last_synced"))),
        type=_as_text(fields.get("type")) or None,
        domain=_as_text(fields.get("domain")),
        added=_as_text(fields.get("added")),
        extra={k: v for k, v in fields.items() if k not in _KNOWN_KEYS},
    )
    return ParsedDocument(metadata=metadata, annotation=extract_annotation(body))


def encode(
    record: BookmarkRecord,
    collection_title: str,
    synced_at: datetime,
    annotation: str | None = None,
) -> str:
    """Render the canonical document for ``record``.

    Args:
        record: Remote bookmark
        collection_title: Resolved collection title ("Unsorted" when unknown)
        synced_at: Value written to ``last_synced``
        annotation: Notes section text; defaults to the record's remote note

    Returns:
        Document text, byte-identical for identical arguments
    """
    title = record.title or "Untitled"
    heading = " ".join(title.split())
    tags = TagService.local_tags(record.tags)
    notes = record.note if annotation is None else annotation

    if tags:
        tags_block = "tags:\n" + "\n".join(f"  - {tag}" for tag in tags)
    else:
        tags_block = "tags: []"

    created = format_timestamp(record.created) if record.created else ""
    added = human_date(record.created) if record.created else ""

    header = "\n".join(
        [
            HEADER_DELIMITER,
            f"title: {escape_value(title)}",
            f"url: {escape_value(record.link)}",
            f"raindrop_id: {record.id}",
            f"collection: {escape_value(collection_title)}",
            tags_block,
            f"created: {created}",
            f"last_synced: {format_timestamp(synced_at)}",
            f"type: {BOOKMARK_DOCUMENT_TYPE}",
            f"domain: {escape_value(record.domain or 'Unknown')}",
            f"added: {added}",
            HEADER_DELIMITER,
        ]
    )

    link = record.link
    tags_line = " ".join(f"#{tag}" for tag in tags)
    body_lines = [
        "",
        f"# {heading}",
        "",
        f"**URL:** [{link or 'No URL'}]({link or '#'})",
        f"**Collection:** {collection_title}",
    ]
    if tags_line:
        body_lines.append(f"**Tags:** {tags_line}")
    body_lines += ["", NOTES_HEADING, "", notes]

    return header + "\n" + "\n".join(body_lines) + "\n"


def document_type(text: str) -> str | None:
    """The header ``type`` value, without validating the remaining fields.

    Raises:
        DocumentFormatError: If the header exists but is malformed
    """
    split = split_header(text)
    if split is None:
        return None
    return _as_text(parse_header(split[0]).get("type")) or None
