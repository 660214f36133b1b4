"""Vault-relative path helpers.

Store paths are plain strings: forward slashes, no leading/trailing slash,
no empty or ``.`` segments. ``""`` denotes the vault root.
"""

from __future__ import annotations

DOCUMENT_EXTENSION = ".md"


def normalize_path(path: str) -> str:
    """Normalise separators and drop empty/``.`` segments."""
    segments = [
        segment.strip()
        for segment in path.replace("\\", "/").split("/")
        if segment.strip() not in ("", ".")
    ]
    return "/".join(segments)


def join_path(*parts: str) -> str:
    """Join path fragments and normalise the result."""
    return normalize_path("/".join(part for part in parts if part))


def parent_path(path: str) -> str:
    """Folder containing ``path`` (``""`` for top-level entries)."""
    path = normalize_path(path)
    return path.rsplit("/", 1)[0] if "/" in path else ""


def document_path(folder: str, name: str) -> str:
    """Path of the document ``name`` (without extension) inside ``folder``."""
    return join_path(folder, f"{name}{DOCUMENT_EXTENSION}")


def is_document(path: str) -> bool:
    return path.lower().endswith(DOCUMENT_EXTENSION)
