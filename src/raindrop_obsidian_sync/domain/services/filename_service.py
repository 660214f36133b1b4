"""Domain service for turning titles into safe file and folder names."""

import re

# UTF-8 bytes; leaves room for a "-<n>" or "-<id>" suffix and ".md" within
# the usual 255-byte file name limit
MAX_NAME_BYTES = 200

_INVALID_CHARS = re.compile(r'[\\/:*?"<>|]')
_WHITESPACE = re.compile(r"\s+")


def _truncate_utf8(text: str, limit: int) -> str:
    """Cut ``text`` to at most ``limit`` encoded bytes on a character boundary."""
    encoded = text.encode("utf-8")
    if len(encoded) <= limit:
        return text
    return encoded[:limit].decode("utf-8", errors="ignore")


class FilenameService:
    """Sanitises titles for use as path segments."""

    @staticmethod
    def sanitize(name: str | None, fallback: str = "Untitled") -> str:
        """Replace path-hostile characters with ``-`` and collapse whitespace.

        Args:
            name: Raw title (bookmark or collection)
            fallback: Name used when nothing usable remains

        Returns:
            A single path segment of at most ``MAX_NAME_BYTES`` UTF-8 bytes
        """
        if not name or not name.strip():
            return fallback
        cleaned = _INVALID_CHARS.sub("-", name)
        cleaned = _WHITESPACE.sub(" ", cleaned).strip()
        cleaned = _truncate_utf8(cleaned, MAX_NAME_BYTES).strip()
        if not cleaned or set(cleaned) == {"."}:
            return fallback
        return cleaned

    @classmethod
    def bookmark_base_name(cls, title: str | None, raindrop_id: int) -> str:
        """Base file name (without extension) for a bookmark."""
        return cls.sanitize(title, fallback=f"Untitled-{raindrop_id}")
