"""Tag conversion between the remote service and local documents.

The two directions are independent one-way normalisations, not inverses:
``"AI in UX"`` becomes ``ai-in-ux`` locally, which goes back as ``"Ai In Ux"``.
"""

import re

DEFAULT_TAG = "raindrop-bookmarks"

_WHITESPACE = re.compile(r"\s+")


class TagService:
    """Domain service for tag normalisation."""

    @staticmethod
    def to_local(tag: str) -> str:
        """Lowercase, spaces to hyphens, drop everything but alphanumerics and ``-``."""
        folded = _WHITESPACE.sub("-", tag.lower().strip())
        return "".join(ch for ch in folded if ch.isalnum() or ch == "-")

    @staticmethod
    def to_remote(tag: str) -> str:
        """Title-case each hyphen-delimited token and join with spaces."""
        words = [word for word in tag.strip().split("-") if word]
        return " ".join(word[0].upper() + word[1:] for word in words)

    @classmethod
    def local_tags(cls, remote_tags: tuple[str, ...] | list[str]) -> list[str]:
        """Local tag list for a record: default tag first, no empties, no repeats."""
        tags = [DEFAULT_TAG]
        for tag in remote_tags:
            local = cls.to_local(tag)
            if local and local not in tags:
                tags.append(local)
        return tags

    @classmethod
    def remote_tags(cls, local_tags: list[str]) -> list[str]:
        """Remote tag list for a document; the default marker tag is never pushed."""
        tags: list[str] = []
        for tag in local_tags:
            if tag.strip().lstrip("#") == DEFAULT_TAG:
                continue
            remote = cls.to_remote(tag.strip().lstrip("#"))
            if remote and remote not in tags:
                tags.append(remote)
        return tags
