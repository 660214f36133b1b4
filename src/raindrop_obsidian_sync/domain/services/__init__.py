"""Domain services package."""

from .filename_service import FilenameService
from .tag_service import DEFAULT_TAG, TagService

__all__ = [
    "DEFAULT_TAG",
    "FilenameService",
    "TagService",
]
