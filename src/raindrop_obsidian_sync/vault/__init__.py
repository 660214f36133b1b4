"""Local vault: document codec, path helpers and filesystem store."""

from .codec import NOTES_HEADING, decode, encode, escape_value
from .collection_paths import resolve_collection_path
from .header_writer import set_last_synced
from .store import FileSystemDocumentStore

__all__ = [
    "NOTES_HEADING",
    "FileSystemDocumentStore",
    "decode",
    "encode",
    "escape_value",
    "resolve_collection_path",
    "set_last_synced",
]
