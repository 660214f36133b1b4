"""Data models for the sync service."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)

BOOKMARK_DOCUMENT_TYPE = "raindrop-bookmark"
STATUS_DOCUMENT_TYPE = "raindrop-sync-status"
UNSORTED_TITLE = "Unsorted"


class BookmarkRecord(BaseModel):
    """A bookmark owned by the remote service.

    Parsed straight from the API payload (``_id``, ``link``, ``collection.$id``,
    ``lastUpdate``), but also constructible with the Python field names.
    Treated as an immutable snapshot for the duration of one run.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: int = Field(validation_alias=AliasChoices("_id", "id"))
    title: str = ""
    link: str = ""
    note: str = ""
    excerpt: str = ""
    tags: tuple[str, ...] = ()
    collection_id: int | None = Field(
        default=None,
        validation_alias=AliasChoices(AliasPath("collection", "$id"), "collection_id"),
    )
    created: datetime | None = None
    last_update: datetime | None = Field(
        default=None, validation_alias=AliasChoices("lastUpdate", "last_update")
    )
    domain: str = ""

    @field_validator("title", "link", "note", "excerpt", "domain", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_to_tuple(cls, v: Any) -> Any:
        if v is None:
            return ()
        return tuple(str(tag) for tag in v)


class Collection(BaseModel):
    """A remote collection; ``parent_id`` links it into the hierarchy."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: int = Field(validation_alias=AliasChoices("_id", "id"))
    title: str = ""
    count: int = 0
    parent_id: int | None = Field(
        default=None,
        validation_alias=AliasChoices(AliasPath("parent", "$id"), "parent_id"),
    )

    @field_validator("title", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v


@dataclass
class DocumentMetadata:
    """Fields read from a document's metadata header."""

    title: str = ""
    url: str = ""
    raindrop_id: int | None = None
    collection: str = ""
    tags: list[str] = field(default_factory=list)
    created: str = ""
    last_synced: datetime | None = None
    type: str | None = None
    domain: str = ""
    added: str = ""
    extra: dict[str, str | list[str]] = field(default_factory=dict)

    @property
    def is_bookmark(self) -> bool:
        """True for synced bookmark documents carrying a remote id."""
        return self.type == BOOKMARK_DOCUMENT_TYPE and self.raindrop_id is not None


@dataclass
class ParsedDocument:
    """Result of decoding a document: header metadata plus annotation text."""

    metadata: DocumentMetadata
    annotation: str


@dataclass
class LocalDocument:
    """A decoded document found in the local tree."""

    path: str
    metadata: DocumentMetadata
    annotation: str
    content: str
    modified: datetime | None = None

    @property
    def raindrop_id(self) -> int | None:
        return self.metadata.raindrop_id


class SyncOutcome(str, Enum):
    """Per-record result of the forward pass."""

    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"


@dataclass
class FailedItem:
    """A record or document whose reconciliation failed."""

    raindrop_id: int | None
    title: str
    error: str
    path: str | None = None
