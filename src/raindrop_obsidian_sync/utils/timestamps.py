"""UTC timestamp helpers shared by the codec, the stores and the engine."""

from __future__ import annotations

from datetime import UTC, datetime

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def format_timestamp(value: datetime) -> str:
    """Render ``2024-01-05T10:00:00.123Z`` (millisecond precision, Z suffix)."""
    value = ensure_utc(value)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def parse_timestamp(raw: str) -> datetime | None:
    """Parse an ISO-8601 timestamp; returns None for empty or invalid input."""
    raw = raw.strip()
    if not raw:
        return None
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    try:
        return ensure_utc(datetime.fromisoformat(raw))
    except ValueError:
        return None


def human_date(value: datetime) -> str:
    """US-style short date without zero padding, e.g. ``1/5/2024``."""
    value = ensure_utc(value)
    return f"{value.month}/{value.day}/{value.year}"
