"""Shared utilities: logging, file I/O and timestamps."""
