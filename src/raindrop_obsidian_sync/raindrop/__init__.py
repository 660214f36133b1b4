"""Raindrop.io API client."""

from .client import RaindropClient

__all__ = ["RaindropClient"]
