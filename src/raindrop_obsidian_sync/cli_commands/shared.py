"""Shared utilities for CLI commands."""

from pathlib import Path
from typing import Any

from rich.console import Console

from raindrop_obsidian_sync.config import Config, load_config, set_config
from raindrop_obsidian_sync.raindrop.client import RaindropClient
from raindrop_obsidian_sync.sync.engine import SyncEngine
from raindrop_obsidian_sync.utils.logging import configure_logging, get_logger
from raindrop_obsidian_sync.vault.store import FileSystemDocumentStore

# Shared console for all commands
console = Console()

_config: Config | None = None
_logger: Any | None = None


def get_config_and_logger(
    config_path: Path | None = None,
    log_level: str | None = None,
    verbose: bool = False,
) -> tuple[Config, Any]:
    """Load configuration and configure logging once per process.

    Args:
        config_path: Optional path to config.yaml
        log_level: Console log level; defaults to the configured level
        verbose: Show all log messages on terminal (for debugging)

    Returns:
        Tuple of (Config, Logger)
    """
    global _config, _logger

    if _config is None:
        _config = load_config(config_path)
        set_config(_config)
        configure_logging(
            log_level or _config.log_level,
            log_dir=_config.log_dir,
            verbose=verbose,
        )
        _logger = get_logger("cli")

    return _config, _logger


def build_engine(config: Config) -> tuple[SyncEngine, RaindropClient]:
    """Wire the filesystem store and the Raindrop client into an engine.

    Raises:
        MissingCredentialError: If no API token is configured
    """
    client = RaindropClient(
        token=config.require_token(),
        base_url=config.api_base_url,
        per_page=config.per_page,
        request_interval=config.request_interval,
        timeout=config.request_timeout,
    )
    store = FileSystemDocumentStore(config.vault_path)
    return SyncEngine(config, store, client), client
