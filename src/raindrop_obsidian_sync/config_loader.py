"""Config loader utilities."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

from .config_settings import Config
from .error_codes import ErrorCode
from .exceptions import ConfigurationError
from .utils.logging import get_logger

CONFIG_ENV_VAR = "RAINDROP_SYNC_CONFIG"

_config: Config | None = None


def _candidate_paths(config_path: Path | None) -> list[Path]:
    if config_path:
        return [config_path.expanduser()]
    candidates: list[Path] = []
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        candidates.append(Path(env_path).expanduser())
    candidates.append(Path.cwd() / "config.yaml")
    return candidates


def load_config(config_path: Path | None = None) -> Config:
    """Load configuration from config.yaml, environment and .env.

    Keys found in the YAML file are passed to ``Config`` as init kwargs;
    anything not set there falls back to environment variables.

    Raises:
        ConfigurationError: If the YAML file is unreadable or a value is invalid
    """
    logger = get_logger(__name__)

    candidates = _candidate_paths(config_path)
    resolved = next((p for p in candidates if p.exists()), None)
    if resolved is None:
        if config_path:
            msg = f"Config file not found: {config_path}"
            raise ConfigurationError(msg, error_code=ErrorCode.CFG_FILE_INVALID.value)
        logger.debug("config_file_not_found", searched_paths=[str(p) for p in candidates])

    yaml_data: dict[str, Any] = {}
    if resolved:
        try:
            with open(resolved, encoding="utf-8") as f:
                yaml_data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error(
                "config_yaml_load_error",
                config_path=str(resolved),
                error=str(e),
                error_type=type(e).__name__,
            )
            msg = f"Failed to parse config file: {resolved}"
            raise ConfigurationError(
                msg,
                suggestion=(
                    "Check YAML syntax (indentation, colons, quotes). "
                    f"Original error: {e}"
                ),
                error_code=ErrorCode.CFG_FILE_INVALID.value,
            ) from e
        if not isinstance(yaml_data, dict):
            msg = f"Config file must contain a mapping: {resolved}"
            raise ConfigurationError(msg, error_code=ErrorCode.CFG_FILE_INVALID.value)
        logger.debug("config_yaml_loaded", config_path=str(resolved), keys_count=len(yaml_data))

    kwargs = {key.lower(): value for key, value in yaml_data.items() if value is not None}
    try:
        config = Config(**kwargs)
    except ValueError as e:
        logger.error("config_validation_error", error=str(e), error_type=type(e).__name__)
        msg = "Invalid configuration"
        raise ConfigurationError(
            msg,
            suggestion=str(e),
            error_code=ErrorCode.CFG_VALUE_INVALID.value,
        ) from e

    config.validate_config()
    logger.info(
        "config_loaded",
        config_path=str(resolved) if resolved else None,
        vault_path=str(config.vault_path),
        **config.summary(),
    )
    return config


def get_config() -> Config:
    """Get singleton config instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: Config) -> None:
    """Set singleton config instance (for testing)."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset global config instance (for testing only)."""
    global _config
    _config = None


__all__ = ["Config", "get_config", "load_config", "reset_config", "set_config"]
