"""Dashboard configuration loaded from .inkpact.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field

from inkpact.content.images import ALLOWED_TYPES, MAX_UPLOAD_BYTES

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".inkpact.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
]
GLOBAL_CONFIG = Path.home() / ".config" / "inkpact" / "config.toml"


class ServerConfig(BaseModel):
    """[server] section."""

    host: str = "127.0.0.1"
    port: int = 3000
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])


class StorageConfig(BaseModel):
    """[storage] section."""

    data_dir: str = "./data"
    atomic_writes: bool = False

    @property
    def path(self) -> Path:
        return Path(self.data_dir).expanduser()


class UploadsConfig(BaseModel):
    """[uploads] section."""

    max_bytes: int = MAX_UPLOAD_BYTES
    allowed_types: list[str] = Field(default_factory=lambda: list(ALLOWED_TYPES))


class LoggingConfig(BaseModel):
    """[logging] section."""

    level: str = "INFO"


class DashboardConfig(BaseModel):
    """Top-level configuration for the dashboard server and CLI."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    uploads: UploadsConfig = Field(default_factory=UploadsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(path: str | Path | None = None) -> DashboardConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .inkpact.toml in CWD
    3. ~/.config/inkpact/config.toml

    Then overlay environment variables.

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged DashboardConfig.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break
        if not data and GLOBAL_CONFIG.exists():
            data = _load_toml(GLOBAL_CONFIG)
            logger.info("Loaded config from %s", GLOBAL_CONFIG)

    config = DashboardConfig.model_validate(data) if data else DashboardConfig()
    return _apply_env_vars(config)


def merge_cli_overrides(config: DashboardConfig, **cli_kwargs: object) -> DashboardConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only overrides values where the CLI flag was explicitly provided
    (i.e., not None).
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "host": ("server", "host"),
        "port": ("server", "port"),
        "data_dir": ("storage", "data_dir"),
        "atomic_writes": ("storage", "atomic_writes"),
        "log_level": ("logging", "level"),
    }

    for key, value in cli_kwargs.items():
        if value is None or key not in mapping:
            continue
        section, field = mapping[key]
        data[section][field] = str(value) if isinstance(value, Path) else value

    return DashboardConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: DashboardConfig) -> DashboardConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "INKPACT_HOST": ("server", "host"),
        "INKPACT_DATA_DIR": ("storage", "data_dir"),
        "INKPACT_LOG_LEVEL": ("logging", "level"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    # PORT is what most hosting platforms set; INKPACT_PORT wins over it
    for env_var in ("PORT", "INKPACT_PORT"):
        port_raw = os.environ.get(env_var)
        if port_raw:
            data["server"]["port"] = int(port_raw)

    atomic_raw = os.environ.get("INKPACT_ATOMIC_WRITES")
    if atomic_raw is not None:
        data["storage"]["atomic_writes"] = atomic_raw.lower() in ("true", "1", "yes")

    max_raw = os.environ.get("INKPACT_MAX_UPLOAD_BYTES")
    if max_raw is not None:
        data["uploads"]["max_bytes"] = int(max_raw)

    return DashboardConfig.model_validate(data)
