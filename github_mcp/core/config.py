# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
GitHub MCP Server Configuration - Single source of truth.
YAML is king. Env vars for secrets and deployment overrides only.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv

from github_mcp.core.errors import ConfigurationError
from github_mcp.core.logging import LOG_FORMATS, LOG_LEVELS

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "configs/server.yaml"


# =============================================================================
# CONFIGURATION DATACLASS
# =============================================================================

@dataclass(frozen=True)
class Config:
    """
    Immutable server configuration.
    All values from YAML. No hidden state.
    """

    # -- Identity --
    server_name: str = "github-mcp-server"
    server_version: str = "1.0.0"
    server_description: str = "GitHub Model Context Protocol Server"
    protocol_version: str = "2024-11-05"

    # -- HTTP --
    host: str = "0.0.0.0"
    port: int = 3000
    public_url: Optional[str] = None

    # -- Backend --
    github_api_url: str = "https://api.github.com"
    http_timeout: float = 30.0

    # -- Cache --
    cache_ttl_seconds: float = 60.0
    cache_max_entries: int = 1024
    cache_sweep_interval: float = 300.0

    # -- Streaming --
    keepalive_interval: float = 30.0

    # -- Logging --
    log_level: str = "INFO"
    log_format: str = "json"
    log_file: Optional[str] = None

    @property
    def base_url(self) -> str:
        """Externally reachable base URL, used in the stream handshake"""
        return (self.public_url or f"http://localhost:{self.port}").rstrip("/")


# =============================================================================
# SECRETS - The ONLY thing from environment variables
# =============================================================================

def get_github_token() -> Optional[str]:
    """Tokens cannot be in version control."""
    load_dotenv()
    return os.getenv("GITHUB_PERSONAL_ACCESS_TOKEN")


def require_github_token() -> str:
    """Return the GitHub token or fail startup."""
    token = get_github_token()
    if not token:
        raise ConfigurationError(
            "GITHUB_PERSONAL_ACCESS_TOKEN environment variable is required"
        )
    return token


# =============================================================================
# LOADER
# =============================================================================

def load_config(path: str = DEFAULT_CONFIG_PATH) -> Config:
    """
    Load configuration from YAML.
    Returns defaults if file doesn't exist.
    """
    if not Path(path).exists():
        logger.info(f"Config not found at {path}, using defaults")
        y = {}
    else:
        try:
            with open(path) as f:
                y = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file {path}: {e}", config_file=path)

    if not isinstance(y, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping", config_file=path)

    # Helper to safely navigate nested dicts
    def get(d: dict, *keys, default=None):
        for k in keys:
            if not isinstance(d, dict):
                return default
            d = d.get(k, {})
        return d if d != {} else default

    defaults = Config()

    log_level = str(os.getenv("LOG_LEVEL") or get(y, "logging", "level") or defaults.log_level).upper()
    if log_level not in LOG_LEVELS:
        raise ConfigurationError(
            f"Invalid log level {log_level!r}, expected one of {', '.join(LOG_LEVELS)}",
            config_file=path
        )

    log_format = get(y, "logging", "format") or defaults.log_format
    if log_format not in LOG_FORMATS:
        raise ConfigurationError(
            f"Invalid log format {log_format!r}, expected one of {', '.join(LOG_FORMATS)}",
            config_file=path
        )

    return Config(
        # Identity
        server_name=get(y, "server", "name") or defaults.server_name,
        server_version=get(y, "server", "version") or defaults.server_version,
        server_description=get(y, "server", "description") or defaults.server_description,
        protocol_version=get(y, "server", "protocol_version") or defaults.protocol_version,

        # HTTP
        host=get(y, "http", "host") or defaults.host,
        port=int(os.getenv("PORT") or get(y, "http", "port") or defaults.port),
        public_url=os.getenv("RENDER_EXTERNAL_URL") or get(y, "http", "public_url"),

        # Backend
        github_api_url=get(y, "github", "api_url") or defaults.github_api_url,
        http_timeout=float(get(y, "github", "timeout") or defaults.http_timeout),

        # Cache
        cache_ttl_seconds=float(get(y, "cache", "ttl_seconds") or defaults.cache_ttl_seconds),
        cache_max_entries=int(get(y, "cache", "max_entries") or defaults.cache_max_entries),
        cache_sweep_interval=float(get(y, "cache", "sweep_interval") or defaults.cache_sweep_interval),

        # Streaming
        keepalive_interval=float(get(y, "streaming", "keepalive_interval") or defaults.keepalive_interval),

        # Logging
        log_level=log_level,
        log_format=log_format,
        log_file=get(y, "logging", "file"),
    )


# =============================================================================
# GLOBAL INSTANCE
# =============================================================================

_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create global config instance."""
    global _config
    if _config is None:
        config_path = os.getenv("GITHUB_MCP_CONFIG_PATH", DEFAULT_CONFIG_PATH)
        _config = load_config(config_path)
    return _config
