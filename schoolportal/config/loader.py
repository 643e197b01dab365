"""
Config Loader — Load portal settings from master key, env vars, or YAML.

Supports three sources:
1. Master JSON key: single SCHOOL_PORTAL_CONFIG env var with all settings
2. Individual keys: separate env vars (SCHOOL_PORTAL_REMOTE_URL, ...)
3. portal.yaml in the project root for non-secret settings

## Usage

    # Option 1: Master config
    export SCHOOL_PORTAL_CONFIG='{"remote_url": "https://script.google.com/...", "offline": false}'

    # Option 2: Individual keys
    export SCHOOL_PORTAL_REMOTE_URL="https://script.google.com/..."
    export SCHOOL_PORTAL_DATA_DIR="/var/lib/schoolportal"

The loader reads the YAML file first, lets the master config override it,
and finally lets individual env vars fill or override single keys.
"""

from __future__ import annotations

import json
import logging
import os
import secrets
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

logger = logging.getLogger(__name__)

MASTER_ENV_VAR = "SCHOOL_PORTAL_CONFIG"
ENV_PREFIX = "SCHOOL_PORTAL_"
DEFAULT_YAML_NAME = "portal.yaml"

# Google Sheets cells hold at most 50,000 characters.
DEFAULT_PAYLOAD_CEILING = 50_000

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _project_root() -> Path:
    return Path(__file__).resolve().parents[2]


@dataclass
class PortalConfig:
    """All runtime settings in one place."""

    # Remote "cloud" endpoint (Apps Script web app URL)
    remote_url: Optional[str] = None
    remote_timeout: float = 10.0
    remote_attempts: int = 3
    remote_backoff_seconds: float = 0.5
    payload_ceiling: int = DEFAULT_PAYLOAD_CEILING

    # Forces the coordinator to treat the network as unavailable
    offline: bool = False

    # Local store + pending push record live here
    data_dir: Path = field(default_factory=lambda: _project_root() / "state")

    # Flask session signing key
    secret_key: Optional[str] = None

    # Passed to setup_logging(); None defers to LOG_LEVEL / LOG_FORMAT
    log_level: Optional[str] = None
    log_format: Optional[str] = None

    def has_remote(self) -> bool:
        return bool(self.remote_url)

    @property
    def local_store_path(self) -> Path:
        return self.data_dir / "portal_db.json"

    @property
    def pending_push_path(self) -> Path:
        return self.data_dir / "pending_push.json"

    def ensure_secret_key(self) -> str:
        """Return the session key, generating an ephemeral one if unset."""
        if not self.secret_key:
            logger.warning(
                "SCHOOL_PORTAL_SECRET_KEY not set; sessions will not survive a restart"
            )
            self.secret_key = secrets.token_hex(32)
        return self.secret_key

    def to_dict(self) -> Dict[str, Any]:
        """Settings for display; the session key is never echoed."""
        return {
            "remote_url": self.remote_url,
            "remote_timeout": self.remote_timeout,
            "remote_attempts": self.remote_attempts,
            "remote_backoff_seconds": self.remote_backoff_seconds,
            "payload_ceiling": self.payload_ceiling,
            "offline": self.offline,
            "data_dir": str(self.data_dir),
            "secret_key_set": bool(self.secret_key),
            "log_level": self.log_level,
            "log_format": self.log_format,
        }


def _coerce(name: str, raw: Any) -> Any:
    """Convert a raw config value to the type of the named field."""
    if raw is None:
        return None
    if name == "offline":
        if isinstance(raw, bool):
            return raw
        return str(raw).strip().lower() in _TRUE_VALUES
    if name in ("remote_timeout", "remote_backoff_seconds"):
        return float(raw)
    if name in ("remote_attempts", "payload_ceiling"):
        return int(raw)
    if name == "data_dir":
        return Path(raw).expanduser()
    return str(raw)


def _apply(config: PortalConfig, data: Mapping[str, Any], source: str) -> None:
    known = {f.name for f in fields(PortalConfig)}
    for key, value in data.items():
        name = key.lower()
        if name.startswith(ENV_PREFIX.lower()):
            name = name[len(ENV_PREFIX):]
        if name not in known:
            logger.debug(f"Ignoring unknown config key '{key}' from {source}")
            continue
        try:
            setattr(config, name, _coerce(name, value))
        except (TypeError, ValueError) as e:
            logger.error(f"Invalid value for '{key}' in {source}: {e}")


def load_yaml_settings(path: Path) -> Dict[str, Any]:
    """Read the optional YAML settings file (returns {} when absent)."""
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        logger.error(f"Invalid YAML in {path}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.error(f"{path} must contain a mapping, got {type(data).__name__}")
        return {}
    return data


def load_config(
    env: Optional[Mapping[str, str]] = None,
    yaml_path: Optional[Path] = None,
) -> PortalConfig:
    """
    Load configuration from YAML, master key and individual env vars.

    Priority (highest last):
    1. portal.yaml
    2. SCHOOL_PORTAL_CONFIG (master JSON)
    3. Individual SCHOOL_PORTAL_* environment variables

    Returns:
        PortalConfig with all available settings
    """
    env = os.environ if env is None else env
    config = PortalConfig()

    yaml_path = yaml_path or _project_root() / DEFAULT_YAML_NAME
    yaml_settings = load_yaml_settings(yaml_path)
    if yaml_settings:
        _apply(config, yaml_settings, str(yaml_path))
        logger.info(f"Loaded settings from {yaml_path.name}")

    master_config = env.get(MASTER_ENV_VAR)
    if master_config:
        try:
            data = json.loads(master_config)
            _apply(config, data, MASTER_ENV_VAR)
            logger.info(f"Loaded configuration from {MASTER_ENV_VAR}")
        except json.JSONDecodeError as e:
            logger.error(f"Invalid {MASTER_ENV_VAR} JSON: {e}")

    individual = {
        key: value
        for key, value in env.items()
        if key.startswith(ENV_PREFIX) and key != MASTER_ENV_VAR and value != ""
    }
    _apply(config, individual, "environment")

    return config
