"""
CookieSec Config Management

Configuration loading from two sources:
1. ~/.cookiesec/config.yaml (persistent, optional)
2. Environment variables (override)

Priority: CLI flags > ENV > config.yaml > defaults
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

import yaml

from cookiesec.errors import ConfigError

# ═══════════════════════════════════════════════════════════════════════════
# Config Paths
# ═══════════════════════════════════════════════════════════════════════════

COOKIESEC_HOME = Path.home() / ".cookiesec"
CONFIG_FILE = COOKIESEC_HOME / "config.yaml"

DEFAULTS: dict[str, Any] = {
    "output_dir": ".",
    "format": "html",
    "headless": True,
    "timeout_ms": 30000,
}

# ENV var → (config key, parser)
_ENV_OVERRIDES = {
    "COOKIESEC_OUTPUT_DIR": ("output_dir", str),
    "COOKIESEC_FORMAT": ("format", str),
    "COOKIESEC_HEADLESS": ("headless", lambda v: v.strip().lower() not in ("0", "false", "no", "off")),
    "COOKIESEC_TIMEOUT_MS": ("timeout_ms", int),
}


# ═══════════════════════════════════════════════════════════════════════════
# Config Loader
# ═══════════════════════════════════════════════════════════════════════════


class Config:
    """Unified configuration management."""

    def __init__(self, path: Optional[Path] = None):
        self.path = path or CONFIG_FILE
        self.data: dict[str, Any] = dict(DEFAULTS)
        self._load()

    def _load(self):
        """Load config from all sources (priority: ENV > config.yaml > defaults)."""
        if self.path.exists():
            try:
                with open(self.path, encoding="utf-8") as f:
                    loaded = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigError(f"Could not read config file {self.path}: {e}") from e
            if not isinstance(loaded, dict):
                raise ConfigError(f"Config file {self.path} must contain a mapping")
            self.data.update({k: v for k, v in loaded.items() if k in DEFAULTS})

        self._apply_env_overrides()

    def _apply_env_overrides(self):
        """Environment variables override config file."""
        for env_key, (key, parse) in _ENV_OVERRIDES.items():
            if env_key in os.environ:
                try:
                    self.data[key] = parse(os.environ[env_key])
                except ValueError as e:
                    raise ConfigError(f"Invalid value for {env_key}: {e}") from e

    def get(self, key: str, default: Any = None) -> Any:
        """Get config value."""
        return self.data.get(key, default)

    def set(self, key: str, value: Any):
        """Set config value (in-memory only)."""
        self.data[key] = value

    @property
    def output_dir(self) -> Path:
        return Path(self.get("output_dir", "."))

    @property
    def format(self) -> str:
        return self.get("format", "html")

    @property
    def headless(self) -> bool:
        return bool(self.get("headless", True))

    @property
    def timeout_ms(self) -> int:
        return int(self.get("timeout_ms", 30000))


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════


def load_config(path: Optional[Path] = None) -> Config:
    """Load config from all sources."""
    return Config(path)
