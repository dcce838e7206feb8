"""
Server Configuration

Loads configuration from environment variables and provides defaults.
A project-root .env file is loaded with python-dotenv when present.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from playlist_recs import RecsConfig

BASE_DIR = Path(__file__).resolve().parent.parent

root_env = BASE_DIR / ".env"
if root_env.exists():
    load_dotenv(root_env)

TRUTHY = ("1", "true", "yes", "on")


def _flag_env(key: str, default: bool = False) -> bool:
    v = os.getenv(key)
    if v is None or not v.strip():
        return default
    return v.strip().lower() in TRUTHY


def _path_env(key: str, default: Optional[Path] = None) -> Optional[Path]:
    v = os.getenv(key)
    if not v:
        return default
    p = Path(v)
    return p if p.is_absolute() else (BASE_DIR / p).resolve()


@dataclass
class ServerConfig:
    """Server configuration."""

    # Feature flag: when off, every recs endpoint answers {"enabled": false}
    recs_enabled: bool = False

    # SQLite file holding the edge store (":memory:" for an in-process store)
    recs_db_path: Path = BASE_DIR / "data" / "recs.db"

    # Optional JSON file with RecsConfig overrides (sections or flat keys)
    recs_config_path: Optional[Path] = None

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000

    # Parsed overrides from recs_config_path
    recs_overrides: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Load configuration from environment variables."""
        db_path = os.getenv("RECS_DB_PATH", "").strip()
        return cls(
            recs_enabled=_flag_env("RECS_ENABLED"),
            recs_db_path=Path(db_path) if db_path == ":memory:" else _path_env("RECS_DB_PATH", BASE_DIR / "data" / "recs.db"),
            recs_config_path=_path_env("RECS_CONFIG_PATH"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
        )

    def validate(self) -> tuple[bool, list[str]]:
        """
        Validate the configuration.

        Returns:
            (is_valid, list_of_errors)
        """
        errors = []
        if self.recs_config_path and not self.recs_config_path.is_file():
            errors.append(f"Recs config file not found: {self.recs_config_path}")
        if not 0 < self.port < 65536:
            errors.append(f"Invalid port: {self.port}")
        return len(errors) == 0, errors

    def load_recs_config(self) -> RecsConfig:
        """Build the algorithm config, applying RECS_CONFIG_PATH overrides when set."""
        if self.recs_config_path and self.recs_config_path.is_file():
            with open(self.recs_config_path) as f:
                self.recs_overrides = json.load(f)
            return RecsConfig.from_dict(self.recs_overrides)
        return RecsConfig()


# Global config instance
_config: Optional[ServerConfig] = None


def get_config() -> ServerConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = ServerConfig.from_env()
    return _config


def reload_config() -> ServerConfig:
    """Reload configuration from environment."""
    global _config
    _config = None
    return get_config()
