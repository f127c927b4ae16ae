# fleetscore/config.py
"""
Configuration management for FleetScore.

Features:
- Loads from fleetscore.toml
- ENV fallbacks
- Immutable config object
- Singleton access
- Automatic logging setup on first use

Business settings (report frequency, batch size, color tiers) are not part of
this object; they live in the settings table so they can be locked during a run.
"""

from __future__ import annotations

import logging
import os
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# ---------------------------------------------------------
# LOGGING SETUP (called once when config is first loaded)
# ---------------------------------------------------------

def _ensure_logging():
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        handler.setFormatter(formatter)
        root.addHandler(handler)
        root.setLevel(logging.INFO)
        logger.setLevel(logging.INFO)

        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

        logger.debug("Default logging configured (no prior handlers)")

# ---------------------------------------------------------
# TOML LOADER
# ---------------------------------------------------------

def _read_toml(path: Path) -> dict:
    if not path.exists():
        logger.debug("TOML file %s not found, using empty config", path)
        return {}

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
        logger.debug("Loaded TOML from %s", path)
        return data
    except tomllib.TOMLDecodeError as e:
        logger.warning("Failed to parse TOML %s: %s", path, e)
        return {}

# ---------------------------------------------------------
# CONFIG OBJECT
# ---------------------------------------------------------

@dataclass(frozen=True)
class FleetScoreConfig:

    # dirs and paths
    home_dir: str
    reports_dir: str

    # Core
    db_url: Optional[str]

    # External sources
    fleet_csv: Optional[str] = None
    signals_csv: Optional[str] = None

    # Notification
    smtp_host: Optional[str] = None
    smtp_port: int = 25
    email_sender: str = "fleetscore@localhost"

    # Execution Controls
    show_progress: bool = False

    @classmethod
    def from_env(cls, toml_path: Path | str = "fleetscore.toml") -> "FleetScoreConfig":
        _ensure_logging()

        logger.debug("Loading configuration from environment and TOML")
        toml_data = _read_toml(Path(toml_path))

        def get_value(key, toml_section=None, env_var=None, default=None):
            value = None
            source = "default"
            if toml_section and toml_section in toml_data:
                val = toml_data[toml_section].get(key)
                if val is not None:
                    value = val
                    source = "TOML"
            if env_var and value is None:
                env_val = os.getenv(env_var)
                if env_val is not None:
                    value = env_val
                    source = "ENV"
            if value is None:
                value = default
                source = "default"
            logger.debug("Config %s = %s (source: %s)", key, value, source)
            return value

        home_dir = Path(get_value(
            "home_dir", toml_section="paths", env_var="FLEETSCORE_HOME",
            default=Path.home() / ".fleetscore"
        ))
        reports_dir = Path(get_value(
            "reports_dir", toml_section="paths", env_var="FLEETSCORE_REPORTS_DIR",
            default=home_dir / "reports"
        ))

        for d in [home_dir, reports_dir]:
            d.mkdir(parents=True, exist_ok=True)

        db_url = get_value(
            "url", toml_section="database", env_var="DATABASE_URL",
            default=None
        )

        fleet_csv = get_value(
            "fleet_csv", toml_section="paths", env_var="FLEETSCORE_FLEET_CSV",
            default=None
        )
        signals_csv = get_value(
            "signals_csv", toml_section="paths", env_var="FLEETSCORE_SIGNALS_CSV",
            default=None
        )

        smtp_host = get_value(
            "smtp_host", toml_section="email", env_var="FLEETSCORE_SMTP_HOST",
            default=None
        )
        smtp_port = int(get_value(
            "smtp_port", toml_section="email", env_var="FLEETSCORE_SMTP_PORT",
            default=25
        ))
        email_sender = get_value(
            "sender", toml_section="email", env_var="FLEETSCORE_EMAIL_SENDER",
            default="fleetscore@localhost"
        )

        show_progress = _as_bool(get_value(
            "show_progress", toml_section="execution", env_var=None,
            default=False
        ))

        logger.debug("Configuration loaded successfully")

        return cls(
            home_dir=str(home_dir),
            reports_dir=str(reports_dir),
            db_url=db_url,
            fleet_csv=fleet_csv,
            signals_csv=signals_csv,
            smtp_host=smtp_host,
            smtp_port=smtp_port,
            email_sender=email_sender,
            show_progress=show_progress,
        )

    # ---------------------------------------------------------
    # Helpers
    # ---------------------------------------------------------

    def ensure_sqlite_dir(self):
        if self.db_url and self.db_url.startswith("sqlite:///"):
            db_path = self.db_url.replace("sqlite:///", "")
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "home_dir": self.home_dir,
            "reports_dir": self.reports_dir,
            "db_url": self.db_url,
            "fleet_csv": self.fleet_csv,
            "signals_csv": self.signals_csv,
            "smtp_host": self.smtp_host,
            "smtp_port": self.smtp_port,
            "email_sender": self.email_sender,
            "show_progress": self.show_progress,
        }


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)

# ---------------------------------------------------------
# SINGLETON ACCESS
# ---------------------------------------------------------

_config_instance: Optional[FleetScoreConfig] = None

def get_config() -> FleetScoreConfig:
    global _config_instance

    if _config_instance is None:
        _config_instance = FleetScoreConfig.from_env()
        _config_instance.ensure_sqlite_dir()
        logger.debug(f"FleetScore config loaded: {_config_instance.to_dict()}")

    return _config_instance


def reset_config() -> None:
    """Drop the cached config so the next get_config() re-reads TOML and ENV."""
    global _config_instance
    _config_instance = None
