"""Configuration helpers for storage and runtime settings."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List, Mapping, Optional

LOGGER = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    """Raised when a required startup setting is missing or invalid."""


def _load_env_file() -> None:
    """Load variables from a local ``.env`` file when available."""

    env_path = os.path.join(os.path.dirname(os.path.dirname(__file__)), ".env")
    if not os.path.exists(env_path):
        LOGGER.debug("No .env file found at %s", env_path)
        return

    from dotenv import load_dotenv

    load_dotenv(env_path)
    LOGGER.info("Loaded environment variables from %s", env_path)


def _split_codes(raw: str) -> List[str]:
    return [code.strip().upper() for code in raw.split(",") if code.strip()]


_load_env_file()


class Config:
    """Central access point for runtime configuration."""

    # Network and storage timeouts ---------------------------------------------
    REQUEST_TIMEOUT_SECONDS: float = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "30"))
    STORE_TIMEOUT_SECONDS: float = float(os.getenv("STORE_TIMEOUT_SECONDS", "10"))

    # Extraction ---------------------------------------------------------------
    # Bank support is opt-in; only the listed extractors are registered.
    ENABLED_BANKS: List[str] = _split_codes(os.getenv("ENABLED_BANKS", "SAMPATH"))
    FETCH_SCHEDULE: str = os.getenv("FETCH_SCHEDULE", "every 6 hours")

    # Feature flags ------------------------------------------------------------
    DEBUG: bool = os.getenv("DEBUG", "False").lower() == "true"

    @classmethod
    def log_level(cls) -> int:
        return logging.DEBUG if cls.DEBUG else logging.INFO


@dataclass(frozen=True)
class StorageSettings:
    """Connection details for the observation store."""

    project_id: str
    database: str
    collection: str


_REQUIRED_STORAGE_VARS = {
    "project_id": "FIRESTORE_PROJECT_ID",
    "database": "FIRESTORE_DATABASE",
    "collection": "FIRESTORE_COLLECTION",
}


def load_storage_settings(environ: Optional[Mapping[str, str]] = None) -> StorageSettings:
    """Read the required Firestore settings.

    Args:
        environ: Mapping to read from, defaults to ``os.environ``

    Returns:
        StorageSettings: Project, database and collection names

    Raises:
        ConfigurationError: If any of the variables is missing or blank
    """
    source = os.environ if environ is None else environ

    values = {}
    missing = []
    for field_name, variable in _REQUIRED_STORAGE_VARS.items():
        value = (source.get(variable) or "").strip()
        if not value:
            missing.append(variable)
        values[field_name] = value

    if missing:
        raise ConfigurationError(
            "Missing required environment variable(s): " + ", ".join(missing)
        )

    return StorageSettings(**values)


def configure_logging() -> None:
    """Install the process-wide log format used by every entry point."""

    logging.basicConfig(
        level=Config.log_level(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
