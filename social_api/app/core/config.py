"""
Configuration management.

The ``Settings`` dataclass reads configuration directly from environment
variables, with defaults for every field.  Deployments override values
through the environment; tests build their own ``Settings`` instance and
pass it to ``create_app``.
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Social API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: Optional[str] = os.getenv("LOG_FILE") or None

    # Path to the SQLite file holding the ``user`` and ``post``
    # collections.  Relative paths are resolved against the project root
    # by ``core.db.get_database_path``.
    database_url: str = os.getenv("DATABASE_URL", "social.db")

    # PBKDF2 work factor.  Every stored hash records the count it was
    # created with, so raising this only affects new hashes.
    password_hash_iterations: int = int(os.getenv("PASSWORD_HASH_ITERATIONS", "100000"))

    host: str = os.getenv("APP_HOST", "0.0.0.0")
    port: int = int(os.getenv("APP_PORT", "8000"))


# Environment variables must be set before this module is imported.
settings = Settings()
