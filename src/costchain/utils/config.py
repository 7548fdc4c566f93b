"""
Configuration management for the Cost Chain application.

This module handles:
- Database path configuration
- Environment-specific configuration (development vs. production)
- Explicit database URL override (e.g. a shared server database)
"""

import logging
import os
from pathlib import Path
from typing import Optional

from .constants import (
    APP_DIR_NAME,
    DATABASE_FILENAME,
    ENV_VAR_DATABASE_URL,
    ENV_VAR_ENVIRONMENT,
)

logger = logging.getLogger(__name__)


class Config:
    """
    Application configuration manager.

    Handles database location and environment settings.
    """

    def __init__(self, environment: str = "production", database_url: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            environment: Environment mode - 'production' or 'development'
            database_url: Optional explicit SQLAlchemy URL. When set, the
                database path settings are not used to build the URL.
        """
        if environment not in ("production", "development"):
            raise ValueError(
                f"Unknown environment '{environment}'. Use 'production' or 'development'."
            )

        self.environment = environment
        self._database_url_override = database_url

        if environment == "development":
            self._base_dir = self._get_project_data_dir()
        else:
            self._base_dir = self._get_user_documents_dir()

        self._database_dir = self._base_dir
        self._database_path = self._database_dir / DATABASE_FILENAME

        # Only file-based SQLite needs a directory on disk
        if self._database_url_override is None:
            self._ensure_directories()

    def _get_project_data_dir(self) -> Path:
        """Get the project's data/ directory for development."""
        # src/costchain/utils/config.py -> project root
        project_root = Path(__file__).parent.parent.parent.parent
        return project_root / "data"

    def _get_user_documents_dir(self) -> Path:
        """Get the application directory inside the user's Documents folder."""
        if os.name == "nt":
            documents = Path(os.path.expanduser("~")) / "Documents"
        else:
            documents = Path.home() / "Documents"
        return documents / APP_DIR_NAME

    def _ensure_directories(self):
        """Create necessary directories if they don't exist."""
        self._database_dir.mkdir(parents=True, exist_ok=True)

    @property
    def database_path(self) -> Path:
        """Full path to the SQLite database file."""
        return self._database_path

    @property
    def database_url(self) -> str:
        """
        SQLAlchemy database URL.

        Returns the explicit override when one was configured, otherwise a
        SQLite URL for the environment's database file.
        """
        if self._database_url_override:
            return self._database_url_override
        db_path_str = str(self._database_path).replace("\\", "/")
        return f"sqlite:///{db_path_str}"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    def database_exists(self) -> bool:
        """
        Check if the database exists.

        Non-SQLite overrides are assumed to exist; the server owns them.
        """
        if self._database_url_override and not self._database_url_override.startswith(
            "sqlite"
        ):
            return True
        return self._database_path.exists()

    def __repr__(self) -> str:
        """String representation of config."""
        return f"Config(environment='{self.environment}', database_url='{self.database_url}')"


# Global configuration instance
_config_instance: Optional[Config] = None


def get_config(environment: Optional[str] = None) -> Config:
    """
    Get the global configuration instance.

    Once created, the singleton's environment cannot be changed by passing
    a different environment argument.

    Args:
        environment: Optional environment for initial creation. If None, uses
                    COSTCHAIN_ENV or defaults to production. Ignored if
                    singleton already exists.

    Returns:
        Config instance
    """
    global _config_instance

    if _config_instance is None:
        if environment is None:
            environment = os.environ.get(ENV_VAR_ENVIRONMENT, "production")
        database_url = os.environ.get(ENV_VAR_DATABASE_URL) or None
        _config_instance = Config(environment, database_url=database_url)
    elif environment is not None and environment != _config_instance.environment:
        logger.warning(
            f"get_config() called with environment='{environment}' but singleton "
            f"already exists with environment='{_config_instance.environment}'. "
            f"Returning existing singleton."
        )

    return _config_instance


def reset_config():
    """
    Reset the global configuration instance.

    Useful for testing.
    """
    global _config_instance
    _config_instance = None


def get_database_url() -> str:
    """Get the database URL."""
    return get_config().database_url
