"""Application-wide settings and configuration."""

from pathlib import Path
from typing import Optional


class Settings:
    """Centralized application settings."""

    # Project paths
    PROJECT_ROOT = Path(__file__).parent.parent.parent
    LOGS_DIR = PROJECT_ROOT / "logs"

    # Logging
    LOGGER_NAME = "pihole_sync"
    LOG_FILE_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
    LOG_FILE_BACKUP_COUNT = 5

    # Run loop defaults
    DEFAULT_INTERVAL_MINUTES = 60
    DEFAULT_PIHOLE_VERSION = "auto"
    SUPPORTED_VERSIONS = ("auto", "5", "6")

    # Notifications
    NOTIFICATION_TITLE_PREFIX = "Pi-hole Sync"

    @classmethod
    def ensure_directories(cls, log_dir: Optional[Path] = None) -> None:
        """Ensure all required directories exist."""
        (log_dir or cls.LOGS_DIR).mkdir(parents=True, exist_ok=True)

    @classmethod
    def get_log_dir(cls, custom_path: Optional[Path] = None) -> Path:
        """Get the log directory, with optional override."""
        return custom_path or cls.LOGS_DIR
