"""Dependency injection container for the application."""

import logging
from pathlib import Path
from typing import Optional

from config.settings import Settings
from config.sync_config import SyncConfig
from services.notify_service import Notify
from services.sync_service import SyncService
from utils.logger_setup import setup_logging


class DependencyContainer:
    """Container for managing application dependencies."""

    def __init__(
        self,
        config: SyncConfig,
        logger_name: str = Settings.LOGGER_NAME,
        log_dir: Optional[Path] = None,
        file_output: bool = True,
    ):
        self.config = config
        self.logger = setup_logging(
            logger_name,
            log_level=logging.DEBUG if config.verbose else logging.INFO,
            log_dir=log_dir,
            file_output=file_output,
        )

        # Initialize services
        self._notify = None

    @property
    def notify(self) -> Notify:
        """Get or create the notification service."""
        if self._notify is None:
            self._notify = Notify(self.config.notify, logger_obj=self.logger)
        return self._notify

    def sync_service(self) -> SyncService:
        """Build a sync service for one cycle; the notifier is shared between cycles."""
        return SyncService(self.config, notify=self.notify, logger_obj=self.logger)
