"""Sync orchestration and reporting services."""

from .notify_service import Notify
from .sync_service import SyncService
from .sync_types import OutcomeRecord, SyncOutcome, SyncReport

__all__ = ["Notify", "SyncService", "OutcomeRecord", "SyncOutcome", "SyncReport"]
