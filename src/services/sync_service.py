"""Sync service: copy the primary's teleporter backup to every secondary host."""

import asyncio
import logging
from typing import Optional

from api.base_client import Client
from api.client_factory import ClientFactory
from api.error_handling import ErrorNotification, GravityUpdateError, UploadError
from api.host import Host
from config.sync_config import SyncConfig

from .notify_service import Notify
from .sync_types import OutcomeRecord, SyncOutcome, SyncReport


class SyncService:
    """
    Run one sync cycle.

    The backup is downloaded once from the primary host, then restored on all
    secondary hosts concurrently. A failure on one secondary is queued on the
    notifier and never affects the others; a failure before the fan-out (bad
    host address, primary login or download) ends the cycle as a fatal error
    without contacting any secondary.
    """

    def __init__(
        self,
        config: SyncConfig,
        notify: Optional[Notify] = None,
        logger_obj: Optional[logging.Logger] = None,
    ):
        self.config = config
        self.logger = logger_obj or logging.getLogger(__name__)
        self.notify = notify or Notify(config.notify, logger_obj=self.logger)

    async def perform(self) -> SyncOutcome:
        """Run the cycle, report it, and return its classified outcome."""
        primary: Optional[Client] = None
        try:
            primary_host = Host.from_config(self.config.primary_host)
            secondary_hosts = [Host.from_config(host) for host in self.config.secondary_hosts]

            primary = await self._create_client(primary_host)
            backup = await primary.download_backup()
        except Exception as e:
            await self.notify.of_throw(e)
            return SyncOutcome.FATAL_ERROR
        finally:
            if primary is not None:
                await primary.close()

        records = await asyncio.gather(*(self._sync_secondary(host, backup) for host in secondary_hosts))
        report = SyncReport.from_records(records)
        outcome = report.classify()
        if report.errors:
            self.logger.warning(f"{len(report.errors)} of {report.total} secondary host(s) failed")

        if outcome is SyncOutcome.SUCCESS:
            await self.notify.of_success(message=report.message)
        elif outcome is SyncOutcome.PARTIAL_FAILURE:
            await self.notify.of_failure(
                message=report.message,
                send_notification=self.config.notify.on_success or self.config.notify.on_failure,
            )
        else:
            await self.notify.of_failure(message=report.message)

        return outcome

    async def _create_client(self, host: Host) -> Client:
        return await ClientFactory.create_client(
            host=host,
            version=self.config.pihole_version,
            options=self.config.sync,
            logger_obj=self.logger,
        )

    async def _sync_secondary(self, host: Host, backup: bytes) -> OutcomeRecord:
        client: Optional[Client] = None
        try:
            client = await self._create_client(host)
            if not await client.upload_backup(backup):
                raise ErrorNotification(message=UploadError.default_message.format(url=host.full_url))

            if self.config.update_gravity and not await client.update_gravity():
                raise ErrorNotification(message=GravityUpdateError.default_message.format(url=host.full_url))

            return OutcomeRecord(host=host, success=True)
        except Exception as e:
            await self.notify.of_throw(e, queue=True)
            return OutcomeRecord(host=host, success=False, error=e)
        finally:
            if client is not None:
                await client.close()
