"""Run reporting: logging plus optional Apprise notifications."""

import logging
from typing import Any, Dict, List, Optional, Union

import aiohttp

from api.error_handling import NETWORK_ERRORS, ErrorNotification
from config.api import APIConfig
from config.settings import Settings
from config.sync_config import NotifyConfig

Verbose = Optional[Union[Dict[str, Any], str]]


class Notify:
    """
    Report the outcome of a sync cycle.

    Individual host failures are queued with ``queue_error`` and flushed into
    the body of the next failure notification. Whether a report is dispatched
    externally follows ``NotifyConfig`` unless the caller overrides it with
    ``send_notification``.
    """

    def __init__(self, config: NotifyConfig, logger_obj: Optional[logging.Logger] = None):
        self.config = config
        self.logger = logger_obj or logging.getLogger(__name__)
        self._error_queue: List[ErrorNotification] = []

    async def of_success(
        self, message: str, verbose: Verbose = None, send_notification: Optional[bool] = None
    ) -> None:
        self.logger.info(f"✔️ Success: {message}")
        self._log_verbose(verbose)

        should_send = self.config.on_success if send_notification is None else send_notification
        if should_send:
            await self._dispatch("✔️ Success", message)

    async def of_failure(
        self, message: str, verbose: Verbose = None, send_notification: Optional[bool] = None
    ) -> None:
        self.logger.error(f"⚠ Failure: {message}")
        self._log_verbose(verbose)

        errors = [error.message for error in self._error_queue]
        self._error_queue = []

        should_send = self.config.on_failure if send_notification is None else send_notification
        if should_send:
            contents = (f"{message}\n\nErrors:\n- " + "\n- ".join(errors)) if errors else message
            await self._dispatch("⚠ Failed", contents)

    def queue_error(self, error: ErrorNotification) -> None:
        self.logger.error(f"⚠ Error: {error.message}")
        self._log_verbose(error.verbose)
        self._error_queue.append(error)

    async def of_throw(self, error: BaseException, queue: bool = False) -> None:
        """Report an exception, turning unknown errors into a readable notification."""
        if isinstance(error, ErrorNotification):
            if queue:
                self.queue_error(error)
            else:
                await self.of_failure(
                    message=error.message,
                    verbose=error.verbose,
                    send_notification=error.send_notification,
                )
        elif isinstance(error, aiohttp.ClientConnectorError):
            await self.of_throw(
                ErrorNotification(
                    message=f'The host "{error.host}" refused to connect. Is it down?',
                    verbose=str(error),
                ),
                queue,
            )
        else:
            self.logger.debug("Unexpected error", exc_info=error)
            notification = ErrorNotification(message=f"An unexpected error was thrown:\n- {error}")
            if queue:
                self.queue_error(notification)
            else:
                await self.of_failure(message=notification.message)

    def _log_verbose(self, verbose: Verbose) -> None:
        if verbose:
            self.logger.debug(f"{verbose}")

    async def _dispatch(self, summary: str, contents: str) -> None:
        if not self.config.apprise_url:
            self.logger.debug("No notification channel configured, skipping dispatch")
            return
        await self._dispatch_apprise(summary, contents)

    async def _dispatch_apprise(self, summary: str, contents: str) -> None:
        payload = {"title": f"{Settings.NOTIFICATION_TITLE_PREFIX}: {summary}", "body": contents}
        timeout = aiohttp.ClientTimeout(total=APIConfig.REQUEST_TIMEOUT)
        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(self.config.apprise_url, json=payload, timeout=timeout) as resp:
                    if resp.status >= 400:
                        self.logger.error(
                            f"Apprise notification failed with status {resp.status}: {await resp.text()}"
                        )
                    else:
                        self.logger.debug("Apprise notification sent")
        except NETWORK_ERRORS as e:
            self.logger.error(f"Failed to send Apprise notification: {e}")
