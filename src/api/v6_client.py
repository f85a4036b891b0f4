"""Client for the Pi-hole v6 REST API."""

import json
import logging
from typing import Optional

import aiohttp

from config.api import APIConfig
from config.sync_config import SyncOptionsV6

from .base_client import Client, gravity_timeout, new_session
from .error_handling import (
    NETWORK_ERRORS,
    AuthenticationError,
    DownloadError,
    GravityUpdateError,
    GravityUpdateExhaustedError,
    TransientNetworkError,
    UploadError,
    is_transient,
)
from .host import Host
from .retry import RetryExecutor, RetryPolicy


class ClientV6(Client):
    """Pi-hole v6: session id login, zip teleporter, asynchronous gravity rebuild.

    The gravity endpoint can answer with a gateway error or drop the
    connection while FTL restarts after a restore, so ``update_gravity`` runs
    through a :class:`RetryExecutor`.
    """

    version = 6

    def __init__(
        self,
        host: Host,
        session: aiohttp.ClientSession,
        options: SyncOptionsV6,
        logger_obj: Optional[logging.Logger] = None,
    ):
        super().__init__(host, session, logger_obj)
        self.options = options
        self._sid: Optional[str] = None
        self._csrf: Optional[str] = None

    @classmethod
    async def create(
        cls,
        host: Host,
        options: SyncOptionsV6,
        logger_obj: Optional[logging.Logger] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> "ClientV6":
        """Log in to ``host`` and return a ready client."""
        client = cls(host, session or new_session(), options, logger_obj)
        try:
            await client._login()
        except BaseException:
            await client.close()
            raise
        return client

    async def _login(self) -> None:
        path = APIConfig.V6_AUTH_PATH
        self.logger.info(f"Authenticating with {self.host.full_url}...")

        await self._request("GET", path, AuthenticationError)
        response = await self._request("POST", path, AuthenticationError, json={"password": self.host.password})
        if response.status != 200:
            raise AuthenticationError(self.host, path, response.status, response.text)

        try:
            session = json.loads(response.text)["session"]
        except (ValueError, KeyError, TypeError) as e:
            raise AuthenticationError(self.host, path, response.status, response.text) from e

        if not session.get("valid") or not session.get("sid"):
            raise AuthenticationError(self.host, path, response.status, response.text)

        self._sid = session["sid"]
        self._csrf = session.get("csrf")
        self.logger.debug(f"Logged in to {self.host.full_url} (session valid for {session.get('validity')}s)")

    def _auth_headers(self) -> dict:
        headers = {"X-FTL-SID": self._sid or ""}
        if self._csrf:
            headers["X-FTL-CSRF"] = self._csrf
        return headers

    async def download_backup(self) -> bytes:
        path = APIConfig.V6_TELEPORTER_PATH
        self.logger.info(f"Downloading backup from {self.host.full_url}...")

        response = await self._request("GET", path, DownloadError, headers=self._auth_headers())
        if not response.ok:
            raise DownloadError(self.host, path, response.status, response.text)

        self.logger.debug(f"Downloaded {len(response.body)} bytes from {self.host.full_url}")
        return response.body

    async def upload_backup(self, backup: bytes) -> bool:
        path = APIConfig.V6_TELEPORTER_PATH
        self.logger.info(f"Uploading backup to {self.host.full_url}...")

        form = aiohttp.FormData()
        form.add_field("file", backup, filename="backup.zip", content_type="application/zip")
        form.add_field(
            "import",
            json.dumps(self.options.to_import_payload()),
            content_type="application/json",
        )

        response = await self._request("POST", path, UploadError, data=form, headers=self._auth_headers())
        if not response.ok:
            raise UploadError(self.host, path, response.status, response.text)

        self.logger.info(f"Backup restored on {self.host.full_url}")
        return True

    async def update_gravity(self) -> bool:
        self.logger.info(f"Updating gravity on {self.host.full_url}...")
        executor = RetryExecutor(
            RetryPolicy.from_retry_count(self.options.gravity_update_retry_count),
            logger_obj=self.logger,
            exhausted_error=GravityUpdateExhaustedError,
        )
        return await executor.run(self._request_gravity_update, self.host, APIConfig.V6_GRAVITY_PATH)

    async def _request_gravity_update(self) -> bool:
        path = APIConfig.V6_GRAVITY_PATH
        try:
            response = await self._fetch("POST", path, timeout=gravity_timeout(), headers=self._auth_headers())
        except NETWORK_ERRORS as e:
            if not is_transient(e):
                raise GravityUpdateError(self.host, path, getattr(e, "status", None), str(e)) from e
            raise TransientNetworkError(self.host, path, cause=e) from e

        if is_transient(status=response.status):
            raise TransientNetworkError(self.host, path, status=response.status)
        if not response.ok:
            raise GravityUpdateError(self.host, path, response.status, response.text)

        self.logger.info(f"Gravity updated on {self.host.full_url}")
        self.logger.debug(response.text.strip())
        return True
