"""Client for the Pi-hole v5 PHP admin interface."""

import logging
import re
from typing import Optional

import aiohttp

from config.api import APIConfig
from config.sync_config import SyncOptionsV5

from .base_client import Client, gravity_timeout, new_session
from .error_handling import AuthenticationError, DownloadError, GravityUpdateError, UploadError
from .host import Host

_TOKEN_PATTERN = re.compile(r'<div id="token" hidden>(.*?)</div>', re.DOTALL)
GRAVITY_SUCCESS_MARKER = "Pi-hole blocking is enabled"


class ClientV5(Client):
    """Pi-hole v5: cookie login plus CSRF token, gzip teleporter, synchronous gravity."""

    version = 5

    def __init__(
        self,
        host: Host,
        session: aiohttp.ClientSession,
        options: SyncOptionsV5,
        logger_obj: Optional[logging.Logger] = None,
    ):
        super().__init__(host, session, logger_obj)
        self.options = options
        self._token: Optional[str] = None

    @classmethod
    async def create(
        cls,
        host: Host,
        options: SyncOptionsV5,
        logger_obj: Optional[logging.Logger] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> "ClientV5":
        """Log in to ``host`` and return a ready client."""
        client = cls(host, session or new_session(), options, logger_obj)
        try:
            await client._login()
        except BaseException:
            await client.close()
            raise
        return client

    async def _login(self) -> None:
        path = APIConfig.V5_LOGIN_PATH
        self.logger.info(f"Authenticating with {self.host.full_url}...")

        response = await self._request("POST", path, AuthenticationError, data={"pw": self.host.password})
        if response.status != 200:
            raise AuthenticationError(self.host, path, response.status, response.text)

        match = _TOKEN_PATTERN.search(response.text)
        if match is None or not match.group(1).strip():
            raise AuthenticationError(
                self.host,
                path,
                response.status,
                response.text,
                message=f'No token could be found while logging in to "{self.host.full_url}".',
            )
        self._token = match.group(1).strip()

    def _teleporter_form(self) -> aiohttp.FormData:
        form = aiohttp.FormData()
        form.add_field("token", self._token or "")
        for name, enabled in self.options.to_form_fields().items():
            if enabled:
                form.add_field(name, "true")
        return form

    async def download_backup(self) -> bytes:
        path = APIConfig.V5_TELEPORTER_PATH
        self.logger.info(f"Downloading backup from {self.host.full_url}...")

        response = await self._request("POST", path, DownloadError, data=self._teleporter_form())
        if not response.ok or response.content_type != "application/gzip":
            raise DownloadError(self.host, path, response.status, response.text)

        self.logger.debug(f"Downloaded {len(response.body)} bytes from {self.host.full_url}")
        return response.body

    async def upload_backup(self, backup: bytes) -> bool:
        path = APIConfig.V5_TELEPORTER_PATH
        self.logger.info(f"Uploading backup to {self.host.full_url}...")

        form = self._teleporter_form()
        form.add_field("action", "in")
        form.add_field("zip_file", backup, filename="backup.tar.gz", content_type="application/octet-stream")

        response = await self._request("POST", path, UploadError, data=form)
        if not response.ok or not response.text.strip().endswith("OK"):
            raise UploadError(self.host, path, response.status, response.text)

        self.logger.info(f"Backup restored on {self.host.full_url}")
        return True

    async def update_gravity(self) -> bool:
        path = APIConfig.V5_GRAVITY_PATH
        self.logger.info(f"Updating gravity on {self.host.full_url}...")

        response = await self._request("GET", path, GravityUpdateError, timeout=gravity_timeout())
        event_stream = self._flatten_event_stream(response.text)
        if response.status != 200 or not event_stream.endswith(GRAVITY_SUCCESS_MARKER):
            raise GravityUpdateError(self.host, path, response.status, event_stream)

        self.logger.info(f"Gravity updated on {self.host.full_url}")
        return True

    @staticmethod
    def _flatten_event_stream(text: str) -> str:
        lines = [line[len("data:"):] if line.startswith("data:") else line for line in text.splitlines()]
        return "\n".join(line.rstrip() for line in lines if line.strip()).strip()
