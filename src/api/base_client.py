"""Capability surface shared by every Pi-hole API generation."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Type
from urllib.parse import urlparse

import aiohttp

from config.api import APIConfig

from .error_handling import NETWORK_ERRORS, HostRequestError
from .host import Host


@dataclass(frozen=True)
class HostResponse:
    """Status, body and content type of a completed request."""

    status: int
    body: bytes
    content_type: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


def new_session() -> aiohttp.ClientSession:
    """Create an HTTP session; unsafe cookies so IP-addressed hosts keep their login cookie."""
    return aiohttp.ClientSession(cookie_jar=aiohttp.CookieJar(unsafe=True))


def gravity_timeout() -> aiohttp.ClientTimeout:
    """Timeout for gravity rebuilds: bounded connect, unbounded stream."""
    return aiohttp.ClientTimeout(total=APIConfig.GRAVITY_TIMEOUT, sock_connect=APIConfig.REQUEST_TIMEOUT)


class Client(ABC):
    """One authenticated session against one Pi-hole host.

    Instances are built through the async ``create`` constructor of a concrete
    version, which logs in before returning. Session details stay private.
    """

    version: int

    def __init__(self, host: Host, session: aiohttp.ClientSession, logger_obj: Optional[logging.Logger] = None):
        self.host = host
        self.logger = logger_obj or logging.getLogger(__name__)
        self._session = session

    @abstractmethod
    async def download_backup(self) -> bytes:
        """Download the teleporter archive from the host."""

    @abstractmethod
    async def upload_backup(self, backup: bytes) -> bool:
        """Restore a teleporter archive on the host. Never retried."""

    @abstractmethod
    async def update_gravity(self) -> bool:
        """Rebuild the host's gravity database after a restore."""

    def get_version(self) -> int:
        return self.version

    def get_host(self) -> Host:
        return self.host

    async def close(self) -> None:
        if not self._session.closed:
            await self._session.close()

    async def _fetch(
        self, method: str, path: str, timeout: Optional[aiohttp.ClientTimeout] = None, **kwargs
    ) -> HostResponse:
        """Perform one request against the host and read the full response."""
        timeout = timeout or aiohttp.ClientTimeout(total=APIConfig.REQUEST_TIMEOUT)
        async with self._session.request(method, self.host.url_for(path), timeout=timeout, **kwargs) as resp:
            body = await resp.read()
            return HostResponse(status=resp.status, body=body, content_type=resp.content_type or "")

    async def _request(self, method: str, path: str, error_type: Type[HostRequestError], **kwargs) -> HostResponse:
        """Like ``_fetch``, but network failures surface as ``error_type``."""
        try:
            return await self._fetch(method, path, **kwargs)
        except NETWORK_ERRORS as e:
            self.logger.debug(f"{method} {self.host.url_for(path)} failed: {e}")
            raise error_type(self.host, path, message=self._network_message(e)) from e

    def _network_message(self, error: Exception) -> Optional[str]:
        if isinstance(error, aiohttp.ClientConnectorError):
            return f'The host "{urlparse(self.host.base_url).hostname}" refused to connect. Is it down?'
        return None
