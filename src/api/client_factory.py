"""Select and build the right client for a host's Pi-hole version."""

import logging
from typing import Optional

import aiohttp

from config.api import APIConfig
from config.sync_config import SyncOptions

from .base_client import Client, new_session
from .error_handling import NETWORK_ERRORS, HostRequestError
from .host import Host
from .v5_client import ClientV5
from .v6_client import ClientV6


class VersionProbeError(HostRequestError):
    default_message = 'Could not determine the Pi-hole version of "{url}". Is it reachable?'


class ClientFactory:
    """Build authenticated clients, probing the host when the version is ``auto``."""

    @staticmethod
    async def create_client(
        host: Host,
        version: str,
        options: SyncOptions,
        logger_obj: Optional[logging.Logger] = None,
    ) -> Client:
        """
        Create a logged-in client for ``host``.

        Args:
            host: Target Pi-hole instance
            version: ``"auto"``, ``"5"`` or ``"6"``
            options: Sync options for both API generations
            logger_obj: Logger instance

        Returns:
            A ClientV5 or ClientV6

        Raises:
            VersionProbeError: if ``auto`` probing cannot reach the host
            AuthenticationError: if logging in fails
        """
        logger = logger_obj or logging.getLogger(__name__)

        if version == "auto":
            version = await ClientFactory.detect_version(host, logger)
            logger.debug(f"Detected Pi-hole v{version} on {host.full_url}")

        if version == "6":
            return await ClientV6.create(host, options.v6, logger_obj=logger)
        if version == "5":
            return await ClientV5.create(host, options.v5, logger_obj=logger)
        raise ValueError(f"Unsupported Pi-hole version: {version!r}")

    @staticmethod
    async def detect_version(host: Host, logger: Optional[logging.Logger] = None) -> str:
        """Probe the v6 auth endpoint: a JSON answer means v6, anything else v5."""
        logger = logger or logging.getLogger(__name__)
        path = APIConfig.V6_AUTH_PATH
        timeout = aiohttp.ClientTimeout(total=APIConfig.PROBE_TIMEOUT)

        try:
            async with new_session() as session:
                async with session.get(host.url_for(path), timeout=timeout) as resp:
                    status, content_type = resp.status, resp.content_type
        except NETWORK_ERRORS as e:
            logger.error(f"Version probe of {host.full_url} failed: {e}")
            raise VersionProbeError(host, path) from e

        if status in (200, 401) and content_type == "application/json":
            return "6"
        return "5"
