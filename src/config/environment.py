"""Environment configuration loader.

Builds a :class:`SyncConfig` from process environment variables:

- ``PRIMARY_HOST_BASE_URL`` / ``PRIMARY_HOST_PASSWORD`` / ``PRIMARY_HOST_PATH``
- ``SECONDARY_HOSTS_{n}_BASE_URL`` / ``_PASSWORD`` / ``_PATH``, numbered from 1
  until the first missing base URL
- ``*_PASSWORD_FILE`` variants read the password from a file (Docker secrets)
- run, notification and per-version sync options (see ``SYNC_V5_FIELDS`` and
  ``SYNC_V6_FIELDS``)
"""

import logging
import os
from pathlib import Path
from typing import Mapping, Optional

from .api import APIConfig
from .settings import Settings
from .sync_config import (
    ConfigurationError,
    HostConfig,
    NotifyConfig,
    SyncConfig,
    SyncOptions,
    SyncOptionsV5,
    SyncOptionsV6,
)

TRUE_VALUES = {"true", "1", "yes", "on"}
FALSE_VALUES = {"false", "0", "no", "off"}

SYNC_V5_FIELDS = {
    "SYNC_V5_WHITELIST": "whitelist",
    "SYNC_V5_REGEX_WHITELIST": "regex_whitelist",
    "SYNC_V5_BLACKLIST": "blacklist",
    "SYNC_V5_REGEXLIST": "regex_list",
    "SYNC_V5_ADLIST": "ad_list",
    "SYNC_V5_CLIENT": "client",
    "SYNC_V5_GROUP": "group",
    "SYNC_V5_AUDITLOG": "audit_log",
    "SYNC_V5_STATICDHCPLEASES": "static_dhcp_leases",
    "SYNC_V5_LOCALDNSRECORDS": "local_dns_records",
    "SYNC_V5_LOCALCNAMERECORDS": "local_cname_records",
    "SYNC_V5_FLUSHTABLES": "flush_tables",
}

SYNC_V6_FIELDS = {
    "SYNC_V6_CONFIG": "config",
    "SYNC_V6_DHCP_LEASES": "dhcp_leases",
    "SYNC_V6_GROUP": "group",
    "SYNC_V6_ADLIST": "adlist",
    "SYNC_V6_ADLIST_BY_GROUP": "adlist_by_group",
    "SYNC_V6_DOMAINLIST": "domainlist",
    "SYNC_V6_DOMAINLIST_BY_GROUP": "domainlist_by_group",
    "SYNC_V6_CLIENT": "client",
    "SYNC_V6_CLIENT_BY_GROUP": "client_by_group",
}


class EnvironmentConfig:
    """Resolve a sync run configuration from environment variables."""

    @classmethod
    def load(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> SyncConfig:
        """
        Read the full run configuration.

        Args:
            environ: Mapping to read from (defaults to ``os.environ``)
            logger: Optional logger instance

        Returns:
            A validated SyncConfig

        Raises:
            ConfigurationError: if a required value is missing or malformed
        """
        env = os.environ if environ is None else environ
        log = logger or logging.getLogger(__name__)

        primary = cls._host(env, "PRIMARY_HOST")
        if primary is None:
            raise ConfigurationError("PRIMARY_HOST_BASE_URL is required")

        secondaries = []
        index = 1
        while True:
            host = cls._host(env, f"SECONDARY_HOSTS_{index}")
            if host is None:
                break
            secondaries.append(host)
            index += 1
        log.debug(f"Resolved {len(secondaries)} secondary host(s) from environment")

        apprise_url = None
        if cls._bool(env, "NOTIFY_VIA_APPRISE_ENABLED", False):
            apprise_url = env.get("NOTIFY_VIA_APPRISE_URL")
            if not apprise_url:
                raise ConfigurationError(
                    "NOTIFY_VIA_APPRISE_URL is required when Apprise notifications are enabled"
                )

        return SyncConfig(
            primary_host=primary,
            secondary_hosts=tuple(secondaries),
            pihole_version=env.get("PIHOLE_VERSION", Settings.DEFAULT_PIHOLE_VERSION).strip().lower(),
            update_gravity=cls._bool(env, "UPDATE_GRAVITY", True),
            verbose=cls._bool(env, "VERBOSE", False),
            run_once=cls._bool(env, "RUN_ONCE", False),
            interval_minutes=cls._number(env, "INTERVAL_MINUTES", Settings.DEFAULT_INTERVAL_MINUTES),
            notify=NotifyConfig(
                on_success=cls._bool(env, "NOTIFY_ON_SUCCESS", False),
                on_failure=cls._bool(env, "NOTIFY_ON_FAILURE", True),
                apprise_url=apprise_url,
            ),
            sync=SyncOptions(
                v5=SyncOptionsV5(**cls._flags(env, SYNC_V5_FIELDS, SyncOptionsV5())),
                v6=SyncOptionsV6(
                    gravity_update_retry_count=int(
                        cls._number(
                            env,
                            "SYNC_V6_GRAVITY_UPDATE_RETRY_COUNT",
                            APIConfig.GRAVITY_UPDATE_RETRY_COUNT,
                        )
                    ),
                    **cls._flags(env, SYNC_V6_FIELDS, SyncOptionsV6()),
                ),
            ),
        )

    @classmethod
    def _host(cls, env: Mapping[str, str], prefix: str) -> Optional[HostConfig]:
        base_url = env.get(f"{prefix}_BASE_URL")
        if not base_url:
            return None

        password = env.get(f"{prefix}_PASSWORD")
        password_file = env.get(f"{prefix}_PASSWORD_FILE")
        if password is None and password_file:
            try:
                password = Path(password_file).read_text(encoding="utf-8").strip()
            except OSError as e:
                raise ConfigurationError(f"Could not read {prefix}_PASSWORD_FILE: {e}") from e
        if password is None:
            raise ConfigurationError(f"{prefix}_PASSWORD is required")

        return HostConfig(base_url=base_url, password=password, path=env.get(f"{prefix}_PATH", ""))

    @classmethod
    def _flags(cls, env: Mapping[str, str], fields: Mapping[str, str], defaults) -> dict:
        return {attr: cls._bool(env, name, getattr(defaults, attr)) for name, attr in fields.items()}

    @staticmethod
    def _bool(env: Mapping[str, str], name: str, default: bool) -> bool:
        raw = env.get(name)
        if raw is None or raw.strip() == "":
            return default
        value = raw.strip().lower()
        if value in TRUE_VALUES:
            return True
        if value in FALSE_VALUES:
            return False
        raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")

    @staticmethod
    def _number(env: Mapping[str, str], name: str, default: float) -> float:
        raw = env.get(name)
        if raw is None or raw.strip() == "":
            return default
        try:
            return float(raw)
        except ValueError as e:
            raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e
