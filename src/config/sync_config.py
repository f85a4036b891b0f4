"""Typed configuration contracts for a sync run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .api import APIConfig
from .settings import Settings


class ConfigurationError(ValueError):
    """Raised when the run configuration is missing or malformed."""


@dataclass(frozen=True)
class HostConfig:
    """Connection details for one Pi-hole instance."""

    base_url: str
    password: str
    path: str = ""


@dataclass(frozen=True)
class NotifyConfig:
    """When and where run reports are dispatched."""

    on_success: bool = False
    on_failure: bool = True
    apprise_url: Optional[str] = None


@dataclass(frozen=True)
class SyncOptionsV5:
    """Teleporter sections exchanged with Pi-hole v5 hosts."""

    whitelist: bool = True
    regex_whitelist: bool = True
    blacklist: bool = True
    regex_list: bool = True
    ad_list: bool = True
    client: bool = True
    group: bool = True
    audit_log: bool = False
    static_dhcp_leases: bool = False
    local_dns_records: bool = True
    local_cname_records: bool = True
    flush_tables: bool = True

    def to_form_fields(self) -> dict[str, bool]:
        """Map options onto the field names of the v5 teleporter form."""
        return {
            "whitelist": self.whitelist,
            "regex_whitelist": self.regex_whitelist,
            "blacklist": self.blacklist,
            "regexlist": self.regex_list,
            "adlist": self.ad_list,
            "client": self.client,
            "group": self.group,
            "auditlog": self.audit_log,
            "staticdhcpleases": self.static_dhcp_leases,
            "localdnsrecords": self.local_dns_records,
            "localcnamerecords": self.local_cname_records,
            "flushtables": self.flush_tables,
        }


@dataclass(frozen=True)
class SyncOptionsV6:
    """Teleporter sections and gravity retry budget for Pi-hole v6 hosts."""

    config: bool = False
    dhcp_leases: bool = False
    group: bool = True
    adlist: bool = True
    adlist_by_group: bool = True
    domainlist: bool = True
    domainlist_by_group: bool = True
    client: bool = True
    client_by_group: bool = True
    gravity_update_retry_count: int = APIConfig.GRAVITY_UPDATE_RETRY_COUNT

    def to_import_payload(self) -> dict[str, Any]:
        """Build the ``import`` document sent alongside a v6 teleporter upload."""
        return {
            "config": self.config,
            "dhcp_leases": self.dhcp_leases,
            "gravity": {
                "group": self.group,
                "adlist": self.adlist,
                "adlist_by_group": self.adlist_by_group,
                "domainlist": self.domainlist,
                "domainlist_by_group": self.domainlist_by_group,
                "client": self.client,
                "client_by_group": self.client_by_group,
            },
        }


@dataclass(frozen=True)
class SyncOptions:
    v5: SyncOptionsV5 = field(default_factory=SyncOptionsV5)
    v6: SyncOptionsV6 = field(default_factory=SyncOptionsV6)


@dataclass(frozen=True)
class SyncConfig:
    """Everything one sync cycle and the surrounding run loop need."""

    primary_host: HostConfig
    secondary_hosts: tuple[HostConfig, ...]
    pihole_version: str = Settings.DEFAULT_PIHOLE_VERSION
    update_gravity: bool = True
    verbose: bool = False
    run_once: bool = False
    interval_minutes: float = Settings.DEFAULT_INTERVAL_MINUTES
    notify: NotifyConfig = field(default_factory=NotifyConfig)
    sync: SyncOptions = field(default_factory=SyncOptions)

    def __post_init__(self):
        if not self.secondary_hosts:
            raise ConfigurationError("At least one secondary host must be configured")
        if self.pihole_version not in Settings.SUPPORTED_VERSIONS:
            raise ConfigurationError(
                f"Unsupported Pi-hole version {self.pihole_version!r}; "
                f"expected one of {', '.join(Settings.SUPPORTED_VERSIONS)}"
            )
        if self.interval_minutes <= 0:
            raise ConfigurationError("interval_minutes must be positive")
        if self.sync.v6.gravity_update_retry_count < 0:
            raise ConfigurationError("gravity_update_retry_count must not be negative")
