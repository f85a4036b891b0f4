"""API configuration for Pi-hole endpoints."""

from enum import Enum


class ErrorCategory(Enum):
    """Categories for different types of API errors."""

    NETWORK = "network"
    SERVER = "server"
    CLIENT = "client"
    TIMEOUT = "timeout"
    DATA = "data"
    UNKNOWN = "unknown"


class APIConfig:
    """API configuration and settings."""

    # Request settings
    REQUEST_TIMEOUT = 60
    PROBE_TIMEOUT = 10
    # Gravity streams until the rebuild finishes; only connecting is bounded
    GRAVITY_TIMEOUT = None

    # Retry settings
    RETRYABLE_STATUSES = frozenset({502, 503, 504})
    GRAVITY_UPDATE_RETRY_COUNT = 5
    RETRY_BASE_DELAY = 1.0

    # Pi-hole v6 REST endpoints
    V6_AUTH_PATH = "/api/auth"
    V6_TELEPORTER_PATH = "/api/teleporter"
    V6_GRAVITY_PATH = "/api/action/gravity"

    # Pi-hole v5 PHP admin endpoints
    V5_LOGIN_PATH = "/admin/index.php?login"
    V5_TELEPORTER_PATH = "/admin/scripts/pi-hole/php/teleporter.php"
    V5_GRAVITY_PATH = "/admin/scripts/pi-hole/php/gravity.sh.php"

    @classmethod
    def is_retryable_status(cls, status: int) -> bool:
        """Check whether an HTTP status belongs to the gateway-error class."""
        return status in cls.RETRYABLE_STATUSES

