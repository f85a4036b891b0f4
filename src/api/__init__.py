"""Pi-hole API clients and communication modules."""

from .base_client import Client, HostResponse
from .client_factory import ClientFactory, VersionProbeError
from .error_handling import (
    AuthenticationError,
    DownloadError,
    ErrorNotification,
    GravityUpdateError,
    GravityUpdateExhaustedError,
    RetryExhaustedError,
    TransientNetworkError,
    UploadError,
    categorize_error,
    is_transient,
)
from .host import Host
from .retry import RetryExecutor, RetryPolicy
from .v5_client import ClientV5
from .v6_client import ClientV6

__all__ = [
    "Client",
    "ClientFactory",
    "ClientV5",
    "ClientV6",
    "Host",
    "HostResponse",
    "RetryExecutor",
    "RetryPolicy",
    "ErrorNotification",
    "AuthenticationError",
    "DownloadError",
    "UploadError",
    "GravityUpdateError",
    "GravityUpdateExhaustedError",
    "RetryExhaustedError",
    "TransientNetworkError",
    "VersionProbeError",
    "categorize_error",
    "is_transient",
]
