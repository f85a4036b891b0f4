"""Error handling and categorization for Pi-hole API operations."""

import asyncio
import json
from typing import Any, Dict, Optional, Union

import aiohttp

from config.api import APIConfig, ErrorCategory


class ErrorNotification(Exception):
    """An error that carries a human readable message plus a verbose detail block."""

    def __init__(
        self,
        message: str,
        verbose: Optional[Union[Dict[str, Any], str]] = None,
        send_notification: Optional[bool] = None,
    ):
        self.message = message
        self.verbose = verbose
        self.send_notification = send_notification
        super().__init__(self.message)


class HostRequestError(ErrorNotification):
    """A request to a Pi-hole host came back with an unexpected outcome."""

    default_message = "Request to {url} failed."
    body_key = "responseBody"

    def __init__(
        self,
        host,
        path: str,
        status: Optional[int] = None,
        body: str = "",
        message: Optional[str] = None,
    ):
        self.host = host
        self.path = path
        self.status = status
        self.body = body or ""
        super().__init__(
            message or self.default_message.format(url=host.full_url),
            verbose={
                "host": host.full_url,
                "path": path,
                "status": status,
                self.body_key: self.body,
            },
        )


class AuthenticationError(HostRequestError):
    default_message = (
        'There was an error logging in to "{url}" - are you able to log in with the configured password?'
    )


class DownloadError(HostRequestError):
    default_message = 'Failed to download backup from "{url}".'


class UploadError(HostRequestError):
    default_message = 'Failed to upload backup to "{url}".'


class GravityUpdateError(HostRequestError):
    default_message = 'Failed updating gravity on "{url}".'
    body_key = "eventStream"


class RetryExhaustedError(ErrorNotification):
    """The retry budget for an operation was spent without a success."""

    action = "running request"

    def __init__(self, host, path: str, attempts: int, last_error: Optional[Exception] = None):
        self.host = host
        self.path = path
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Exhausted {attempts} retries {self.action} on {host.full_url}.",
            verbose={
                "host": host.full_url,
                "path": path,
                "attempts": attempts,
                "lastError": str(last_error) if last_error is not None else None,
            },
        )


class GravityUpdateExhaustedError(RetryExhaustedError):
    action = "updating gravity"


class TransientNetworkError(Exception):
    """Internal signal for a retryable failure: network level or a gateway status.

    Always either retried or converted into one of the ``ErrorNotification``
    types before it reaches the orchestrator.
    """

    def __init__(self, host, path: str, status: Optional[int] = None, cause: Optional[BaseException] = None):
        self.host = host
        self.path = path
        self.status = status
        self.cause = cause
        reason = f"HTTP {status}" if status is not None else (str(cause) or type(cause).__name__)
        super().__init__(f"Transient failure reaching {host.full_url}{path}: {reason}")


# Network-level failures that never produced an HTTP response
NETWORK_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError)


def categorize_error(exception: Exception) -> ErrorCategory:
    """Categorize an exception into error types for better handling."""
    if isinstance(exception, TransientNetworkError):
        if exception.status is None:
            return categorize_error(exception.cause) if isinstance(exception.cause, Exception) else ErrorCategory.NETWORK
        return ErrorCategory.SERVER
    elif isinstance(exception, asyncio.TimeoutError):
        return ErrorCategory.TIMEOUT
    elif isinstance(exception, aiohttp.ClientConnectorError):
        return ErrorCategory.NETWORK
    elif isinstance(exception, aiohttp.ClientResponseError):
        if 400 <= exception.status < 500:
            return ErrorCategory.CLIENT
        elif 500 <= exception.status < 600:
            return ErrorCategory.SERVER
        else:
            return ErrorCategory.UNKNOWN
    elif isinstance(exception, aiohttp.ClientError):
        return ErrorCategory.NETWORK
    elif isinstance(exception, (json.JSONDecodeError, ValueError)):
        return ErrorCategory.DATA
    else:
        return ErrorCategory.UNKNOWN


def is_transient(exception: Optional[BaseException] = None, status: Optional[int] = None) -> bool:
    """Decide whether a failure is safe to retry.

    Network failures, timeouts and the gateway statuses in
    ``APIConfig.RETRYABLE_STATUSES`` are transient; everything else is not.
    """
    if status is not None:
        return APIConfig.is_retryable_status(status)
    if isinstance(exception, TransientNetworkError):
        return True
    if isinstance(exception, aiohttp.ClientResponseError):
        return APIConfig.is_retryable_status(exception.status)
    return isinstance(exception, NETWORK_ERRORS)
