"""
Exception hierarchy for the dashboard.

Every failure talking to the remote API surfaces as a ``RequestError``:

    try:
        response = await client.get_products(params)
    except RequestError as e:
        logger.warning(f"products failed: {e.message}")

Controllers collapse these into a single human-readable message; nothing
past a controller sees the exception.
"""

from typing import Any, Dict, Optional


class DashboardError(Exception):
    """Base exception for all dashboard errors."""

    def __init__(
        self,
        message: str,
        code: str = "DASHBOARD_ERROR",
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message} (caused by: {self.cause})"
        return self.message


class ConfigurationError(DashboardError):
    """Invalid configuration value."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="CONFIGURATION_ERROR", details=details)


# ============================================================
# Request Errors
# ============================================================

class RequestError(DashboardError):
    """A request to the remote API did not produce a 2xx response."""

    def __init__(
        self,
        message: str,
        code: str = "REQUEST_ERROR",
        status: Optional[int] = None,
        server_message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message, code, details, cause)
        self.status = status
        self.server_message = server_message


class TransportFailure(RequestError):
    """Network unreachable, DNS failure, timeout or malformed request."""

    def __init__(self, method: str, url: str, cause: Optional[Exception] = None):
        reason = type(cause).__name__ if cause is not None else "unknown error"
        super().__init__(
            message=f"Network error during {method} {url}: {reason}",
            code="TRANSPORT_FAILURE",
            details={"method": method, "url": url},
            cause=cause,
        )


class ServerFailure(RequestError):
    """Remote API answered with a non-2xx status."""

    def __init__(self, method: str, url: str, status: int, server_message: Optional[str] = None):
        super().__init__(
            message=server_message or f"Request failed with status code {status}",
            code="SERVER_FAILURE",
            status=status,
            server_message=server_message,
            details={"method": method, "url": url, "status": status},
        )
