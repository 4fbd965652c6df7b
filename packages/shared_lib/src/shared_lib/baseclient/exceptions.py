"""
Custom exceptions for the base client package.

This module provides specialized exceptions for better error handling
when building clients on top of BaseClient.
"""


class BaseClientError(Exception):
    """Base exception for all base client errors."""

    def __init__(self, message: str, *args, **kwargs):
        super().__init__(message, *args)
        self.message = message
        self.details = kwargs


class HTTPError(BaseClientError):
    """Raised when an HTTP request fails."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: bytes | None = None,
    ):
        super().__init__(message, status_code=status_code, response_body=response_body)
        self.status_code = status_code
        self.response_body = response_body


class ProxyError(HTTPError):
    """Raised when there's an issue with the proxy configuration or connection."""

    pass


class RequestTimeoutError(HTTPError):
    """Raised when a request times out."""

    pass


class AuthenticationError(BaseClientError):
    """Raised when authentication fails."""

    pass


class ConfigurationError(BaseClientError):
    """Raised when there's an issue with client configuration."""

    pass
