"""
Base HTTP client for building API clients.

This package provides a flexible and extensible base class for creating
async HTTP clients with built-in support for proxies, custom headers
and error handling.
"""

from .client import BaseClient as Client
from .exceptions import (
    AuthenticationError,
    BaseClientError,
    ConfigurationError,
    HTTPError,
    ProxyError,
    RequestTimeoutError,
)

__version__ = "0.1.0"
__all__ = [
    "Client",
    "AuthenticationError",
    "BaseClientError",
    "ConfigurationError",
    "HTTPError",
    "ProxyError",
    "RequestTimeoutError",
]
