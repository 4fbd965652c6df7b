"""
Base HTTP client for building API clients.

This module provides an abstract base class for creating async HTTP clients
using httpx. It includes support for proxies, custom headers and a raw
request primitive that hands the status code and body back to the caller.
"""

from abc import ABC
from typing import Any
import logging

import httpx

from .exceptions import (
    ConfigurationError,
    HTTPError,
    ProxyError,
    RequestTimeoutError,
)


logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "okta-auth/0.1.0"


class BaseClient(ABC):
    """
    Abstract base class for building HTTP API clients.

    This class provides a foundation for creating async HTTP clients with
    built-in support for:
    - Proxy configuration
    - Custom headers and user agent
    - JSON request bodies
    - Proper resource cleanup

    Status codes are not interpreted here: `_send` returns the status and the
    raw body and only raises when the request itself could not complete.

    Attributes:
        BASE_URL (str): Default base URL for relative endpoints. Should be
                       overridden by subclasses or via constructor.
        client (httpx.AsyncClient): The underlying httpx async client.

    Example:
        >>> class MyAPIClient(BaseClient):
        ...     BASE_URL = "https://api.example.com"
        ...
        ...     async def create_user(self, name: str):
        ...         return await self._send("POST", "/users", payload={"name": name})
        ...
        >>> async with MyAPIClient(proxy="proxy.example.com:8080") as client:
        ...     status, body = await client.create_user("dade")
    """

    BASE_URL: str = "https://api.example.com"

    def __init__(
        self,
        base_url: str | None = None,
        proxy: str | None = None,
        timeout: float = 30.0,
        user_agent: str = DEFAULT_USER_AGENT,
        **kwargs: Any,
    ):
        """
        Initialize the base client.

        Args:
            base_url: Custom base URL to override the class BASE_URL attribute.
            proxy: Proxy URL in format "host:port" or "http://host:port".
            timeout: Request timeout in seconds. Defaults to 30.0.
            user_agent: Value of the User-Agent header sent with every request.
            **kwargs: Additional arguments passed to httpx.AsyncClient.
                     Common options include:
                     - headers: Custom headers dict
                     - verify: SSL verification (bool or path to cert)
                     - transport: Custom httpx transport (e.g. MockTransport)

        Raises:
            ConfigurationError: If proxy format is invalid.
        """
        self.proxy = proxy
        self.base_url = base_url or self.BASE_URL

        if self.proxy is not None:
            try:
                proxy_url = (
                    self.proxy
                    if self.proxy.startswith("http")
                    else f"http://{self.proxy}"
                )
                kwargs["proxy"] = proxy_url
                logger.debug(f"Proxy configured: {proxy_url}")
            except (AttributeError, TypeError) as e:
                raise ConfigurationError(f"Invalid proxy configuration: {e}") from e

        if "timeout" not in kwargs:
            kwargs["timeout"] = timeout

        # Explicit headers passed through kwargs win over the defaults
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": user_agent,
        }
        headers.update(kwargs.pop("headers", None) or {})

        self.client = httpx.AsyncClient(headers=headers, **kwargs)

        logger.info(f"Client initialized with base URL: {self.base_url}")

    def _build_url(self, endpoint: str) -> str:
        """Join a relative endpoint onto the base URL; absolute URLs pass through."""
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        return f"{self.base_url}{endpoint}"

    async def _send(
        self,
        method: str,
        endpoint: str = "",
        payload: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> tuple[int, bytes]:
        """
        Perform an HTTP request and return the status code and raw body.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE, PATCH, etc.).
            endpoint: Absolute URL, or a path appended to the base URL.
            payload: JSON payload for the request body.
            headers: Additional headers for this specific request.
            **kwargs: Additional arguments passed to httpx request method.

        Returns:
            A ``(status_code, body)`` tuple. Non-2xx statuses are returned,
            not raised.

        Raises:
            ProxyError: If there's a proxy-related connection issue.
            RequestTimeoutError: If the request times out.
            HTTPError: If the request could not be completed.

        Example:
            >>> status, body = await self._send("POST", "/users", payload={"name": "John"})
        """
        url = self._build_url(endpoint)

        try:
            logger.debug(f"{method} {url}")
            response = await self.client.request(
                method,
                url,
                json=payload,
                headers=headers,
                **kwargs,
            )
        except httpx.ProxyError as e:
            logger.error(f"Proxy error: {e}")
            raise ProxyError(f"Proxy connection failed: {e}") from e
        except httpx.TimeoutException as e:
            logger.error(f"Request timeout: {e}")
            raise RequestTimeoutError(f"Request timed out: {e}") from e
        except httpx.HTTPError as e:
            logger.error(f"Request error: {e}")
            raise HTTPError(f"Request failed: {e}") from e

        logger.debug(f"Response status: {response.status_code}")
        return response.status_code, response.content

    async def close(self) -> None:
        """
        Close the HTTP client and release resources.

        Example:
            >>> client = MyAPIClient()
            >>> try:
            ...     await client.create_user("dade")
            ... finally:
            ...     await client.close()
        """
        await self.client.aclose()
        logger.info("Client closed")

    async def __aenter__(self):
        """Enable use as async context manager."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Ensure client is closed when exiting context."""
        await self.close()
