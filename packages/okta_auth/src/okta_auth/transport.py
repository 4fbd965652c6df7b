"""
The HTTP boundary of the authentication flow.

The flow only needs one operation: send a JSON body to a URL and get the
status code and raw body back. Anything that implements ``Transport`` can be
plugged into ``OktaClient``; ``HttpxTransport`` is the default.
"""

from typing import Any, Protocol, runtime_checkable

from shared_lib.baseclient import Client


@runtime_checkable
class Transport(Protocol):
    async def send(
        self, method: str, url: str, payload: dict[str, Any] | None = None
    ) -> tuple[int, bytes]:
        """
        Perform the request.

        Returns the status code and body for every response, whatever the
        status. Raises ``BaseClientError`` when the request could not be
        completed.
        """
        ...

    async def close(self) -> None: ...


class HttpxTransport(Client):
    """Default transport: JSON over an ``httpx.AsyncClient``."""

    BASE_URL = ""

    async def send(
        self, method: str, url: str, payload: dict[str, Any] | None = None
    ) -> tuple[int, bytes]:
        return await self._send(method, url, payload=payload)
