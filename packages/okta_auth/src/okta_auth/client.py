"""
Okta authentication client.

Given a username and password, ``OktaClient.authenticate`` returns an Okta
session token, running whatever second factor Okta asks for through the
configured ``Prompts``. The session token can then be exchanged for a session,
see https://developer.okta.com/docs/api/resources/sessions#session-token

## Usage:
```python
config = ClientConfig(domain="example.okta.com")
async with OktaClient(config, prompts=MyPrompts()) as client:
    session_token = await client.authenticate("dade.murphy", "hunter2")
```
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from shared_lib.baseclient.exceptions import BaseClientError

from okta_auth.config import ClientConfig
from okta_auth.errors import (
    UNEXPECTED_ERROR_MESSAGE,
    APIRequestError,
    ConfigurationError,
    DecodeError,
    TerminalError,
)
from okta_auth.flow import AuthenticationFlow
from okta_auth.models import (
    APIError,
    AuthenticationContext,
    AuthenticationRequest,
    AuthenticationTransaction,
    RequestModel,
)
from okta_auth.prompts import Prompts
from okta_auth.transport import HttpxTransport, Transport
from okta_auth.urls import OktaApiUrls

logger = logging.getLogger(__name__)

TOO_MANY_REQUESTS_MESSAGE = "Too many requests to Okta, try again later"


class OktaClient:
    """
    Client for the Okta authentication API.

    The only required settings are the Okta domain and the prompts. Settings
    can be given as a ``ClientConfig`` or as keyword arguments.

    Attributes:
        config: The client settings.
        root_url: Normalized Okta URL, e.g. ``https://example.okta.com``.
        prompts: Callbacks for user and device interaction.
        transport: Performs the HTTP requests.
        sleep: Coroutine used to wait between push polls.

    Example:
        >>> client = OktaClient(domain="example.okta.com", prompts=prompts)
        >>> try:
        ...     token = await client.authenticate("user", "password")
        ... finally:
        ...     await client.close()
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        prompts: Prompts | None = None,
        transport: Transport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        **settings: Any,
    ) -> None:
        """
        Initialize the client.

        Args:
            config: Client settings. When omitted, ``settings`` are used to
                build one (``domain``, ``timeout``, ``proxy``, ...).
            prompts: Callbacks for user and device interaction.
            transport: Custom transport. Defaults to an ``HttpxTransport``
                owned (and closed) by this client.
            sleep: Coroutine used to wait between push polls.

        Raises:
            ConfigurationError: If the domain is blank or prompts are missing.
        """
        if config is None:
            if not settings.get("domain"):
                raise ConfigurationError("ClientConfig.domain can't be blank")
            config = ClientConfig(**settings)
        elif settings:
            config = ClientConfig.model_validate({**config.model_dump(), **settings})

        if prompts is None:
            raise ConfigurationError("Prompts can't be None")

        self.config = config
        self.root_url = config.root_url
        self.prompts = prompts
        self.sleep = sleep

        self._owns_transport = transport is None
        self.transport: Transport = transport or HttpxTransport(
            base_url=self.root_url,
            proxy=config.proxy,
            timeout=config.timeout,
            user_agent=config.user_agent,
        )

        logger.debug(f"Okta client configured for {self.root_url}")

    async def authenticate(
        self,
        username: str,
        password: str,
        relay_state: str | None = None,
        device_token: str | None = None,
    ) -> str:
        """
        Authenticate with a username and password, returning a session token.

        If a second factor is required, the configured prompts are invoked.

        Raises:
            APIRequestError: Okta rejected the credentials.
            TerminalError: The flow cannot proceed.
            NonFatalAuthError: A push was rejected or timed out.
        """
        url = f"{self.root_url}{OktaApiUrls.AUTHN}"
        logger.info(f"Posting auth request to {url!r} with username {username!r}")

        transaction, api_error = await self.send_transaction_request(
            url,
            AuthenticationRequest(
                username=username,
                password=password,
                relay_state=relay_state,
                context=AuthenticationContext(device_token=device_token),
            ),
        )
        if api_error is not None:
            logger.warning(api_error.error_summary)
            raise APIRequestError("Failed to authenticate", api_error)

        return await AuthenticationFlow(self).run(transaction, auto_attempt_u2f=True)

    async def send_transaction_request(
        self, url: str, request: RequestModel
    ) -> tuple[AuthenticationTransaction, APIError | None]:
        """
        POST ``request`` as JSON to ``url``.

        Returns:
            ``(transaction, None)`` on a 200, or an empty transaction and the
            decoded ``APIError`` on any other 4xx.

        Raises:
            TerminalError: On a 429, any other status, a body that can't be
                decoded, or a failed request.
        """
        log_payload = request.log_payload()
        logger.debug(f"Sending transaction request to {url}: {log_payload}")

        try:
            status, body = await self.transport.send("POST", url, request.to_payload())
        except BaseClientError as e:
            logger.error(
                f"Got error sending transaction request: request {log_payload}, error: {e}"
            )
            raise TerminalError(str(e)) from e

        logger.debug(f"Got http response: status {status}, body {body!r}")

        if status == 200:
            try:
                return AuthenticationTransaction.from_response(body), None
            except DecodeError as e:
                logger.error(
                    f"Got error unmarshaling authentication transaction: "
                    f"body {body!r}, error {e.details.get('reason')}"
                )
                raise

        if status == 429:
            raise TerminalError(TOO_MANY_REQUESTS_MESSAGE, status_code=status)

        if 400 <= status < 500:
            try:
                return AuthenticationTransaction(), APIError.from_response(body)
            except DecodeError as e:
                logger.error(
                    f"Got error unmarshaling api error: body {body!r}, "
                    f"error {e.details.get('reason')}"
                )
                raise

        logger.error(f"Got unexpected server status code: body {body!r}, status {status}")
        raise TerminalError(UNEXPECTED_ERROR_MESSAGE, status_code=status)

    async def close(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport:
            await self.transport.close()

    async def __aenter__(self) -> "OktaClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
