"""Client configuration and its environment variable loader."""

import logging
import os
from typing import Optional

from pydantic import Field, field_validator

from shared_lib.baseclient.client import DEFAULT_USER_AGENT
from shared_lib.pydantic import APIBaseModel

from okta_auth.urls import normalize_domain

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
# Push polling: one request every 3 seconds, at most 10 of them (~30 seconds)
DEFAULT_PUSH_POLL_INTERVAL = 3.0
DEFAULT_PUSH_MAX_ATTEMPTS = 10


class ClientConfig(APIBaseModel):
    """
    Settings for an ``OktaClient``.

    Attributes:
        domain: Your organization's Okta domain (``<your-org>.okta.com``).
            A scheme is optional; https is assumed.
        timeout: HTTP request timeout in seconds.
        proxy: Optional proxy, ``host:port`` or ``http://host:port``.
        user_agent: User-Agent header sent with every request.
        push_poll_interval: Seconds to wait between push verification polls.
        push_max_attempts: Maximum number of push verification polls.
    """

    domain: str
    timeout: float = Field(DEFAULT_TIMEOUT, gt=0)
    proxy: str | None = None
    user_agent: str = DEFAULT_USER_AGENT
    push_poll_interval: float = Field(DEFAULT_PUSH_POLL_INTERVAL, ge=0)
    push_max_attempts: int = Field(DEFAULT_PUSH_MAX_ATTEMPTS, ge=1)

    @field_validator("domain")
    @classmethod
    def _check_domain(cls, value: str) -> str:
        # Fails early on blank or malformed domains
        normalize_domain(value)
        return value

    @property
    def root_url(self) -> str:
        return normalize_domain(self.domain)

    @classmethod
    def from_env(cls) -> Optional["ClientConfig"]:
        """
        Build a config from environment variables.

        ## Environment Variables:
        - `OKTA_DOMAIN`: Okta domain (required)
        - `OKTA_TIMEOUT`: HTTP timeout in seconds
        - `OKTA_PROXY`: Proxy URL
        - `OKTA_PUSH_POLL_INTERVAL`: Seconds between push polls
        - `OKTA_PUSH_MAX_ATTEMPTS`: Maximum number of push polls

        ## Returns:
        - `ClientConfig` if `OKTA_DOMAIN` is set, otherwise `None`
        """
        domain = os.getenv("OKTA_DOMAIN")
        if not domain:
            logger.debug("OKTA_DOMAIN is not set")
            return None

        values: dict[str, str] = {"domain": domain}
        optional = {
            "timeout": "OKTA_TIMEOUT",
            "proxy": "OKTA_PROXY",
            "push_poll_interval": "OKTA_PUSH_POLL_INTERVAL",
            "push_max_attempts": "OKTA_PUSH_MAX_ATTEMPTS",
        }
        for field, env_var in optional.items():
            value = os.getenv(env_var)
            if value:
                values[field] = value

        return cls.model_validate(values)
