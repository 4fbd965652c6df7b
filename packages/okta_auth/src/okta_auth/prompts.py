"""
Callbacks used for user and device interaction during the flow.

The flow never talks to a terminal or a security key directly; it calls an
object implementing ``Prompts``. For U2F and WebAuthn see
https://fidoalliance.org/specifications/
"""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from okta_auth.factors import Factor


@dataclass(frozen=True)
class VerifyU2FRequest:
    """Parameters used for authenticating with a U2F device."""

    facet: str
    app_id: str
    key_handle: str
    challenge: str = ""


@dataclass(frozen=True)
class VerifyU2FResponse:
    """Data returned after successfully authenticating with a U2F device."""

    client_data: str
    signature_data: str


@dataclass(frozen=True)
class VerifyWebAuthnRequest:
    rp_id: str
    credential_id: str
    challenge: str


@dataclass(frozen=True)
class VerifyWebAuthnResponse:
    client_data: str
    signature_data: str
    authenticator_data: str


@runtime_checkable
class Prompts(Protocol):
    async def check_u2f_presence(self, request: VerifyU2FRequest) -> bool:
        """
        Return True if the U2F device is present.

        Used to pick the U2F factor automatically when it is detected. The
        challenge field is not set on this call; implementations should do a
        "check only" authentication request.
        """
        ...

    async def choose_factor(self, factors: list[Factor]) -> Factor:
        """
        Present the factors to the user and return the chosen one.

        Raising aborts the whole authentication flow.
        """
        ...

    async def present_user_error(self, message: str) -> None:
        """
        Show a retriable error. For example, after a wrong SMS code the user is
        notified and then asked to choose a factor again.
        """
        ...

    async def verify_u2f(self, request: VerifyU2FRequest) -> VerifyU2FResponse:
        """
        Authenticate with the chosen U2F device.

        The call is cancelled once the challenge timeout sent by Okta expires.
        """
        ...

    async def verify_webauthn(
        self, request: VerifyWebAuthnRequest
    ) -> VerifyWebAuthnResponse: ...

    async def verify_code(self, factor: Factor) -> str:
        """Ask the user for the code of the given factor (SMS, TOTP, Call)."""
        ...

    async def verify_push(self) -> None:
        """Tell the user a push notification was sent to their device."""
        ...
