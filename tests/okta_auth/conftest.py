"""
Shared fixtures for the okta_auth tests.

The state machine is exercised end to end against a scripted in-memory
transport: every request is recorded and answered with the next canned
response, so a test reads as the exact conversation with Okta.
"""

import json
from collections.abc import Iterable
from typing import Any
from unittest.mock import AsyncMock

import pytest

from okta_auth import OktaClient
from okta_auth.factors import Factor
from okta_auth.prompts import (
    VerifyU2FRequest,
    VerifyU2FResponse,
    VerifyWebAuthnRequest,
    VerifyWebAuthnResponse,
)

ROOT_URL = "https://example.okta.com"
AUTHN_URL = f"{ROOT_URL}/api/v1/authn"
PREV_URL = f"{AUTHN_URL}/previous"
CANCEL_URL = f"{AUTHN_URL}/cancel"
STATE_TOKEN = "00CxTwYaT7vmrv2UShWT1KPhf4KLmeO5mspBg303rO"
SESSION_TOKEN = "20111fjQ5Uo6mVqHnxQmL0ti4mIw9gjUFCvS0S8mSnPN7Fgj7tUPXW2"
EXPIRES_AT = "2016-07-27T23:05:57.000Z"

SMS_ID = "sms59eptnqQ7XZ2xe1t7"
U2F_ID = "fuf59d1ohqJZyOelX1t7"
TOTP_ID = "uftpep6vfeujtcuPc1t6"
PUSH_ID = "opf3hkfocI4JTLAju0g4"
WEBAUTHN_ID = "fwf8ql3ov2EgdfLrV0h7"
U2F_CREDENTIAL = "s94CdJnUd148p95PNq7AaY2Dv1QFrLJ12Vpkno-Q7WalmBTtB5TMnzDNL_yX84Ay49q"


class UserAborted(Exception):
    """Raised by FakePrompts when the user walks away."""


# -----------------------------------Transport-----------------------------------#


class ScriptedTransport:
    """
    Transport answering each request with the next scripted response.

    A response is either ``(status, body)``, where a non-bytes body is JSON
    encoded, or an exception instance to raise.
    """

    def __init__(self, *responses: Any):
        self.responses = list(responses)
        self.calls: list[tuple[str, str, dict[str, Any] | None]] = []
        self.closed = False

    def add(self, *responses: Any) -> None:
        self.responses.extend(responses)

    async def send(
        self, method: str, url: str, payload: dict[str, Any] | None = None
    ) -> tuple[int, bytes]:
        self.calls.append((method, url, payload))
        if not self.responses:
            raise AssertionError(f"Unexpected request: {method} {url} {payload}")

        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response

        status, body = response
        if not isinstance(body, bytes):
            body = json.dumps(body).encode()
        return status, body

    async def close(self) -> None:
        self.closed = True

    @property
    def urls(self) -> list[str]:
        return [url for _, url, _ in self.calls]

    def payloads_to(self, url: str) -> list[dict[str, Any] | None]:
        return [payload for _, u, payload in self.calls if u == url]


# -----------------------------------Prompts-----------------------------------#


class FakePrompts:
    """
    Records every prompt and answers from preset values.

    ``choices`` are factor ids returned by successive ``choose_factor`` calls;
    once exhausted the user aborts. ``codes`` work the same way for
    ``verify_code``. Exceptions in either list are raised instead.
    """

    def __init__(
        self,
        choices: Iterable[Any] = (),
        codes: Iterable[Any] = (),
        u2f_present: bool = False,
        u2f_response: Any = None,
        webauthn_response: Any = None,
    ):
        self.choices = list(choices)
        self.codes = list(codes)
        self.u2f_present = u2f_present
        self.u2f_response = u2f_response or VerifyU2FResponse(
            client_data="client-data", signature_data="signature-data"
        )
        self.webauthn_response = webauthn_response or VerifyWebAuthnResponse(
            client_data="client-data",
            signature_data="signature-data",
            authenticator_data="authenticator-data",
        )

        self.presence_checks: list[VerifyU2FRequest] = []
        self.offered: list[list[Factor]] = []
        self.errors: list[str] = []
        self.u2f_requests: list[VerifyU2FRequest] = []
        self.webauthn_requests: list[VerifyWebAuthnRequest] = []
        self.code_requests: list[Factor] = []
        self.push_notifications = 0

    async def check_u2f_presence(self, request: VerifyU2FRequest) -> bool:
        self.presence_checks.append(request)
        return self.u2f_present

    async def choose_factor(self, factors: list[Factor]) -> Factor:
        self.offered.append(factors)
        if not self.choices:
            raise UserAborted("no factor chosen")

        choice = self.choices.pop(0)
        if isinstance(choice, BaseException):
            raise choice
        for factor in factors:
            if factor.id == choice:
                return factor
        return Factor(id=choice, factor_type="sms")

    async def present_user_error(self, message: str) -> None:
        self.errors.append(message)

    async def verify_u2f(self, request: VerifyU2FRequest) -> VerifyU2FResponse:
        self.u2f_requests.append(request)
        if isinstance(self.u2f_response, BaseException):
            raise self.u2f_response
        if callable(self.u2f_response):
            return await self.u2f_response(request)
        return self.u2f_response

    async def verify_webauthn(
        self, request: VerifyWebAuthnRequest
    ) -> VerifyWebAuthnResponse:
        self.webauthn_requests.append(request)
        if isinstance(self.webauthn_response, BaseException):
            raise self.webauthn_response
        if callable(self.webauthn_response):
            return await self.webauthn_response(request)
        return self.webauthn_response

    async def verify_code(self, factor: Factor) -> str:
        self.code_requests.append(factor)
        if not self.codes:
            raise UserAborted("no code entered")
        code = self.codes.pop(0)
        if isinstance(code, BaseException):
            raise code
        return code

    async def verify_push(self) -> None:
        self.push_notifications += 1


# -----------------------------------Payload builders-----------------------------------#


def verify_url(factor_id: str) -> str:
    return f"{AUTHN_URL}/factors/{factor_id}/verify"


def factor_json(
    factor_id: str,
    factor_type: str,
    profile: dict[str, Any] | None = None,
    provider: str = "OKTA",
    challenge: dict[str, Any] | None = None,
) -> dict[str, Any]:
    factor: dict[str, Any] = {
        "id": factor_id,
        "factorType": factor_type,
        "provider": provider,
        "vendorName": provider,
        "_links": {
            "verify": {
                "href": verify_url(factor_id),
                "hints": {"allow": ["POST"]},
            }
        },
    }
    if profile is not None:
        factor["profile"] = profile
    if challenge is not None:
        factor["_embedded"] = {"challenge": challenge}
    return factor


def sms_factor() -> dict[str, Any]:
    return factor_json(SMS_ID, "sms", {"phoneNumber": "+1 XXX-XXX-5260"})


def u2f_factor(challenge: dict[str, Any] | None = None) -> dict[str, Any]:
    return factor_json(
        U2F_ID,
        "u2f",
        {"credentialId": U2F_CREDENTIAL, "appId": ROOT_URL, "version": "U2F_V2"},
        provider="FIDO",
        challenge=challenge,
    )


def totp_factor() -> dict[str, Any]:
    return factor_json(
        TOTP_ID,
        "token:software:totp",
        {"credentialId": "dade.murphy@example.com"},
        provider="GOOGLE",
    )


def push_factor() -> dict[str, Any]:
    return factor_json(
        PUSH_ID,
        "push",
        {"credentialId": "dade.murphy@example.com", "deviceType": "SmartPhone_IPhone"},
    )


def webauthn_factor(challenge: dict[str, Any] | None = None) -> dict[str, Any]:
    return factor_json(
        WEBAUTHN_ID,
        "webauthn",
        {"credentialId": "vdCxMZRPs3rlmTAHnQN9", "authenticatorName": "YubiKey 5"},
        provider="FIDO",
        challenge=challenge,
    )


def mfa_required(*factors: dict[str, Any]) -> dict[str, Any]:
    return {
        "stateToken": STATE_TOKEN,
        "expiresAt": EXPIRES_AT,
        "status": "MFA_REQUIRED",
        "_embedded": {
            "user": {
                "id": "00u2k4zip5XnaVacd1t6",
                "profile": {
                    "login": "dade.murphy@example.com",
                    "firstName": "Dade",
                    "lastName": "Murphy",
                },
            },
            "factors": list(factors),
        },
        "_links": {"cancel": {"href": CANCEL_URL}},
    }


def mfa_challenge(
    factor: dict[str, Any],
    factor_result: str | None = None,
    prev: bool = True,
) -> dict[str, Any]:
    links: dict[str, Any] = {
        "next": {"name": "verify", "href": verify_url(factor["id"])},
        "cancel": {"href": CANCEL_URL},
    }
    if prev:
        links["prev"] = {"href": PREV_URL}

    transaction: dict[str, Any] = {
        "stateToken": STATE_TOKEN,
        "expiresAt": EXPIRES_AT,
        "status": "MFA_CHALLENGE",
        "_embedded": {"factor": factor},
        "_links": links,
    }
    if factor_result is not None:
        transaction["factorResult"] = factor_result
    return transaction


def success() -> dict[str, Any]:
    return {
        "expiresAt": EXPIRES_AT,
        "status": "SUCCESS",
        "sessionToken": SESSION_TOKEN,
        "_embedded": {"user": {"id": "00u2k4zip5XnaVacd1t6"}},
    }


def api_error(summary: str = "Invalid Passcode/Answer") -> dict[str, Any]:
    return {
        "errorCode": "E0000068",
        "errorSummary": summary,
        "errorLink": "E0000068",
        "errorId": "oaei_IfXcpnTHit_YEKGInpFw",
        "errorCauses": [{"errorSummary": "Your passcode doesn't match our records."}],
    }


def make_client(
    transport: ScriptedTransport, prompts: FakePrompts, **settings: Any
) -> OktaClient:
    settings.setdefault("domain", "example.okta.com")
    settings.setdefault("sleep", AsyncMock())
    return OktaClient(prompts=prompts, transport=transport, **settings)


@pytest.fixture
def transport() -> ScriptedTransport:
    return ScriptedTransport()


@pytest.fixture
def prompts() -> FakePrompts:
    return FakePrompts()
