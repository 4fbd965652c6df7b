"""
The Okta authentication state machine.

Please see https://developer.okta.com/docs/api/resources/authn for how the
Okta auth flow works.

After every auth operation against Okta a new AuthenticationTransaction is
returned, which gives us two things:

1. The current state of the transaction (MFA required, MFA challenge, locked
   out, ...).
2. The links to post to in order to advance the transaction to the next
   step, or go back to the previous one.

Since the transaction has everything we need to know how to proceed (or
reverse), the flow holds no state of its own. It evaluates the current
transaction, performs one request, and loops on the transaction that request
returned, until it reaches success or a terminal error.

For an MFA login the loop usually sees MFA_REQUIRED first: the user picks a
factor and we ask Okta to start verifying it. The next transaction is an
MFA_CHALLENGE; depending on the factor the user provides a code, touches a
security key, or approves a push. If verification succeeds the next
transaction is SUCCESS and carries the session token.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from okta_auth.errors import (
    UNEXPECTED_ERROR_MESSAGE,
    APIRequestError,
    TerminalError,
)
from okta_auth.factors import (
    CODE_FACTORS,
    FactorType,
    sort_factors,
    supported_factors,
)
from okta_auth.models import (
    AuthenticationTransaction,
    Factor,
    FactorProfileU2F,
    FactorProfileWebAuthN,
    FactorVerify,
    FactorVerifyCode,
    FactorVerifyPush,
    FactorVerifyU2F,
    FactorVerifyWebAuthN,
    Links,
    TransactionState,
)
from okta_auth.prompts import VerifyU2FRequest, VerifyWebAuthnRequest
from okta_auth.push import PushPoller

if TYPE_CHECKING:
    from okta_auth.client import OktaClient

logger = logging.getLogger(__name__)

UNSUPPORTED_FACTOR_MESSAGE = "Sorry, that factor is not supported yet."
CANCELLED_MESSAGE = "Cancelled"


class Transition(Enum):
    """What produced the transaction the loop is about to handle."""

    STARTED = "started"
    FACTOR_STARTED = "factor started"
    FACTOR_VERIFIED = "factor verified"
    FACTOR_CANCELLED = "factor cancelled"
    PUSH_APPROVED = "push approved"


@dataclass(frozen=True)
class Step:
    transition: Transition
    transaction: AuthenticationTransaction


class AuthenticationFlow:
    """
    Drives one authentication attempt from the first transaction to a
    session token.

    A flow is created per attempt. It only reads from the client (prompts,
    root URL, request sender and push settings), so several flows can run on
    the same client at once.
    """

    def __init__(self, client: "OktaClient", poller: PushPoller | None = None) -> None:
        self.root_url = client.root_url
        self.prompts = client.prompts
        self._send = client.send_transaction_request
        self._default_timeout = client.config.timeout
        self.poller = poller or PushPoller(
            client.send_transaction_request,
            interval=client.config.push_poll_interval,
            max_attempts=client.config.push_max_attempts,
            sleep=client.sleep,
        )

    async def run(
        self, transaction: AuthenticationTransaction, auto_attempt_u2f: bool = False
    ) -> str:
        """
        Execute the state machine and return the Okta session token.

        ``auto_attempt_u2f`` lets the first MFA_REQUIRED step pick a connected
        U2F device without asking; it never applies after the first step.

        Raises:
            TerminalError: The flow cannot proceed.
            NonFatalAuthError: A push was rejected or timed out.
            Exception: Whatever ``Prompts.choose_factor`` raised to abort.
        """
        step = Step(Transition.STARTED, transaction)

        while True:
            transaction = step.transaction
            logger.debug(
                f"Handling auth user flow: status {transaction.status!r} "
                f"({step.transition.value})"
            )

            if transaction.status == TransactionState.SUCCESS:
                logger.info("Authentication succeeded")
                return transaction.session_token

            step = await self._dispatch(
                transaction,
                auto_attempt_u2f and step.transition is Transition.STARTED,
            )

    async def _dispatch(
        self, transaction: AuthenticationTransaction, auto_attempt_u2f: bool
    ) -> Step:
        status = transaction.status

        if status == TransactionState.PASSWORD_EXPIRED:
            raise TerminalError(
                f"Your password is expired, login to {self.root_url} to resolve."
            )
        if status == TransactionState.RECOVERY:
            raise TerminalError(
                f"Your account is in recovery, login to {self.root_url} to resolve."
            )
        if status == TransactionState.LOCKED_OUT:
            raise TerminalError(
                "Your account has been locked, please contact your "
                "administrator for assistance."
            )
        if status in (TransactionState.MFA_ENROLL, TransactionState.MFA_ENROLL_ACTIVATE):
            raise TerminalError(
                "You are required to enroll an MFA method, "
                f"login to {self.root_url} to resolve."
            )
        if status == TransactionState.MFA_REQUIRED:
            return await self._handle_mfa_required(transaction, auto_attempt_u2f)
        if status == TransactionState.MFA_CHALLENGE:
            return await self._handle_mfa_challenge(transaction)

        raise TerminalError(
            f"Unknown user state {status}, contact your administrator for assistance."
        )

    # -----------------------------------Factor selection-----------------------------------#

    async def _handle_mfa_required(
        self, transaction: AuthenticationTransaction, auto_attempt_u2f: bool
    ) -> Step:
        """
        Pick the factor to verify.

        If ``auto_attempt_u2f`` is set and a U2F device answers the presence
        check, that factor is started right away. Otherwise the user chooses.
        """
        supported = supported_factors(transaction.embedded.factors)
        if not supported:
            raise TerminalError("No supported MFA types found")

        if auto_attempt_u2f:
            for factor in supported:
                if factor.factor_type != FactorType.U2F:
                    continue
                if not isinstance(factor.profile, FactorProfileU2F):
                    continue
                if await self.prompts.check_u2f_presence(
                    self._u2f_request(factor.profile)
                ):
                    logger.info(f"U2F device detected, starting factor {factor.id}")
                    return await self._start_factor(transaction, factor)

        choices = [factor.to_public() for factor in sort_factors(supported)]
        chosen = await self.prompts.choose_factor(choices)

        for factor in supported:
            if factor.id == chosen.id:
                return await self._start_factor(transaction, factor)

        raise TerminalError(f"Factor with id {chosen.id!r} was not found")

    async def _start_factor(
        self, transaction: AuthenticationTransaction, factor: Factor
    ) -> Step:
        url = self._require_link(factor.links, "verify")
        new_transaction, api_error = await self._send(
            url, FactorVerify(state_token=transaction.state_token)
        )
        if api_error is not None:
            # Okta decides whether the choice still stands; keep going
            await self.prompts.present_user_error(
                f"Got error trying to use MFA {factor.factor_type}: "
                f"{api_error.error_summary}"
            )
        return Step(Transition.FACTOR_STARTED, new_transaction)

    # -----------------------------------Factor challenge-----------------------------------#

    async def _handle_mfa_challenge(self, transaction: AuthenticationTransaction) -> Step:
        factor = transaction.embedded.factor or Factor()
        factor_type = factor.factor_type

        if factor_type == FactorType.U2F:
            return await self._verify_u2f(transaction, factor)
        if factor_type == FactorType.WEBAUTHN:
            return await self._verify_webauthn(transaction, factor)
        if factor_type in CODE_FACTORS:
            return await self._verify_code(transaction, factor)
        if factor_type == FactorType.PUSH:
            return await self._verify_push(transaction)

        return await self._cancel_factor(transaction, UNSUPPORTED_FACTOR_MESSAGE)

    async def _cancel_factor(
        self, transaction: AuthenticationTransaction, message: str | None = None
    ) -> Step:
        """Optionally show ``message``, then go back to factor selection."""
        if message:
            await self.prompts.present_user_error(message)

        url = self._require_link(transaction.links, "prev")
        new_transaction, api_error = await self._send(
            url, FactorVerify(state_token=transaction.state_token)
        )
        if api_error is not None:
            logger.error(
                f"Got error trying to cancel MFA factor: uri {url!r}, "
                f"error: {api_error.error_summary!r}"
            )
            raise APIRequestError(UNEXPECTED_ERROR_MESSAGE, api_error)

        return Step(Transition.FACTOR_CANCELLED, new_transaction)

    async def _verify_u2f(
        self, transaction: AuthenticationTransaction, factor: Factor
    ) -> Step:
        profile = factor.profile
        if not isinstance(profile, FactorProfileU2F):
            logger.error(f"Profile was not of type FactorProfileU2F: {profile!r}")
            return await self._cancel_factor(transaction, UNEXPECTED_ERROR_MESSAGE)

        url = self._require_link(transaction.links, "next")
        challenge = factor.challenge
        request = self._u2f_request(profile, challenge.nonce)

        try:
            async with asyncio.timeout(self._challenge_timeout(challenge.timeout_seconds)):
                response = await self.prompts.verify_u2f(request)
        except Exception as e:
            return await self._cancel_factor(
                transaction, f"Failed to authenticate: {_describe(e)}"
            )

        new_transaction, api_error = await self._send(
            url,
            FactorVerifyU2F(
                state_token=transaction.state_token,
                client_data=response.client_data,
                signature_data=response.signature_data,
            ),
        )
        if api_error is not None:
            return await self._cancel_factor(transaction, api_error.error_summary)
        return Step(Transition.FACTOR_VERIFIED, new_transaction)

    async def _verify_webauthn(
        self, transaction: AuthenticationTransaction, factor: Factor
    ) -> Step:
        profile = factor.profile
        if not isinstance(profile, FactorProfileWebAuthN):
            logger.error(f"Profile was not of type FactorProfileWebAuthN: {profile!r}")
            return await self._cancel_factor(transaction, UNEXPECTED_ERROR_MESSAGE)

        url = self._require_link(transaction.links, "next")
        challenge = factor.challenge
        request = VerifyWebAuthnRequest(
            rp_id=urlsplit(self.root_url).hostname or "",
            credential_id=profile.credential_id,
            challenge=challenge.challenge,
        )

        try:
            async with asyncio.timeout(self._challenge_timeout(challenge.timeout_seconds)):
                response = await self.prompts.verify_webauthn(request)
        except Exception as e:
            return await self._cancel_factor(
                transaction, f"Failed to authenticate: {_describe(e)}"
            )

        new_transaction, api_error = await self._send(
            url,
            FactorVerifyWebAuthN(
                state_token=transaction.state_token,
                client_data=response.client_data,
                signature_data=response.signature_data,
                authenticator_data=response.authenticator_data,
            ),
        )
        if api_error is not None:
            return await self._cancel_factor(transaction, api_error.error_summary)
        return Step(Transition.FACTOR_VERIFIED, new_transaction)

    async def _verify_code(
        self, transaction: AuthenticationTransaction, factor: Factor
    ) -> Step:
        url = self._require_link(transaction.links, "next")

        try:
            code = await self.prompts.verify_code(factor.to_public())
        except Exception as e:
            logger.info(f"Code entry aborted: {_describe(e)}")
            return await self._cancel_factor(transaction, CANCELLED_MESSAGE)

        new_transaction, api_error = await self._send(
            url,
            FactorVerifyCode(state_token=transaction.state_token, pass_code=code),
        )
        if api_error is not None:
            return await self._cancel_factor(transaction, api_error.error_summary)
        return Step(Transition.FACTOR_VERIFIED, new_transaction)

    async def _verify_push(self, transaction: AuthenticationTransaction) -> Step:
        """
        Send a push notification to the user's device, then poll until they
        answer it. See ``PushPoller`` for the polling policy.
        """
        url = self._require_link(transaction.links, "next")
        request = FactorVerifyPush(state_token=transaction.state_token)

        try:
            sent, api_error = await self._send(url, request)
        except TerminalError as e:
            logger.warning(f"Failed to send push notification: {e}")
            return await self._cancel_factor(transaction, CANCELLED_MESSAGE)
        if api_error is not None:
            return await self._cancel_factor(transaction, api_error.error_summary)

        if sent.status == TransactionState.SUCCESS:
            return Step(Transition.PUSH_APPROVED, sent)

        await self.prompts.verify_push()

        poll_url = sent.links.href("next") or url
        approved = await self.poller.poll(poll_url, request, transaction)
        return Step(Transition.PUSH_APPROVED, approved)

    # -----------------------------------Helpers-----------------------------------#

    def _u2f_request(self, profile: FactorProfileU2F, challenge: str = "") -> VerifyU2FRequest:
        return VerifyU2FRequest(
            facet=self.root_url,
            app_id=profile.app_id,
            key_handle=profile.credential_id,
            challenge=challenge,
        )

    def _challenge_timeout(self, timeout_seconds: int) -> float:
        # Okta always sends one for security keys; fall back to the request timeout
        if timeout_seconds > 0:
            return float(timeout_seconds)
        return self._default_timeout

    @staticmethod
    def _require_link(links: Links, name: str) -> str:
        href = links.href(name)
        if href is None:
            raise TerminalError(f"Okta did not return a {name!r} link, cannot continue.")
        return href


def _describe(error: BaseException) -> str:
    if isinstance(error, TimeoutError):
        return "timed out waiting for the security key"
    return str(error) or type(error).__name__
