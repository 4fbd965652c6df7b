"""
Polling for Okta Verify push approval.

Once a push notification is sent, the only way to learn the user's answer is
to keep posting to the factor's verify link until the transaction succeeds,
the push is rejected, or we give up. If we give up, the notification is still
on the user's phone; they have to dismiss it before trying again.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from okta_auth.errors import APIRequestError, NonFatalAuthError, OktaAuthError
from okta_auth.models import (
    APIError,
    AuthenticationTransaction,
    FactorResult,
    FactorVerifyPush,
    RequestModel,
    TransactionState,
)

logger = logging.getLogger(__name__)

REJECTED_MESSAGE = "Authentication Rejected"
TIMEOUT_MESSAGE = "Authentication Timed Out"

SendTransactionRequest = Callable[
    [str, RequestModel],
    Awaitable[tuple[AuthenticationTransaction, APIError | None]],
]


class PushPoller:
    """
    Constant-interval poller with a maximum number of attempts.

    The first poll happens right away, then one every ``interval`` seconds,
    ``max_attempts`` polls at most.

    ## Outcomes:
    - approved: the successful transaction is returned
    - rejected or timed out: the push is cancelled on Okta's side and
      ``NonFatalAuthError`` is raised
    - transport or API failure: raised immediately, no further polling
    """

    def __init__(
        self,
        send_transaction_request: SendTransactionRequest,
        interval: float = 3.0,
        max_attempts: int = 10,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._send = send_transaction_request
        self.interval = interval
        self.max_attempts = max_attempts
        self._sleep = sleep

    async def poll(
        self,
        url: str,
        request: FactorVerifyPush,
        challenge: AuthenticationTransaction,
    ) -> AuthenticationTransaction:
        """
        Poll ``url`` until the push is approved.

        ``challenge`` is the transaction the push was sent from; its cancel
        link is used when the last poll did not return one.
        """
        last = challenge
        error: NonFatalAuthError | None = None

        for attempt in range(1, self.max_attempts + 1):
            if attempt > 1:
                await self._sleep(self.interval)

            last, api_error = await self._send(url, request)
            if api_error is not None:
                raise APIRequestError(api_error.error_summary, api_error)

            if last.status == TransactionState.SUCCESS:
                logger.info(f"Push approved after {attempt} poll(s)")
                return last

            if last.factor_result == FactorResult.REJECTED:
                logger.warning("Authentication Request rejected")
                error = NonFatalAuthError(REJECTED_MESSAGE)
                break

            logger.debug(
                f"Waiting for push approval: attempt {attempt}/{self.max_attempts}, "
                f"factor result {last.factor_result}"
            )

        if error is None:
            logger.warning(
                "Authentication Timed Out - please reject the current Okta Auth "
                "Request on your phone then try again"
            )
            error = NonFatalAuthError(TIMEOUT_MESSAGE)

        await self._cancel(last, challenge, request)
        raise error

    async def _cancel(
        self,
        last: AuthenticationTransaction,
        challenge: AuthenticationTransaction,
        request: FactorVerifyPush,
    ) -> None:
        """Best effort: don't leave the transaction dangling on Okta's side."""
        url = last.links.href("cancel") or challenge.links.href("cancel")
        if url is None:
            logger.warning("No cancel link available, push verification left open")
            return

        try:
            _, api_error = await self._send(url, request)
        except OktaAuthError as e:
            logger.warning(f"Failed to cancel push verification: {e}")
            return
        if api_error is not None:
            logger.warning(
                f"Failed to cancel push verification: {api_error.error_summary}"
            )
