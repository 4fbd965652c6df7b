"""
Exceptions raised by the authentication flow.

Two families matter to callers:

- ``TerminalError``: the current authentication attempt cannot proceed. The
  program should print the error and exit with a non zero status code.
- ``NonFatalAuthError``: a push notification was rejected or timed out. The
  caller may start the flow again.

Mistakes the user can correct (a wrong code, a missing security key) never
surface as exceptions; the flow steps back to factor selection instead.
"""

from typing import TYPE_CHECKING

from shared_lib.baseclient.exceptions import AuthenticationError, ConfigurationError

if TYPE_CHECKING:
    from okta_auth.models import APIError

__all__ = [
    "OktaAuthError",
    "ConfigurationError",
    "TerminalError",
    "DecodeError",
    "APIRequestError",
    "NonFatalAuthError",
]

UNEXPECTED_ERROR_MESSAGE = "Encountered an unexpected error."


class OktaAuthError(AuthenticationError):
    """Base exception for every error raised by the authentication flow."""

    pass


class TerminalError(OktaAuthError):
    """The current authentication flow cannot proceed."""

    pass


class DecodeError(TerminalError):
    """A response body could not be decoded."""

    def __init__(self, message: str = UNEXPECTED_ERROR_MESSAGE, **kwargs):
        super().__init__(message, **kwargs)


class APIRequestError(TerminalError):
    """
    Okta rejected a request with a structured error.

    Attributes:
        api_error: The decoded error body (code, summary, link, id, causes).
    """

    def __init__(self, message: str, api_error: "APIError"):
        super().__init__(message, api_error=api_error)
        self.api_error = api_error


class NonFatalAuthError(OktaAuthError):
    """A push verification was rejected or timed out."""

    pass
