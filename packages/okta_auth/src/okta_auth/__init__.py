"""
okta-auth - Okta username/password authentication with multi-factor support.

Drives the Okta authn API transaction by transaction until it yields a
session token, delegating every user or device interaction to a ``Prompts``
implementation.
"""

from okta_auth.client import OktaClient
from okta_auth.config import ClientConfig
from okta_auth.errors import (
    APIRequestError,
    ConfigurationError,
    DecodeError,
    NonFatalAuthError,
    OktaAuthError,
    TerminalError,
)
from okta_auth.factors import (
    KNOWN_FACTORS,
    Factor,
    FactorType,
    ProfileCall,
    ProfileQuestion,
    ProfileSMS,
    ProfileToken,
    ProfileWebAuthn,
    sort_factors,
    supported_factors,
)
from okta_auth.prompts import (
    Prompts,
    VerifyU2FRequest,
    VerifyU2FResponse,
    VerifyWebAuthnRequest,
    VerifyWebAuthnResponse,
)
from okta_auth.transport import HttpxTransport, Transport

__version__ = "0.1.0"

__all__ = [
    # Client
    "OktaClient",
    "ClientConfig",
    "Transport",
    "HttpxTransport",
    # Prompts
    "Prompts",
    "VerifyU2FRequest",
    "VerifyU2FResponse",
    "VerifyWebAuthnRequest",
    "VerifyWebAuthnResponse",
    # Factors
    "Factor",
    "FactorType",
    "KNOWN_FACTORS",
    "ProfileCall",
    "ProfileQuestion",
    "ProfileSMS",
    "ProfileToken",
    "ProfileWebAuthn",
    "sort_factors",
    "supported_factors",
    # Errors
    "OktaAuthError",
    "ConfigurationError",
    "TerminalError",
    "DecodeError",
    "APIRequestError",
    "NonFatalAuthError",
]
