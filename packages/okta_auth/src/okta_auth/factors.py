"""
Second factor kinds, the public factor descriptors handed to prompts, and the
preference ordering used for auto-selection and for presenting choices.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, TypeVar


class FactorType(str, Enum):
    """Second factor kinds, as named by Okta."""

    PUSH = "push"
    SMS = "sms"
    CALL = "call"
    U2F = "u2f"
    WEBAUTHN = "webauthn"
    TOKEN = "token"
    TOKEN_SOFTWARE_TOTP = "token:software:totp"
    TOKEN_HARDWARE = "token:hardware"
    QUESTION = "question"

    def __str__(self) -> str:
        return self.value


# Strongest first. Kinds missing from this tuple are not supported.
KNOWN_FACTORS: tuple[FactorType, ...] = (
    FactorType.U2F,
    FactorType.WEBAUTHN,
    FactorType.TOKEN,
    FactorType.TOKEN_SOFTWARE_TOTP,
    FactorType.TOKEN_HARDWARE,
    FactorType.PUSH,
    FactorType.SMS,
    FactorType.CALL,
    FactorType.QUESTION,
)

HARDWARE_KEY_FACTORS = frozenset({FactorType.U2F, FactorType.WEBAUTHN})

CODE_FACTORS = frozenset(
    {
        FactorType.TOKEN,
        FactorType.TOKEN_SOFTWARE_TOTP,
        FactorType.TOKEN_HARDWARE,
        FactorType.SMS,
        FactorType.CALL,
    }
)


class HasFactorType(Protocol):
    @property
    def factor_type(self) -> FactorType | str: ...


F = TypeVar("F", bound=HasFactorType)


def factor_rank(
    factor_type: FactorType | str, order: Sequence[FactorType] = KNOWN_FACTORS
) -> int:
    """Position of a kind in the preference order, ``-1`` when unknown."""
    for i, known in enumerate(order):
        if factor_type == known:
            return i
    return -1


def supported_factors(
    factors: Iterable[F], order: Sequence[FactorType] = KNOWN_FACTORS
) -> list[F]:
    """Filters out factors we don't currently support, keeping their order."""
    return [f for f in factors if factor_rank(f.factor_type, order) != -1]


def sort_factors(
    factors: Iterable[F], order: Sequence[FactorType] = KNOWN_FACTORS
) -> list[F]:
    """
    Sort factors by preference, strongest first.

    Unknown kinds go after every known kind and keep their original relative
    order.
    """

    def key(factor: F) -> int:
        rank = factor_rank(factor.factor_type, order)
        return rank if rank != -1 else len(order)

    return sorted(factors, key=key)


@dataclass(frozen=True)
class ProfileQuestion:
    # Display text for question.
    question_text: str = ""


@dataclass(frozen=True)
class ProfileSMS:
    # Phone number of mobile device.
    phone_number: str = ""


@dataclass(frozen=True)
class ProfileCall:
    phone_number: str = ""
    phone_extension: str = ""


@dataclass(frozen=True)
class ProfileToken:
    # Id for credential. Ex: "dade.murphy@example.com"
    credential_id: str = ""


@dataclass(frozen=True)
class ProfileWebAuthn:
    authenticator_name: str = ""


@dataclass(frozen=True)
class Factor:
    """
    A multi-factor method available for authentication, as shown to prompts.

    At most one of the ``profile_*`` fields is populated depending on
    ``factor_type``. Links, challenges and U2F credential data stay internal.
    """

    id: str
    factor_type: FactorType | str
    provider: str = ""
    profile_question: ProfileQuestion | None = None
    profile_sms: ProfileSMS | None = None
    profile_call: ProfileCall | None = None
    # Set for token, token:hardware and token:software:totp factors.
    profile_token: ProfileToken | None = None
    profile_webauthn: ProfileWebAuthn | None = None
