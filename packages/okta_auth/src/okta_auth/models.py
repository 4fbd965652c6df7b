"""
Wire models for the Okta authentication API.

See https://developer.okta.com/docs/api/resources/authn for the shape of the
transaction, factor and error objects.
"""

from collections.abc import Mapping
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, ClassVar, Union

from pydantic import Field, ValidationError, ValidationInfo, field_validator

from shared_lib.pydantic import APIBaseModel

from okta_auth import factors
from okta_auth.errors import DecodeError
from okta_auth.factors import FactorType


class TransactionState(str, Enum):
    SUCCESS = "SUCCESS"
    PASSWORD_WARN = "PASSWORD_WARN"
    PASSWORD_EXPIRED = "PASSWORD_EXPIRED"
    RECOVERY = "RECOVERY"
    LOCKED_OUT = "LOCKED_OUT"
    MFA_REQUIRED = "MFA_REQUIRED"
    MFA_CHALLENGE = "MFA_CHALLENGE"
    MFA_ENROLL = "MFA_ENROLL"
    MFA_ENROLL_ACTIVATE = "MFA_ENROLL_ACTIVATE"

    def __str__(self) -> str:
        return self.value


class FactorResult(str, Enum):
    WAITING = "WAITING"
    CANCELLED = "CANCELLED"
    TIMEOUT = "TIMEOUT"
    TIME_WINDOW_EXCEEDED = "TIME_WINDOW_EXCEEDED"
    PASSCODE_REPLAYED = "PASSCODE_REPLAYED"
    ERROR = "ERROR"
    REJECTED = "REJECTED"
    SUCCESS = "SUCCESS"

    def __str__(self) -> str:
        return self.value


# -----------------------------------Links-----------------------------------#


class Link(APIBaseModel):
    href: str = ""


class Links(APIBaseModel):
    verify: Link | None = None
    cancel: Link | None = None
    next: Link | None = None
    prev: Link | None = None

    def href(self, name: str) -> str | None:
        """Return the href of the named link, or None when the server sent none."""
        link = getattr(self, name, None)
        if link is None or not link.href:
            return None
        return link.href


# -----------------------------------Factor profiles-----------------------------------#


class FactorProfileQuestion(APIBaseModel):
    question: str = ""
    question_text: str = Field("", alias="questionText")
    answer: str = ""


class FactorProfileSMS(APIBaseModel):
    phone_number: str = Field("", alias="phoneNumber")


class FactorProfileCall(APIBaseModel):
    phone_number: str = Field("", alias="phoneNumber")
    phone_extension: str = Field("", alias="phoneExtension")


class FactorProfileToken(APIBaseModel):
    credential_id: str = Field("", alias="credentialId")


class FactorProfileU2F(APIBaseModel):
    credential_id: str = Field("", alias="credentialId")
    app_id: str = Field("", alias="appId")
    version: str = ""


class FactorProfileWebAuthN(APIBaseModel):
    credential_id: str = Field("", alias="credentialId")
    authenticator_name: str = Field("", alias="authenticatorName")


FactorProfile = Union[
    FactorProfileQuestion,
    FactorProfileSMS,
    FactorProfileCall,
    FactorProfileToken,
    FactorProfileU2F,
    FactorProfileWebAuthN,
]

# One entry per FactorType. Push factors carry nothing we use.
PROFILE_DECODERS: Mapping[FactorType, type[APIBaseModel] | None] = MappingProxyType(
    {
        FactorType.QUESTION: FactorProfileQuestion,
        FactorType.SMS: FactorProfileSMS,
        FactorType.CALL: FactorProfileCall,
        FactorType.TOKEN: FactorProfileToken,
        FactorType.TOKEN_SOFTWARE_TOTP: FactorProfileToken,
        FactorType.TOKEN_HARDWARE: FactorProfileToken,
        FactorType.U2F: FactorProfileU2F,
        FactorType.WEBAUTHN: FactorProfileWebAuthN,
        FactorType.PUSH: None,
    }
)


def decode_profile(factor_type: FactorType | str | None, raw: Any) -> FactorProfile | None:
    """
    Decode a raw profile payload with the decoder registered for ``factor_type``.

    An empty payload is valid (the user has not enrolled the factor) and
    yields no profile. Kinds without a decoder also yield no profile, so an
    unknown kind never breaks the transaction fetch.
    """
    if raw is None or (isinstance(raw, Mapping) and not raw):
        return None
    decoder = (
        PROFILE_DECODERS.get(factor_type) if isinstance(factor_type, FactorType) else None
    )
    if isinstance(raw, APIBaseModel):
        if decoder is None or not isinstance(raw, decoder):
            raise ValueError(
                f"{type(raw).__name__} is not a valid profile for factor type {factor_type!r}"
            )
        return raw  # type: ignore[return-value]
    if decoder is None:
        return None
    return decoder.model_validate(raw)  # type: ignore[return-value]


# -----------------------------------Factor-----------------------------------#


class Challenge(APIBaseModel):
    challenge: str = ""
    nonce: str = ""
    timeout_seconds: int = Field(0, alias="timeoutSeconds")


class FactorEmbedded(APIBaseModel):
    challenge: Challenge | None = None


class Factor(APIBaseModel):
    """
    https://developer.okta.com/docs/api/resources/authn#factor-object

    ``profile`` is decoded according to ``factor_type``; see PROFILE_DECODERS.
    """

    id: str = ""
    factor_type: FactorType | str = Field(
        "", alias="factorType", union_mode="left_to_right"
    )
    provider: str = ""
    profile: FactorProfile | None = None
    links: Links = Field(default_factory=Links, alias="_links")
    embedded: FactorEmbedded = Field(default_factory=FactorEmbedded, alias="_embedded")

    @field_validator("profile", mode="before")
    @classmethod
    def _decode_profile(cls, value: Any, info: ValidationInfo) -> Any:
        return decode_profile(info.data.get("factor_type"), value)

    @property
    def challenge(self) -> Challenge:
        return self.embedded.challenge or Challenge()

    def to_public(self) -> factors.Factor:
        """Translate to the descriptor handed to prompts, hiding internal fields."""
        profile = self.profile
        kwargs: dict[str, Any] = {}
        if isinstance(profile, FactorProfileQuestion):
            kwargs["profile_question"] = factors.ProfileQuestion(
                question_text=profile.question_text
            )
        elif isinstance(profile, FactorProfileSMS):
            kwargs["profile_sms"] = factors.ProfileSMS(phone_number=profile.phone_number)
        elif isinstance(profile, FactorProfileCall):
            kwargs["profile_call"] = factors.ProfileCall(
                phone_number=profile.phone_number,
                phone_extension=profile.phone_extension,
            )
        elif isinstance(profile, FactorProfileToken):
            kwargs["profile_token"] = factors.ProfileToken(
                credential_id=profile.credential_id
            )
        elif isinstance(profile, FactorProfileWebAuthN):
            kwargs["profile_webauthn"] = factors.ProfileWebAuthn(
                authenticator_name=profile.authenticator_name
            )

        return factors.Factor(
            id=self.id,
            factor_type=self.factor_type,
            provider=self.provider,
            **kwargs,
        )


# -----------------------------------Transaction-----------------------------------#


class UserProfile(APIBaseModel):
    login: str = ""
    first_name: str = Field("", alias="firstName")
    last_name: str = Field("", alias="lastName")


class User(APIBaseModel):
    id: str = ""
    profile: UserProfile = Field(default_factory=UserProfile)


class Embedded(APIBaseModel):
    user: User | None = None
    factors: list[Factor] = Field(default_factory=list)
    factor: Factor | None = None


class AuthenticationTransaction(APIBaseModel):
    """
    One step of the authentication handshake.

    Every request against the authn API returns a new transaction. Its status
    tells the caller what to do next and its links say where to do it.
    """

    state_token: str = Field("", alias="stateToken")
    session_token: str = Field("", alias="sessionToken")
    status: TransactionState | str = Field("", union_mode="left_to_right")
    expires_at: datetime | None = Field(None, alias="expiresAt")
    relay_state: str | None = Field(None, alias="relayState")
    factor_result: FactorResult | str | None = Field(
        None, alias="factorResult", union_mode="left_to_right"
    )
    embedded: Embedded = Field(default_factory=Embedded, alias="_embedded")
    links: Links = Field(default_factory=Links, alias="_links")

    @classmethod
    def from_response(cls, body: bytes | str) -> "AuthenticationTransaction":
        try:
            return cls.model_validate_json(body)
        except ValidationError as e:
            raise DecodeError(reason=f"invalid authentication transaction: {e}") from e


# -----------------------------------Errors-----------------------------------#


class APIErrorCause(APIBaseModel):
    error_summary: str = Field("", alias="errorSummary")


class APIError(APIBaseModel):
    """https://developer.okta.com/docs/reference/error-codes/"""

    error_code: str = Field("", alias="errorCode")
    error_summary: str = Field("", alias="errorSummary")
    error_link: str = Field("", alias="errorLink")
    error_id: str = Field("", alias="errorId")
    error_causes: list[APIErrorCause] = Field(default_factory=list, alias="errorCauses")

    @classmethod
    def from_response(cls, body: bytes | str) -> "APIError":
        try:
            return cls.model_validate_json(body)
        except ValidationError as e:
            raise DecodeError(reason=f"invalid api error: {e}") from e


# -----------------------------------Requests-----------------------------------#


class RequestModel(APIBaseModel):
    """Base for request bodies; ``redacted_fields`` never reach the logs."""

    redacted_fields: ClassVar[frozenset[str]] = frozenset()

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

    def log_payload(self) -> dict[str, Any]:
        return self.model_dump(
            by_alias=True, exclude_none=True, exclude=set(self.redacted_fields)
        )


class AuthenticationContext(APIBaseModel):
    device_token: str | None = Field(None, alias="deviceToken")


class AuthenticationRequest(RequestModel):
    redacted_fields: ClassVar[frozenset[str]] = frozenset({"password"})

    username: str
    password: str = Field(repr=False)
    relay_state: str | None = Field(None, alias="relayState")
    context: AuthenticationContext = Field(default_factory=AuthenticationContext)


class FactorVerify(RequestModel):
    state_token: str = Field(alias="stateToken")


# Used for SMS, TOTP and Call
class FactorVerifyCode(FactorVerify):
    redacted_fields: ClassVar[frozenset[str]] = frozenset({"pass_code"})

    pass_code: str = Field(alias="passCode")


class FactorVerifyU2F(FactorVerify):
    client_data: str = Field(alias="clientData")
    signature_data: str = Field(alias="signatureData")


class FactorVerifyWebAuthN(FactorVerify):
    client_data: str = Field(alias="clientData")
    signature_data: str = Field(alias="signatureData")
    authenticator_data: str = Field(alias="authenticatorData")


class FactorVerifyPush(FactorVerify):
    pass
