"""Session DTOs shared across application layers."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Literal, Mapping, Optional, Tuple, Union

ForgotMode = Literal["id", "password"]


class PartialSessionScenario(str, Enum):
    MUST_REVALIDATE_TERMS = "MUST_REVALIDATE_TERMS"
    MUST_CHANGE_PASSWORD = "MUST_CHANGE_PASSWORD"
    MUST_VERIFY_MOBILE = "MUST_VERIFY_MOBILE"
    MUST_VERIFY_EMAIL = "MUST_VERIFY_EMAIL"


class PendingRedirection(str, Enum):
    ACTIVATE = "activate"
    RENEW_PASSWORD = "renew-password"


@dataclass(frozen=True)
class Platform:
    """One backend instance the app can authenticate against."""

    name: str
    url: str
    wayf: bool = False
    web_theme: Optional[str] = None
    legal_urls: Mapping[str, str] = field(default_factory=dict)
    display_name: Optional[str] = None

    def endpoint(self, path: str) -> str:
        return f"{self.url.rstrip('/')}/{path.lstrip('/')}"


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***')"


def _validated(state: Any) -> bool:
    if isinstance(state, Mapping):
        return state.get("state") == "valid"
    return bool(state)


@dataclass(frozen=True)
class UserInfo:
    """Normalized account snapshot returned by the userinfo endpoint."""

    id: Optional[str]
    login: Optional[str]
    display_name: str = ""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_type: Optional[str] = None
    structures: Tuple[str, ...] = ()
    email: Optional[str] = None
    mobile: Optional[str] = None
    has_password: bool = True
    must_change_password: bool = False
    needs_revalidate_terms: bool = False
    requires_mobile_verification: bool = False
    mobile_validated: bool = False
    requires_email_verification: bool = False
    email_validated: bool = False
    has_app: Optional[bool] = None
    delete_pending: bool = False

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "UserInfo":
        profile_type = payload.get("type")
        if isinstance(profile_type, (list, tuple)):
            profile_type = profile_type[0] if profile_type else None
        return cls(
            id=payload.get("userId"),
            login=payload.get("login"),
            display_name=payload.get("username") or "",
            first_name=payload.get("firstName"),
            last_name=payload.get("lastName"),
            profile_type=profile_type,
            structures=tuple(payload.get("structures") or ()),
            email=payload.get("email"),
            mobile=payload.get("mobile"),
            has_password=payload.get("hasPw", True) is not False,
            must_change_password=bool(payload.get("forceChangePassword")),
            needs_revalidate_terms=bool(payload.get("needRevalidateTerms")),
            requires_mobile_verification=bool(payload.get("needRevalidateMobile")),
            mobile_validated=_validated(payload.get("mobileState")),
            requires_email_verification=bool(payload.get("needRevalidateEmail")),
            email_validated=_validated(payload.get("emailState")),
            has_app=payload.get("hasApp"),
            delete_pending=bool(payload.get("deletePending")),
        )


@dataclass(frozen=True)
class AuthContext:
    """Platform auth policy served by `auth/context`."""

    cgu: bool = False
    password_regex: Optional[str] = None
    password_regex_i18n: Mapping[str, str] = field(default_factory=dict)
    mandatory_mail: bool = False
    mandatory_phone: bool = False
    callback: str = ""

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "AuthContext":
        mandatory = payload.get("mandatory") or {}
        return cls(
            cgu=bool(payload.get("cgu")),
            password_regex=payload.get("passwordRegex") or None,
            password_regex_i18n=dict(payload.get("passwordRegexI18n") or {}),
            mandatory_mail=bool(mandatory.get("mail")),
            mandatory_phone=bool(mandatory.get("phone")),
            callback=payload.get("callBack") or "",
        )


@dataclass(frozen=True)
class Session:
    platform: Platform
    user: UserInfo
    token_present: bool
    public_info: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class LoginRedirect:
    """What the caller must do next when a login cannot complete normally."""

    action: Union[PartialSessionScenario, PendingRedirection]
    context: AuthContext
    credentials: Optional[Credentials] = None
    remember_me: bool = False


LoginResult = Optional[LoginRedirect]


@dataclass(frozen=True)
class ActivationPayload:
    activation_code: str
    login: str
    password: str
    confirm_password: str
    mail: Optional[str] = None
    phone: Optional[str] = None


@dataclass(frozen=True)
class ChangePasswordPayload:
    old_password: str
    new_password: str
    confirm: str
    login: str


@dataclass(frozen=True)
class ForgotPayload:
    login: str
    first_name: Optional[str] = None
    structure_id: Optional[str] = None


def format_session(
    platform: Platform,
    user_info: UserInfo,
    public_info: Optional[Dict[str, Any]] = None,
    token_present: bool = True,
) -> Session:
    return Session(
        platform=platform,
        user=user_info,
        token_present=token_present,
        public_info=dict(public_info or {}),
    )
