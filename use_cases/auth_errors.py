"""Closed error taxonomy for the auth flows.

Every error raised by the orchestrators is one of three exception classes,
each tagged with a `name` discriminant and a `type` taken from a closed enum,
so callers branch with `isinstance` or on `type` instead of parsing messages.
"""

from enum import Enum
from typing import Any, Optional


class AuthErrorCode(str, Enum):
    BAD_CREDENTIALS = "BAD_CREDENTIALS"
    NOT_PREMIUM = "NOT_PREMIUM"
    PRE_DELETED = "PRE_DELETED"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    # Transport
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    NETWORK_ERROR = "NETWORK_ERROR"
    NOT_OK = "NOT_OK"
    BAD_RESPONSE = "BAD_RESPONSE"
    # OAuth2
    INVALID_CLIENT = "INVALID_CLIENT"
    INVALID_GRANT = "INVALID_GRANT"
    REFRESH_INVALID = "REFRESH_INVALID"
    SECURITY_TOO_MANY_TRIES = "SECURITY_TOO_MANY_TRIES"
    ACCOUNT_BLOCKED = "ACCOUNT_BLOCKED"
    PLATFORM_UNAVAILABLE = "PLATFORM_UNAVAILABLE"
    PLATFORM_TOO_LOAD = "PLATFORM_TOO_LOAD"
    PLATFORM_BLOCKED_TYPE = "PLATFORM_BLOCKED_TYPE"


class ActivationErrorCode(str, Enum):
    ACTIVATION = "activation"


class ChangePasswordErrorCode(str, Enum):
    CHANGE_PASSWORD = "change password"


class AuthFlowError(Exception):
    name = "EFLOW"

    def __init__(self, type: Enum, message: str = "", context: Optional[Any] = None):
        super().__init__(message or type.value)
        self.type = type
        self.message = message or type.value
        self.context = context

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(type={self.type.value!r}, message={self.message!r})"


class AuthError(AuthFlowError):
    name = "EAUTH"
    type: AuthErrorCode


class ActivationError(AuthFlowError):
    name = "EACTIVATION"
    type: ActivationErrorCode


class ChangePasswordError(AuthFlowError):
    name = "ECHANGEPWD"
    type: ChangePasswordErrorCode


def create_auth_error(code: AuthErrorCode, message: str = "", context: Optional[Any] = None) -> AuthError:
    return AuthError(code, message, context)


def create_activation_error(
    message: str,
    context: Optional[Any] = None,
    cause: Optional[BaseException] = None,
) -> ActivationError:
    err = ActivationError(ActivationErrorCode.ACTIVATION, message, context)
    err.__cause__ = cause
    return err


def create_change_password_error(
    message: str,
    context: Optional[Any] = None,
    cause: Optional[BaseException] = None,
) -> ChangePasswordError:
    err = ChangePasswordError(ChangePasswordErrorCode.CHANGE_PASSWORD, message, context)
    err.__cause__ = cause
    return err


def get_auth_error_code(error: Optional[BaseException]) -> Optional[AuthErrorCode]:
    """Return the AuthErrorCode of `error`, or None for any foreign error shape."""
    if isinstance(error, AuthError):
        return error.type
    return None


def error_code_or_unknown(error: Optional[BaseException]) -> AuthErrorCode:
    return get_auth_error_code(error) or AuthErrorCode.UNKNOWN_ERROR
