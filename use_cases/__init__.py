"""Application layer contracts for orchestrating authentication flows."""

from .activation_flow import activate, forgot
from .auth_errors import (
    ActivationError,
    ActivationErrorCode,
    AuthError,
    AuthErrorCode,
    AuthFlowError,
    ChangePasswordError,
    ChangePasswordErrorCode,
)
from .auth_flow import AuthFlowResult, AuthFlowStatus, ensure_authenticated_session, login, logout
from .auth_state import AuthState, AuthStateStore, get_default_store, should_display_error
from .bootstrap import StartupResult, StartupStatus, run_startup
from .navigation import AuthRoute, NavAction, NavigationState, Route, get_auth_navigation_state, project
from .partial_session import resolve
from .password_flow import change_password
from .session_models import (
    ActivationPayload,
    AuthContext,
    ChangePasswordPayload,
    Credentials,
    ForgotPayload,
    LoginRedirect,
    LoginResult,
    PartialSessionScenario,
    PendingRedirection,
    Platform,
    Session,
    UserInfo,
)

__all__ = [
    "ActivationError",
    "ActivationErrorCode",
    "ActivationPayload",
    "AuthContext",
    "AuthError",
    "AuthErrorCode",
    "AuthFlowError",
    "AuthFlowResult",
    "AuthFlowStatus",
    "AuthRoute",
    "AuthState",
    "AuthStateStore",
    "ChangePasswordError",
    "ChangePasswordErrorCode",
    "ChangePasswordPayload",
    "Credentials",
    "ForgotPayload",
    "LoginRedirect",
    "LoginResult",
    "NavAction",
    "NavigationState",
    "PartialSessionScenario",
    "PendingRedirection",
    "Platform",
    "Route",
    "Session",
    "StartupResult",
    "StartupStatus",
    "UserInfo",
    "activate",
    "change_password",
    "ensure_authenticated_session",
    "forgot",
    "get_auth_navigation_state",
    "get_default_store",
    "login",
    "logout",
    "project",
    "resolve",
    "run_startup",
    "should_display_error",
]
