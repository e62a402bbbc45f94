"""Authentication flow orchestration (application layer).

`login` turns credentials, or a previously stored token, into an installed
Session and tells the caller whether a blocking step (partial session or
account activation) must happen before the default post-login navigation.
"""

import logging
from dataclasses import dataclass
from typing import Literal, Optional

import auth
from infrastructure.repositories.sqlite_tracking_repository import TrackingAction, TrackingCategory
from use_cases import partial_session
from use_cases.auth_errors import AuthErrorCode, error_code_or_unknown, get_auth_error_code
from use_cases.auth_state import AuthStateStore, get_default_store
from use_cases.session_models import (
    Credentials,
    LoginRedirect,
    LoginResult,
    PendingRedirection,
    Platform,
    format_session,
)

log = logging.getLogger(__name__)

AuthFlowStatus = Literal["CONTINUE", "STOP"]


@dataclass(frozen=True)
class AuthFlowResult:
    """Result contract for the auth gate in front of the app."""

    status: AuthFlowStatus
    reason: str
    user_id: Optional[str] = None


def _register_device_token(platform: Platform) -> None:
    try:
        auth.register_device_token(platform)
    except Exception as e:
        log.warning(f"Device token registration failed, login continues: {e}")


def _clear_stale_cookies() -> None:
    # The backend may send a Set-Cookie that conflicts with the bearer token.
    auth.clear_cookies()


def login(
    platform: Platform,
    credentials: Optional[Credentials] = None,
    remember_me: bool = False,
    error_timestamp: Optional[float] = None,
    *,
    store: Optional[AuthStateStore] = None,
) -> LoginResult:
    store = store or get_default_store()
    try:
        # 1. Establish connection
        if credentials:
            auth.create_session(platform, credentials)
        else:
            stored_token = auth.restore_session_available()
            if not stored_token:
                log.info("No stored token, nothing to restore")
                return None
            auth.restore_session(platform, stored_token)

        # 2. Fetch identity
        user_info = auth.fetch_user_info(platform)
        auth.ensure_user_validity(user_info)

        # 3. Classify
        scenario = partial_session.resolve(user_info)

        # 4. Enrich, only for fully usable accounts
        public_info = {} if scenario else auth.fetch_user_public_info(user_info, platform)

        # 5. Push notifications
        _register_device_token(platform)

        # 6. Persist
        auth.save_platform(platform)
        if not credentials or remember_me or platform.wayf:
            auth.save_session()

        if credentials:
            auth.track_event(TrackingCategory.AUTH, TrackingAction.LOGIN, scenario, {"platform": platform.name})
        else:
            auth.track_event(TrackingCategory.AUTH, TrackingAction.RESTORE, scenario, {"platform": platform.name})

        # 7. Side-channel cleanup, on every branch below
        _clear_stale_cookies()

        # 8. Install the session
        session = format_session(platform, user_info, public_info, token_present=True)
        if scenario:
            context = auth.get_auth_context(platform)
            store.session_partial(session, context)
            log.info(f"Partial session on {platform.name}: {scenario.value}")
            return LoginRedirect(action=scenario, context=context, credentials=credentials, remember_me=remember_me)

        store.session_create(session)
        log.info(f"Session created on {platform.name} for user {user_info.id}")
        return None

    except Exception as e:
        code = get_auth_error_code(e)

        # A bad login/password pair may be an account activation code
        if credentials and code == AuthErrorCode.BAD_CREDENTIALS:
            try:
                auth.ensure_credentials_match_activation_code(platform, credentials)
                context = auth.get_auth_context(platform)
                log.info(f"Credentials match an activation code on {platform.name}")
                return LoginRedirect(
                    action=PendingRedirection.ACTIVATE,
                    context=context,
                    credentials=credentials,
                    remember_me=remember_me,
                )
            except Exception as err:
                store.session_error(error_code_or_unknown(err), error_timestamp)
                raise err from e

        action = TrackingAction.LOGIN_ERROR if credentials else TrackingAction.RESTORE_ERROR
        auth.track_event(TrackingCategory.AUTH, action, code, {"platform": platform.name})
        log.warning(f"Login failed on {platform.name}: {code.value if code else type(e).__name__}")
        store.session_error(error_code_or_unknown(e), error_timestamp)
        raise


def logout(platform: Platform, *, store: Optional[AuthStateStore] = None) -> None:
    store = store or get_default_store()
    try:
        auth.unregister_device_token(platform)
    except Exception as e:
        log.warning(f"Device token removal failed during logout: {e}")
    auth.destroy_session()
    _clear_stale_cookies()
    store.session_end()
    auth.track_event(TrackingCategory.AUTH, TrackingAction.LOGOUT, None, {"platform": platform.name})


def mark_login_error_timestamp(
    code: AuthErrorCode,
    timestamp: float,
    *,
    store: Optional[AuthStateStore] = None,
) -> None:
    """Bind the current error to the login screen render that will display it."""
    (store or get_default_store()).session_error(code, timestamp)


def ensure_authenticated_session(store: Optional[AuthStateStore] = None) -> AuthFlowResult:
    """Run the auth gate and return a control-flow status."""
    state = (store or get_default_store()).get()
    if state.session is None:
        return AuthFlowResult(status="STOP", reason="auth_required")
    if not state.logged:
        return AuthFlowResult(status="STOP", reason="partial_session", user_id=state.session.user.id)
    return AuthFlowResult(status="CONTINUE", reason="authenticated", user_id=state.session.user.id)
