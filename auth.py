from infrastructure.config import load_settings
from infrastructure.http.backend_client import BackendClient
from infrastructure.messaging.push_provider import PushTokenProvider
from infrastructure.repositories.sqlite_token_repository import SQLiteTokenRepository
from infrastructure.repositories.sqlite_tracking_repository import SQLiteTrackingRepository
from use_cases.auth_errors import AuthErrorCode, create_auth_error
from use_cases.session_models import AuthContext, Credentials, Platform, UserInfo
import logging
import secrets
from typing import Any, Dict, Optional

import streamlit as st

log = logging.getLogger(__name__)

AUTH_DB = load_settings().auth_db

# Per browser tab, kept in st.session_state next to auth_store
BACKEND_CLIENT_KEY = "backend_client"
PUSH_PROVIDER_KEY = "push_provider"
DEVICE_KEY = "device_key"
DEVICE_COOKIE = "session_gate_device"

_token_repo = None
_tracking_repo = None


def get_token_repo() -> SQLiteTokenRepository:
    global _token_repo
    if _token_repo is None or _token_repo.db_path != AUTH_DB:
        _token_repo = SQLiteTokenRepository(AUTH_DB)
    return _token_repo


def get_tracking_repo() -> SQLiteTrackingRepository:
    global _tracking_repo
    if _tracking_repo is None or _tracking_repo.db_path != AUTH_DB:
        _tracking_repo = SQLiteTrackingRepository(AUTH_DB)
    return _tracking_repo


def get_backend_client() -> BackendClient:
    """Backend client of the current tab; holds that tab's token and cookies."""
    if BACKEND_CLIENT_KEY not in st.session_state:
        settings = load_settings()
        st.session_state[BACKEND_CLIENT_KEY] = BackendClient(
            settings.oauth_client_id,
            settings.oauth_client_secret,
            settings.oauth_scope,
            timeout=settings.http_timeout,
        )
    return st.session_state[BACKEND_CLIENT_KEY]


def get_push_provider() -> PushTokenProvider:
    if PUSH_PROVIDER_KEY not in st.session_state:
        st.session_state[PUSH_PROVIDER_KEY] = PushTokenProvider(
            get_backend_client(), load_settings().push_device_token
        )
    return st.session_state[PUSH_PROVIDER_KEY]


def get_device_key() -> str:
    """Token slot of this browser: the device cookie if set, else a fresh key."""
    if DEVICE_KEY not in st.session_state:
        device_key = None
        try:
            device_key = st.context.cookies.get(DEVICE_COOKIE)
        except Exception:
            # Outside a running app there is no request context
            pass
        st.session_state[DEVICE_KEY] = device_key or secrets.token_urlsafe(24)
    return st.session_state[DEVICE_KEY]


def init_auth_db():
    get_token_repo().init_db()
    get_tracking_repo().init_db()


def track_event(category, action, label=None, metadata: Optional[Dict[str, Any]] = None):
    get_tracking_repo().track_event(category, action, label=label, metadata=metadata)


# --- Connection ---

def create_session(platform: Platform, credentials: Credentials):
    return get_backend_client().get_token(platform, credentials)


def restore_session_available() -> Optional[Dict[str, Any]]:
    return get_token_repo().load(slot=get_device_key())


def restore_session(platform: Platform, stored_token: Dict[str, Any]):
    client = get_backend_client()
    token = client.load_token(stored_token)
    if token.is_expired():
        token = client.refresh_token(platform)
        get_token_repo().save(token.to_dict(), slot=get_device_key())
    return token


def save_platform(platform: Platform):
    get_token_repo().save_platform(platform.name, slot=get_device_key())


def load_saved_platform_name() -> Optional[str]:
    return get_token_repo().load_platform(slot=get_device_key())


def save_session():
    token = get_backend_client().token
    if token is None:
        raise create_auth_error(AuthErrorCode.NOT_AUTHENTICATED, "no token to save")
    get_token_repo().save(token.to_dict(), slot=get_device_key())


def destroy_session():
    get_backend_client().forget_token()
    get_token_repo().clear(slot=get_device_key())


def clear_cookies():
    get_backend_client().clear_cookies()


# --- User info ---

def fetch_user_info(platform: Platform) -> UserInfo:
    payload = get_backend_client().fetch_json(platform, "auth/oauth2/userinfo")
    if not isinstance(payload, dict):
        raise create_auth_error(AuthErrorCode.BAD_RESPONSE, "userinfo payload is not an object")
    return UserInfo.from_payload(payload)


def ensure_user_validity(user_info: UserInfo):
    if not user_info.id or not user_info.login:
        raise create_auth_error(AuthErrorCode.UNKNOWN_ERROR, "userinfo without id or login")
    if user_info.delete_pending:
        raise create_auth_error(AuthErrorCode.PRE_DELETED, "account is pending deletion")
    if user_info.has_app is False:
        raise create_auth_error(AuthErrorCode.NOT_PREMIUM, "account has no access to the app")


def fetch_user_public_info(user_info: UserInfo, platform: Platform) -> Dict[str, Any]:
    data = get_backend_client().fetch_json(
        platform,
        "userbook/api/person",
        params={"id": user_info.id, "type": user_info.profile_type},
    )
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise create_auth_error(AuthErrorCode.BAD_RESPONSE, "person payload is not an object")
    results = data.get("result") or []
    if not results:
        return {}
    if not isinstance(results, list) or not isinstance(results[0], dict):
        raise create_auth_error(AuthErrorCode.BAD_RESPONSE, "person result is not a list of objects")
    return dict(results[0])


def get_auth_context(platform: Platform) -> AuthContext:
    payload = get_backend_client().fetch_json(platform, "auth/context", signed=False)
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise create_auth_error(AuthErrorCode.BAD_RESPONSE, "auth context payload is not an object")
    return AuthContext.from_payload(payload)


def ensure_credentials_match_activation_code(platform: Platform, credentials: Credentials):
    """Raise BAD_CREDENTIALS unless login/password is a pending activation code."""
    resp = get_backend_client().submit_form(
        platform,
        "auth/activation/match",
        {"login": credentials.username, "password": credentials.password},
    )
    body: Dict[str, Any] = {}
    if 200 <= resp.status_code < 300:
        try:
            body = resp.json() or {}
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            raise create_auth_error(AuthErrorCode.BAD_RESPONSE, "activation match payload is not an object")
    if not body.get("match"):
        raise create_auth_error(AuthErrorCode.BAD_CREDENTIALS, "credentials do not match an activation code")


# --- Device token ---

def register_device_token(platform: Platform) -> bool:
    ok, message = get_push_provider().register(platform)
    log.debug(f"Device token registration on {platform.name}: {message}")
    return ok


def unregister_device_token(platform: Platform) -> bool:
    ok, message = get_push_provider().unregister(platform)
    log.debug(f"Device token removal on {platform.name}: {message}")
    return ok


# --- Forms ---

def submit_form(platform: Platform, path: str, fields: Dict[str, Any]):
    return get_backend_client().submit_form(platform, path, fields)


def post_json(platform: Platform, path: str, payload: Dict[str, Any]):
    return get_backend_client().post_json(platform, path, payload)
