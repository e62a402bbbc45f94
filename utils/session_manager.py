import time

import streamlit as st
import streamlit.components.v1 as components

import auth
from infrastructure import config
from use_cases import auth_flow
from use_cases.auth_state import AuthStateStore

"""
SESSION STATE CONTRACT

Streamlit keeps one st.session_state per browser tab. The auth core itself is
UI-agnostic: this module only stores its collaborators there.

Keys of st.session_state:

auth_store: AuthStateStore
    single writer of the authentication state for this browser tab
    default: AuthStateStore()
    owner: use_cases (written only through orchestrators)

platforms: list[Platform]
    static platform catalogue
    default: loaded from PLATFORMS_FILE
    owner: infrastructure/config

selected_platform: str | None
    name of the platform picked on the platform screen
    default: None
    owner: ui

pending_redirect: LoginRedirect | None
    one-shot redirection produced by the last login attempt
    default: None
    owner: ui

login_render_ts: float | None
    timestamp of the login screen render that submitted the form
    default: None
    owner: ui

startup_done: bool
    whether automatic session restore already ran
    default: False
    owner: system

backend_client: BackendClient
    OAuth2 client of this tab, holding its token and cookie jar
    default: created on first use by auth.get_backend_client()
    owner: auth

push_provider: PushTokenProvider
    device token registration bound to backend_client
    default: created on first use by auth.get_push_provider()
    owner: auth

device_key: str
    token slot of this browser, read from the session_gate_device cookie
    default: cookie value or a fresh random key
    owner: auth

device_cookie_set: bool
    whether the device cookie was written for this tab
    default: False
    owner: ui
"""


def init_session_state():
    if "auth_store" not in st.session_state:
        st.session_state.auth_store = AuthStateStore()
    if "platforms" not in st.session_state:
        st.session_state.platforms = config.load_platforms(config.load_settings().platforms_file)
    if "selected_platform" not in st.session_state:
        st.session_state.selected_platform = None
    if "pending_redirect" not in st.session_state:
        st.session_state.pending_redirect = None
    if "login_render_ts" not in st.session_state:
        st.session_state.login_render_ts = None
    if "startup_done" not in st.session_state:
        st.session_state.startup_done = False
    if "device_cookie_set" not in st.session_state:
        st.session_state.device_cookie_set = False


def get_auth_store() -> AuthStateStore:
    init_session_state()
    return st.session_state.auth_store


def new_render_timestamp() -> float:
    ts = time.time()
    st.session_state.login_render_ts = ts
    return ts


def logout():
    store = get_auth_store()
    session = store.get().session
    if session is not None:
        auth_flow.logout(session.platform, store=store)
    st.session_state.pending_redirect = None
    st.rerun()


def persist_device_cookie():
    """Keep the device key in a browser cookie so a reload finds the same token slot."""
    init_session_state()
    if st.session_state.device_cookie_set:
        return
    device_key = auth.get_device_key()
    components.html(
        f"""
        <script>
            var cookieStr = "{auth.DEVICE_COOKIE}=" + encodeURIComponent("{device_key}") + "; path=/; max-age=2592000; SameSite=Lax";
            document.cookie = cookieStr;
            try {{
                window.parent.document.cookie = cookieStr;
            }} catch (e) {{}}
        </script>
        """,
        height=0,
    )
    st.session_state.device_cookie_set = True
