import importlib
import sys
from unittest.mock import patch

import streamlit as st  # noqa: TID251

from use_cases.auth_state import AuthStateStore
from use_cases.session_models import Platform, UserInfo, format_session


def test_imports():
    """Ensure core modules can be imported without crashing."""
    platform = Platform(name="demo", url="https://demo.example.org")
    store = AuthStateStore()
    store.session_create(format_session(platform, UserInfo(id="u1", login="smoke", display_name="Smoke Test")))

    # Session state for app.py top-level execution
    st.session_state.clear()
    st.session_state.auth_store = store
    st.session_state.platforms = [platform]
    st.session_state.startup_done = True

    import auth  # noqa: F401
    import views.login_view  # noqa: F401
    import utils.session_manager  # noqa: F401

    if "app" in sys.modules:
        del sys.modules["app"]

    with patch("infrastructure.observability.setup_observability"):
        importlib.import_module("app")
