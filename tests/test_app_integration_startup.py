import importlib
import sys
from unittest.mock import patch

import pytest
import streamlit as st

from use_cases.auth_flow import AuthFlowResult
from use_cases.bootstrap import StartupResult
from use_cases.session_models import Platform

PLATFORM = Platform(name="demo", url="https://demo.example.org")


class _Stopped(Exception):
    pass


def _run_app():
    if "app" in sys.modules:
        del sys.modules["app"]
    importlib.import_module("app")


@patch("streamlit.stop", side_effect=_Stopped)
@patch("views.login_view.render_auth_screen")
@patch("use_cases.auth_flow.ensure_authenticated_session")
@patch("use_cases.bootstrap.run_startup")
@patch("infrastructure.observability.setup_observability")
def test_app_startup_headless_shows_auth_screen(
    _mock_observability,
    mock_run_startup,
    mock_ensure_auth,
    mock_render_auth,
    mock_stop,
):
    st.session_state.clear()
    st.session_state.platforms = [PLATFORM]
    mock_run_startup.return_value = StartupResult(status="CONTINUE", planned_steps=("init_auth_db",))
    mock_ensure_auth.return_value = AuthFlowResult(status="STOP", reason="auth_required")

    with pytest.raises(_Stopped):
        _run_app()

    mock_run_startup.assert_called_once()
    assert st.session_state.startup_done is True
    mock_render_auth.assert_called_once()
    mock_stop.assert_called_once()


@patch("streamlit.stop", side_effect=_Stopped)
@patch("views.login_view.render_auth_screen")
@patch("use_cases.bootstrap.run_startup")
@patch("infrastructure.observability.setup_observability")
def test_app_stops_when_no_platform_is_configured(
    _mock_observability,
    mock_run_startup,
    mock_render_auth,
    _mock_stop,
):
    st.session_state.clear()
    st.session_state.platforms = []
    mock_run_startup.return_value = StartupResult(status="STOP", planned_steps=("init_auth_db",))

    with pytest.raises(_Stopped):
        _run_app()

    mock_render_auth.assert_not_called()


@patch("use_cases.bootstrap.run_startup")
@patch("infrastructure.observability.setup_observability")
def test_startup_runs_once_per_browser_session(_mock_observability, mock_run_startup):
    st.session_state.clear()
    st.session_state.platforms = [PLATFORM]
    st.session_state.startup_done = True

    with patch("use_cases.auth_flow.ensure_authenticated_session") as mock_ensure_auth, patch(
        "views.login_view.render_auth_screen"
    ), patch("streamlit.stop", side_effect=_Stopped):
        mock_ensure_auth.return_value = AuthFlowResult(status="STOP", reason="auth_required")
        with pytest.raises(_Stopped):
            _run_app()

    mock_run_startup.assert_not_called()
