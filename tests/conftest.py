from unittest.mock import MagicMock

import pytest


def make_response(status_code=200, body=None, content_type="application/json"):
    """requests.Response stand-in carrying a JSON body (or raising on .json())."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.headers = {"content-type": content_type} if content_type else {}
    if body is None:
        resp.content = b""
        resp.json.side_effect = ValueError("no JSON")
    else:
        resp.content = b"{...}"
        resp.json.return_value = body
    return resp


@pytest.fixture
def response_factory():
    return make_response


def _clear_tab_services():
    import auth
    import streamlit as st

    for key in (auth.BACKEND_CLIENT_KEY, auth.PUSH_PROVIDER_KEY, auth.DEVICE_KEY):
        st.session_state.pop(key, None)


@pytest.fixture(autouse=True)
def isolated_auth_db(tmp_path, monkeypatch):
    import auth

    monkeypatch.setattr(auth, "AUTH_DB", str(tmp_path / "auth.db"))
    _clear_tab_services()
    yield
    _clear_tab_services()
