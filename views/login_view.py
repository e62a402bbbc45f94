import streamlit as st

from use_cases import activation_flow, auth_flow, password_flow
from use_cases.auth_errors import AuthFlowError
from use_cases.auth_state import should_display_error
from use_cases.navigation import AuthRoute, Route, get_auth_navigation_state
from use_cases.session_models import (
    ActivationPayload,
    ChangePasswordPayload,
    Credentials,
    ForgotPayload,
    Platform,
)
from utils import session_manager

ERROR_MESSAGES = {
    "BAD_CREDENTIALS": "Wrong login or password.",
    "NOT_PREMIUM": "This account has no access to the application.",
    "PRE_DELETED": "This account is being deleted.",
    "ACCOUNT_BLOCKED": "This account is blocked.",
    "SECURITY_TOO_MANY_TRIES": "Too many attempts. Try again later.",
    "PLATFORM_UNAVAILABLE": "The platform is under maintenance.",
    "NETWORK_ERROR": "The platform cannot be reached.",
}
DEFAULT_ERROR_MESSAGE = "Login failed. Please try again."


def _store_redirect(result):
    st.session_state.pending_redirect = result
    st.rerun()


def _render_platforms(platforms):
    st.title("Choose your platform")
    for platform in platforms:
        if st.button(platform.display_name or platform.name, key=f"pf_{platform.name}"):
            st.session_state.selected_platform = platform.name
            st.rerun()


def _render_login(route: Route):
    platform: Platform = route.params.get("platform")
    store = session_manager.get_auth_store()
    st.title(f"Log in to {platform.display_name or platform.name}")
    if platform.wayf:
        st.info("This platform uses federated login. Open it in a browser to connect.")
        return

    with st.form("login_form", clear_on_submit=False):
        login = st.text_input("Login", value=route.params.get("login") or "")
        password = st.text_input("Password", type="password")
        remember_me = st.checkbox("Stay connected", value=True)
        submitted = st.form_submit_button("Log in")
    if submitted:
        render_ts = session_manager.new_render_timestamp()
        try:
            result = auth_flow.login(platform, Credentials(login.strip(), password), remember_me, render_ts, store=store)
            _store_redirect(result)
        except AuthFlowError:
            # recorded in the auth state, displayed below
            pass
        state = store.get()
        if should_display_error(state, render_ts):
            st.error(ERROR_MESSAGES.get(state.error.value, DEFAULT_ERROR_MESSAGE))

    with st.expander("Forgot your password?"):
        forgot_login = st.text_input("Login", key="forgot_login")
        if st.button("Send reset link"):
            response = activation_flow.forgot(platform, ForgotPayload(login=forgot_login), "password")
            if response["ok"]:
                st.success("A reset link was sent by mail.")
            else:
                st.error(response.get("error") or "Request refused.")


def _render_activation(route: Route):
    params = route.params
    platform: Platform = params["platform"]
    credentials: Credentials = params.get("credentials")
    context = params.get("context")
    st.title("Activate your account")
    if context and context.password_regex_i18n:
        st.caption(next(iter(context.password_regex_i18n.values())))
    with st.form("activation_form"):
        login = st.text_input("Login", value=credentials.username if credentials else "")
        password = st.text_input("New password", type="password")
        confirm = st.text_input("Confirm password", type="password")
        mail = st.text_input("Email", value="")
        phone = st.text_input("Phone", value="")
        submitted = st.form_submit_button("Activate")
    if submitted:
        model = ActivationPayload(
            activation_code=credentials.password if credentials else "",
            login=login.strip(),
            password=password,
            confirm_password=confirm,
            mail=mail or None,
            phone=phone or None,
        )
        try:
            result = activation_flow.activate(
                platform, model, params.get("remember_me", False), store=session_manager.get_auth_store()
            )
            _store_redirect(result)
        except AuthFlowError as e:
            st.error(e.message)


def _render_change_password(route: Route):
    params = route.params
    platform: Platform = params["platform"]
    store = session_manager.get_auth_store()
    session = store.get().session
    credentials: Credentials = params.get("credentials")
    force_change = bool(params.get("force_change"))
    st.title("Change your password")
    with st.form("change_password_form"):
        old_password = st.text_input(
            "Reset code" if params.get("use_reset_code") else "Current password",
            type="password",
            value=credentials.password if credentials else "",
        )
        new_password = st.text_input("New password", type="password")
        confirm = st.text_input("Confirm new password", type="password")
        submitted = st.form_submit_button("Change password")
    if submitted:
        login = session.user.login if session else (credentials.username if credentials else "")
        payload = ChangePasswordPayload(old_password, new_password, confirm, login)
        try:
            password_flow.change_password(platform, payload, force_change, store=store)
            st.success("Password changed.")
            result = auth_flow.login(platform, Credentials(login, new_password), True, store=store)
            _store_redirect(result)
        except AuthFlowError as e:
            st.error(e.message)


def _render_blocking_step(route: Route):
    platform = route.params.get("platform")
    if route.name == AuthRoute.REVALIDATE_TERMS:
        st.title("New terms of use")
        terms_url = platform.legal_urls.get("cgu") if platform else None
        if terms_url:
            st.markdown(f"[Read the terms of use]({terms_url})")
        st.info("Accept the new terms on the web platform, then log in again.")
    elif route.name == AuthRoute.CHANGE_MOBILE:
        st.title("Verify your mobile phone")
        st.text_input("Mobile", value=route.params.get("default_mobile") or "", disabled=True)
        st.info("Verify this number on the web platform, then log in again.")
    else:
        st.title("Verify your email")
        st.text_input("Email", value=route.params.get("default_email") or "", disabled=True)
        st.info("Verify this address on the web platform, then log in again.")
    if st.button("Back to login"):
        session_manager.logout()


def render_auth_screen():
    session_manager.init_session_state()
    if not st.session_state.platforms:
        st.error("No platform is configured.")
        return
    store = session_manager.get_auth_store()
    state = store.get()
    pending = st.session_state.pending_redirect or state.auto_login_result
    platform_name = st.session_state.selected_platform
    if state.session is not None:
        platform_name = state.session.platform.name

    nav_state = get_auth_navigation_state(
        st.session_state.platforms,
        pending=pending,
        platform_name=platform_name,
        session=state.session,
    )
    route = nav_state.current
    if route.name == AuthRoute.PLATFORMS:
        _render_platforms(st.session_state.platforms)
    elif route.name in (AuthRoute.LOGIN_CREDENTIALS, AuthRoute.LOGIN_WAYF):
        _render_login(route)
    elif route.name == AuthRoute.ACTIVATION:
        _render_activation(route)
    elif route.name == AuthRoute.CHANGE_PASSWORD:
        _render_change_password(route)
    else:
        _render_blocking_step(route)
