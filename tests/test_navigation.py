from use_cases import navigation
from use_cases.navigation import AuthRoute, NavigationState, Route
from use_cases.session_models import (
    AuthContext,
    Credentials,
    LoginRedirect,
    PartialSessionScenario,
    PendingRedirection,
    Platform,
    UserInfo,
    format_session,
)

DEMO = Platform(name="demo", url="https://demo.example.org")
SSO = Platform(name="federated", url="https://sso.example.org", wayf=True)
CREDS = Credentials(username="alice", password="s3cret")


def _names(state: NavigationState):
    return [route.name for route in state.routes]


def test_login_route_depends_on_wayf() -> None:
    assert navigation.get_login_route_name(DEMO) == AuthRoute.LOGIN_CREDENTIALS
    assert navigation.get_login_route_name(SSO) == AuthRoute.LOGIN_WAYF
    assert navigation.get_login_route_name(None) == AuthRoute.LOGIN_CREDENTIALS


def test_requirements_reset_the_stack() -> None:
    session = format_session(DEMO, UserInfo(id="u1", login="alice", email="a@example.org", mobile="0600"))

    terms = navigation.get_nav_action_for_requirement(PartialSessionScenario.MUST_REVALIDATE_TERMS, DEMO)
    assert terms.kind == "reset"
    assert terms.routes == (Route(AuthRoute.REVALIDATE_TERMS, {"platform": DEMO}),)

    pwd = navigation.get_nav_action_for_requirement(PartialSessionScenario.MUST_CHANGE_PASSWORD, DEMO)
    assert pwd.routes[0].name == AuthRoute.CHANGE_PASSWORD
    assert pwd.routes[0].params == {"platform": DEMO, "force_change": True}

    mobile = navigation.get_nav_action_for_requirement(PartialSessionScenario.MUST_VERIFY_MOBILE, DEMO, session)
    assert mobile.routes[0].params["default_mobile"] == "0600"

    email = navigation.get_nav_action_for_requirement(PartialSessionScenario.MUST_VERIFY_EMAIL, DEMO, session)
    assert email.routes[0].name == AuthRoute.CHANGE_EMAIL
    assert email.routes[0].params["default_email"] == "a@example.org"


def test_redirects_push_on_the_stack() -> None:
    context = AuthContext(cgu=True)
    activate = navigation.get_nav_action_for_redirect(PendingRedirection.ACTIVATE, DEMO, CREDS, context, True)
    assert activate.kind == "push"
    assert activate.routes[0].name == AuthRoute.ACTIVATION
    assert activate.routes[0].params == {
        "platform": DEMO,
        "context": context,
        "credentials": CREDS,
        "remember_me": True,
    }

    renew = navigation.get_nav_action_for_redirect(PendingRedirection.RENEW_PASSWORD, DEMO, CREDS)
    assert renew.routes[0].name == AuthRoute.CHANGE_PASSWORD
    assert renew.routes[0].params["use_reset_code"] is True


def test_project_handles_every_pending_shape() -> None:
    redirect = LoginRedirect(action=PendingRedirection.ACTIVATE, context=AuthContext(), credentials=CREDS)
    assert navigation.project(redirect, DEMO).routes[0].name == AuthRoute.ACTIVATION

    partial = LoginRedirect(action=PartialSessionScenario.MUST_REVALIDATE_TERMS, context=AuthContext())
    assert navigation.project(partial, DEMO).kind == "reset"

    assert navigation.project(PendingRedirection.RENEW_PASSWORD, DEMO).kind == "push"
    assert navigation.project(PartialSessionScenario.MUST_CHANGE_PASSWORD, DEMO).kind == "reset"
    assert navigation.project(None, DEMO) is None


def test_apply_nav_action_replays_on_stale_stack() -> None:
    stack = (Route(AuthRoute.PLATFORMS), Route(AuthRoute.LOGIN_CREDENTIALS))
    pushed = navigation.apply_nav_action(stack, navigation.get_nav_action_for_redirect(PendingRedirection.ACTIVATE, DEMO))
    assert _names(pushed) == [AuthRoute.PLATFORMS, AuthRoute.LOGIN_CREDENTIALS, AuthRoute.ACTIVATION]
    assert pushed.stale is True

    reset = navigation.apply_nav_action(
        pushed,
        navigation.get_nav_action_for_requirement(PartialSessionScenario.MUST_REVALIDATE_TERMS, DEMO),
    )
    assert _names(reset) == [AuthRoute.REVALIDATE_TERMS]

    unchanged = navigation.apply_nav_action(stack, None)
    assert unchanged.routes == stack
    assert unchanged.stale is False


def test_cold_start_single_platform_goes_straight_to_login() -> None:
    state = navigation.get_auth_navigation_state([DEMO])
    assert _names(state) == [AuthRoute.LOGIN_CREDENTIALS]
    assert state.current.params == {"platform": DEMO, "login": None}


def test_cold_start_multiple_platforms_starts_with_picker() -> None:
    state = navigation.get_auth_navigation_state([DEMO, SSO], platform_name="federated", login="bob")
    assert _names(state) == [AuthRoute.PLATFORMS, AuthRoute.LOGIN_WAYF]
    assert state.current.params["login"] == "bob"


def test_cold_start_unknown_platform_falls_back_to_picker() -> None:
    state = navigation.get_auth_navigation_state([DEMO, SSO], platform_name="gone")
    assert _names(state) == [AuthRoute.PLATFORMS]


def test_cold_start_onboarding_wins() -> None:
    state = navigation.get_auth_navigation_state([DEMO, SSO], show_onboarding=True, platform_name="demo")
    assert _names(state) == [AuthRoute.ONBOARDING]


def test_cold_start_with_pending_activation() -> None:
    redirect = LoginRedirect(action=PendingRedirection.ACTIVATE, context=AuthContext(), credentials=CREDS)
    state = navigation.get_auth_navigation_state([DEMO], pending=redirect)
    assert _names(state) == [AuthRoute.LOGIN_CREDENTIALS, AuthRoute.ACTIVATION]
    assert state.routes[0].params["login"] == "alice"
    assert state.stale is True


def test_cold_start_with_requirement_resets_stack() -> None:
    state = navigation.get_auth_navigation_state(
        [DEMO, SSO],
        platform_name="demo",
        requirement=PartialSessionScenario.MUST_CHANGE_PASSWORD,
    )
    assert _names(state) == [AuthRoute.CHANGE_PASSWORD]


def test_terms_route_carries_the_platform_terms_link() -> None:
    platform = Platform(name="demo", url="https://demo.example.org", legal_urls={"cgu": "https://demo.example.org/cgu"})

    terms = navigation.get_nav_action_for_requirement(PartialSessionScenario.MUST_REVALIDATE_TERMS, platform)

    assert terms.routes[0].params["platform"].legal_urls["cgu"] == "https://demo.example.org/cgu"
