"""Projection of the auth state onto a declarative navigation stack.

Nothing here performs I/O. The UI router receives either a `NavAction` to
apply on its current stack, or a full `NavigationState` rebuilt from
persisted information after a cold start.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Literal, Mapping, Optional, Sequence, Tuple, Union

from use_cases.session_models import (
    AuthContext,
    Credentials,
    LoginRedirect,
    PartialSessionScenario,
    PendingRedirection,
    Platform,
    Session,
)

NavActionKind = Literal["push", "reset"]


class AuthRoute(str, Enum):
    ONBOARDING = "auth/onboarding"
    PLATFORMS = "auth/platforms"
    LOGIN_CREDENTIALS = "auth/login/credentials"
    LOGIN_WAYF = "auth/login/wayf"
    ACTIVATION = "auth/activation"
    FORGOT = "auth/forgot"
    REVALIDATE_TERMS = "auth/revalidateTerms"
    CHANGE_PASSWORD = "auth/changePassword"
    CHANGE_EMAIL = "auth/changeEmail"
    CHANGE_MOBILE = "auth/changeMobile"


@dataclass(frozen=True)
class Route:
    name: AuthRoute
    params: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class NavAction:
    kind: NavActionKind
    routes: Tuple[Route, ...]


@dataclass(frozen=True)
class NavigationState:
    routes: Tuple[Route, ...]
    # True when the stack was computed, not navigated to; the router must rehydrate it
    stale: bool = False

    @property
    def current(self) -> Optional[Route]:
        return self.routes[-1] if self.routes else None


Pending = Union[LoginRedirect, PartialSessionScenario, PendingRedirection, None]


def get_login_route_name(platform: Optional[Platform]) -> AuthRoute:
    return AuthRoute.LOGIN_WAYF if platform is not None and platform.wayf else AuthRoute.LOGIN_CREDENTIALS


def _reset(name: AuthRoute, params: Optional[Dict[str, Any]] = None) -> NavAction:
    return NavAction(kind="reset", routes=(Route(name, params or {}),))


def _push(name: AuthRoute, params: Dict[str, Any]) -> NavAction:
    return NavAction(kind="push", routes=(Route(name, params),))


def get_nav_action_for_requirement(
    requirement: PartialSessionScenario,
    platform: Optional[Platform],
    session: Optional[Session] = None,
) -> Optional[NavAction]:
    # Requirements reset the stack so the user cannot go back past them
    if requirement == PartialSessionScenario.MUST_REVALIDATE_TERMS:
        return _reset(AuthRoute.REVALIDATE_TERMS, {"platform": platform})
    if requirement == PartialSessionScenario.MUST_CHANGE_PASSWORD:
        return _reset(AuthRoute.CHANGE_PASSWORD, {"platform": platform, "force_change": True})
    if requirement == PartialSessionScenario.MUST_VERIFY_MOBILE:
        return _reset(
            AuthRoute.CHANGE_MOBILE,
            {"platform": platform, "default_mobile": session.user.mobile if session else None},
        )
    if requirement == PartialSessionScenario.MUST_VERIFY_EMAIL:
        return _reset(
            AuthRoute.CHANGE_EMAIL,
            {"platform": platform, "default_email": session.user.email if session else None},
        )
    return None


def get_nav_action_for_redirect(
    redirect: PendingRedirection,
    platform: Platform,
    credentials: Optional[Credentials] = None,
    context: Optional[AuthContext] = None,
    remember_me: bool = False,
) -> Optional[NavAction]:
    if redirect == PendingRedirection.ACTIVATE:
        return _push(
            AuthRoute.ACTIVATION,
            {"platform": platform, "context": context, "credentials": credentials, "remember_me": remember_me},
        )
    if redirect == PendingRedirection.RENEW_PASSWORD:
        return _push(
            AuthRoute.CHANGE_PASSWORD,
            {"platform": platform, "credentials": credentials, "use_reset_code": True},
        )
    return None


def project(pending: Pending, platform: Platform, *, session: Optional[Session] = None) -> Optional[NavAction]:
    """Map a login outcome to the navigation action the router must apply, if any."""
    if isinstance(pending, LoginRedirect):
        if isinstance(pending.action, PendingRedirection):
            return get_nav_action_for_redirect(
                pending.action, platform, pending.credentials, pending.context, pending.remember_me
            )
        return get_nav_action_for_requirement(pending.action, platform, session)
    if isinstance(pending, PendingRedirection):
        return get_nav_action_for_redirect(pending, platform)
    if isinstance(pending, PartialSessionScenario):
        return get_nav_action_for_requirement(pending, platform, session)
    return None


def apply_nav_action(state: Union[NavigationState, Sequence[Route]], action: Optional[NavAction]) -> NavigationState:
    """
    Replay `action` on a possibly stale stack. Only route names are relied on:
    pushing appends, resetting replaces the whole stack.
    """
    routes = tuple(state.routes if isinstance(state, NavigationState) else state)
    if action is None:
        return NavigationState(routes=routes)
    if action.kind == "reset":
        return NavigationState(routes=action.routes, stale=True)
    return NavigationState(routes=routes + action.routes, stale=True)


def get_auth_navigation_state(
    platforms: Sequence[Platform],
    *,
    pending: Pending = None,
    requirement: Optional[PartialSessionScenario] = None,
    show_onboarding: bool = False,
    login: Optional[str] = None,
    platform_name: Optional[str] = None,
    session: Optional[Session] = None,
) -> NavigationState:
    """Rebuild the auth stack from persisted information (cold start)."""
    if show_onboarding:
        return NavigationState(routes=(Route(AuthRoute.ONBOARDING),))

    routes = []
    multiple_platforms = len(platforms) > 1
    if multiple_platforms:
        routes.append(Route(AuthRoute.PLATFORMS))

    if isinstance(pending, LoginRedirect) and pending.credentials and not login:
        login = pending.credentials.username

    platform: Optional[Platform]
    if multiple_platforms:
        # Unknown names silently fall back to the platform picker
        platform = next((p for p in platforms if p.name == platform_name), None)
    else:
        platform = platforms[0] if platforms else None

    if platform is not None or not routes:
        routes.append(Route(get_login_route_name(platform), {"platform": platform, "login": login}))

    action: Optional[NavAction] = None
    if requirement is not None:
        action = get_nav_action_for_requirement(requirement, platform, session)
    elif platform is not None and pending is not None:
        action = project(pending, platform, session=session)

    if action is None:
        return NavigationState(routes=tuple(routes))
    return apply_nav_action(routes, action)
