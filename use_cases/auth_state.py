"""Single-writer container for the authentication state.

Only the orchestrators in `use_cases` call the transition methods; screens
read with `get()` or `subscribe()` and never mutate the state themselves.
"""

import logging
from dataclasses import dataclass, replace as dc_replace
from typing import Callable, List, Optional

from use_cases.auth_errors import AuthErrorCode
from use_cases.session_models import AuthContext, LoginResult, Session

log = logging.getLogger(__name__)

Listener = Callable[["AuthState"], None]


@dataclass(frozen=True)
class AuthState:
    session: Optional[Session] = None
    error: Optional[AuthErrorCode] = None
    # Render timestamp of the login screen the error belongs to
    error_timestamp: Optional[float] = None
    logged: bool = False
    auto_login_result: LoginResult = None
    auth_context: Optional[AuthContext] = None


INITIAL_STATE = AuthState()


class AuthStateStore:
    def __init__(self, initial: AuthState = INITIAL_STATE):
        self._state = initial
        self._listeners: List[Listener] = []
        # Session cache of this store only; each browser tab owns one store
        self._active_session: Optional[Session] = None

    def get(self) -> AuthState:
        return self._state

    def replace(self, state: AuthState) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as e:
                log.error(f"Auth state listener failed: {e}", exc_info=True)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def active_session(self) -> Optional[Session]:
        return self._active_session

    def cache_active_session(self, session: Optional[Session]) -> None:
        self._active_session = session

    # --- transitions ---

    def session_create(self, session: Session) -> None:
        self.cache_active_session(session)
        self.replace(AuthState(session=session, logged=True))

    def session_partial(self, session: Session, context: Optional[AuthContext] = None) -> None:
        self.cache_active_session(session)
        self.replace(AuthState(session=session, logged=False, auth_context=context))

    def session_refresh(self, session: Session) -> None:
        self.cache_active_session(session)
        self.replace(AuthState(session=session, logged=True, auth_context=self._state.auth_context))

    def session_error(self, error: AuthErrorCode, error_timestamp: Optional[float] = None) -> None:
        self.cache_active_session(None)
        self.replace(AuthState(error=error, error_timestamp=error_timestamp))

    def session_end(self) -> None:
        # Logout keeps the last error so the login screen can still show it
        self.cache_active_session(None)
        self.replace(AuthState(error=self._state.error, error_timestamp=self._state.error_timestamp))

    def redirect_auto_login(self, result: LoginResult) -> None:
        self.replace(dc_replace(self._state, auto_login_result=result))


def should_display_error(state: AuthState, render_timestamp: Optional[float]) -> bool:
    """An error is shown only by the screen render that produced it."""
    if state.error is None:
        return False
    return state.error_timestamp == render_timestamp


_default_store: Optional[AuthStateStore] = None


def get_default_store() -> AuthStateStore:
    global _default_store
    if _default_store is None:
        _default_store = AuthStateStore()
    return _default_store


def get_active_session(store: Optional[AuthStateStore] = None) -> Optional[Session]:
    return (store or get_default_store()).active_session


def assert_session(store: Optional[AuthStateStore] = None) -> Session:
    """Return the cached session or raise; for utility code running after login."""
    session = get_active_session(store)
    if session is None:
        raise RuntimeError("[assert_session] no session")
    return session
