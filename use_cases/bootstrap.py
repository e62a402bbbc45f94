"""Startup orchestration: local storage init and automatic session restore."""

from dataclasses import dataclass
from typing import List, Literal, Optional, Tuple

import logging

import auth
from infrastructure import config
from use_cases import auth_flow
from use_cases.auth_state import AuthStateStore, get_default_store
from use_cases.session_models import Platform

log = logging.getLogger(__name__)

StartupStatus = Literal["CONTINUE", "STOP"]


@dataclass(frozen=True)
class StartupResult:
    """Result contract for startup/bootstrap orchestration."""

    status: StartupStatus
    planned_steps: Tuple[str, ...]
    platform: Optional[Platform] = None


def run_startup(
    store: Optional[AuthStateStore] = None,
    platforms: Optional[List[Platform]] = None,
) -> StartupResult:
    """Prepare storage, then try to restore the last session without credentials."""
    store = store or get_default_store()
    executed_steps = []

    auth.init_auth_db()
    executed_steps.append("init_auth_db")

    if platforms is None:
        platforms = config.load_platforms(config.load_settings().platforms_file)
        executed_steps.append("load_platforms")
    if not platforms:
        log.error("No platform configured, nothing to log into")
        return StartupResult(status="STOP", planned_steps=tuple(executed_steps))

    saved_name = auth.load_saved_platform_name()
    platform = config.find_platform(platforms, saved_name)
    if platform is None and len(platforms) == 1:
        platform = platforms[0]
    executed_steps.append("resolve_platform")

    if platform is None:
        return StartupResult(status="CONTINUE", planned_steps=tuple(executed_steps))

    # Restore errors are already recorded in the auth state by the orchestrator
    try:
        result = auth_flow.login(platform, store=store)
        executed_steps.append("auto_login")
    except Exception as e:
        log.warning(f"Automatic login failed: {e}")
        result = None
        executed_steps.append("auto_login_failed")

    store.redirect_auto_login(result)
    executed_steps.append("redirect_auto_login")
    return StartupResult(status="CONTINUE", planned_steps=tuple(executed_steps), platform=platform)
