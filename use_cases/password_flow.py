"""Password change, forced or voluntary."""

import logging
import re
from typing import Optional

import auth
from infrastructure.http.backend_client import response_error_field
from infrastructure.repositories.sqlite_tracking_repository import TrackingAction, TrackingCategory
from use_cases.auth_errors import ChangePasswordError, create_change_password_error
from use_cases.auth_state import AuthStateStore, get_default_store
from use_cases.session_models import AuthContext, ChangePasswordPayload, Platform

log = logging.getLogger(__name__)

RESET_PATH = "auth/reset"
CHANGE_PASSWORD_SUBMIT_ERROR = "Password change failed. Please try again."
CHANGE_PASSWORD_FIELDS_ERROR = "Password change refused. Check the entered fields."
CHANGE_PASSWORD_REGEX_ERROR = "The new password does not meet the password policy."


def _violates_policy(regex: Optional[str], password: str) -> bool:
    if not regex:
        return False
    try:
        return re.search(regex, password) is None
    except re.error:
        log.warning(f"Unusable password policy regex {regex!r}")
        return False


def change_password(
    platform: Platform,
    payload: ChangePasswordPayload,
    force_change: bool = False,
    *,
    context: Optional[AuthContext] = None,
    store: Optional[AuthStateStore] = None,
) -> None:
    if context is None:
        context = (store or get_default_store()).get().auth_context
    password_regex = context.password_regex if context else None

    try:
        fields = {
            "oldPassword": payload.old_password,
            "password": payload.new_password,
            "confirmPassword": payload.confirm,
            "login": payload.login,
            "callback": "",
        }
        if force_change:
            fields["forceChange"] = "force"
        res = auth.submit_form(platform, RESET_PATH, fields)

        ok = 200 <= res.status_code < 300
        error = response_error_field(res) if ok else None
        if not ok or error:
            if _violates_policy(password_regex, payload.new_password):
                raise create_change_password_error(CHANGE_PASSWORD_REGEX_ERROR)
            message = CHANGE_PASSWORD_FIELDS_ERROR if error else CHANGE_PASSWORD_SUBMIT_ERROR
            raise create_change_password_error(message, context={"status": res.status_code})

        auth.track_event(
            TrackingCategory.PROFILE,
            TrackingAction.CHANGE_PASSWORD,
            None,
            {"platform": platform.name, "force_change": force_change},
        )
        log.info(f"Password changed for {payload.login} on {platform.name}")
    except Exception as e:
        auth.track_event(
            TrackingCategory.PROFILE,
            TrackingAction.CHANGE_PASSWORD_ERROR,
            None,
            {"platform": platform.name, "force_change": force_change},
        )
        if isinstance(e, ChangePasswordError):
            raise
        raise create_change_password_error(CHANGE_PASSWORD_SUBMIT_ERROR, cause=e) from e
