"""Account activation and forgotten id/password requests."""

import logging
from typing import Any, Dict, Optional

import auth
from infrastructure.http.backend_client import response_error_field
from infrastructure.repositories.sqlite_tracking_repository import TrackingAction, TrackingCategory
from use_cases import auth_flow
from use_cases.auth_errors import ActivationError, create_activation_error
from use_cases.auth_state import AuthStateStore
from use_cases.session_models import (
    ActivationPayload,
    Credentials,
    ForgotMode,
    ForgotPayload,
    LoginResult,
    Platform,
)

log = logging.getLogger(__name__)

ACTIVATION_PATH = "auth/activation"
ACTIVATION_SUBMIT_ERROR = "Account activation failed. Please try again."


def _error_message(error: Any) -> str:
    if isinstance(error, dict):
        return error.get("message") or ACTIVATION_SUBMIT_ERROR
    if isinstance(error, str):
        return error
    return ACTIVATION_SUBMIT_ERROR


def activate(
    platform: Platform,
    model: ActivationPayload,
    remember_me: bool = False,
    *,
    store: Optional[AuthStateStore] = None,
) -> LoginResult:
    try:
        theme = platform.web_theme
        if not theme:
            log.debug(f"No web theme configured for {platform.name}, activating without theme")

        payload = {
            "acceptCGU": "true",
            "activationCode": model.activation_code,
            "callBack": "",
            "login": model.login,
            "password": model.password,
            "confirmPassword": model.confirm_password,
            "mail": model.mail or "",
            "phone": model.phone or "",
            "theme": theme or "",
        }
        res = auth.submit_form(platform, ACTIVATION_PATH, payload)

        if not 200 <= res.status_code < 300:
            raise create_activation_error(ACTIVATION_SUBMIT_ERROR, context={"status": res.status_code})
        error = response_error_field(res)
        if error:
            raise create_activation_error(_error_message(error), context={"status": res.status_code})

        # The activation response may set a cookie that conflicts with the new token
        auth.clear_cookies()

        redirect = auth_flow.login(
            platform,
            Credentials(username=model.login, password=model.password),
            remember_me,
            store=store,
        )
        auth.track_event(TrackingCategory.AUTH, TrackingAction.ACTIVATE, None, {"platform": platform.name})
        log.info(f"Account {model.login} activated on {platform.name}")
        return redirect
    except ActivationError:
        raise
    except Exception as e:
        raise create_activation_error(ACTIVATION_SUBMIT_ERROR, cause=e) from e


def forgot(platform: Platform, payload: ForgotPayload, mode: ForgotMode) -> Dict[str, Any]:
    """Ask the platform to mail a forgotten login (`id`) or a reset link (`password`)."""
    if mode == "id":
        body = {
            "mail": payload.login,
            "firstName": payload.first_name,
            "structureId": payload.structure_id,
            "service": "mail",
        }
        path = "auth/forgot-id"
    else:
        body = {"login": payload.login, "service": "mail"}
        path = "auth/forgot-password"

    res = auth.post_json(platform, path, body)
    try:
        res_json = res.json()
    except ValueError:
        res_json = {}
    if not isinstance(res_json, dict):
        res_json = {}
    ok = 200 <= res.status_code < 300
    if not ok:
        log.info(f"Forgot-{mode} request refused on {platform.name}: HTTP {res.status_code}")
    return {**res_json, "ok": ok}
