"""HTTP transport towards a platform backend (OAuth2 resource owner grant + signed requests)."""

import logging
import time
from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional

import requests

from use_cases.auth_errors import AuthErrorCode, create_auth_error
from use_cases.session_models import Credentials, Platform

log = logging.getLogger(__name__)

TOKEN_PATH = "auth/oauth2/token"

# error_description values sent by the token endpoint with `invalid_grant`
_GRANT_ERRORS = {
    "auth.error.authenticationFailed": AuthErrorCode.BAD_CREDENTIALS,
    "auth.error.blockedUser": AuthErrorCode.ACCOUNT_BLOCKED,
    "auth.error.blockedProfileType": AuthErrorCode.PLATFORM_BLOCKED_TYPE,
    "auth.error.ban": AuthErrorCode.SECURITY_TOO_MANY_TRIES,
}


@dataclass
class OAuth2Token:
    access_token: str
    token_type: str = "Bearer"
    refresh_token: Optional[str] = None
    expires_at: float = 0.0
    scope: str = ""

    @classmethod
    def from_response(cls, data: Mapping[str, Any], previous: Optional["OAuth2Token"] = None) -> "OAuth2Token":
        return cls(
            access_token=data["access_token"],
            token_type=data.get("token_type", "Bearer"),
            refresh_token=data.get("refresh_token") or (previous.refresh_token if previous else None),
            expires_at=time.time() + float(data.get("expires_in", 3600)),
            scope=data.get("scope", ""),
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OAuth2Token":
        return cls(
            access_token=data["access_token"],
            token_type=data.get("token_type", "Bearer"),
            refresh_token=data.get("refresh_token"),
            expires_at=float(data.get("expires_at", 0.0)),
            scope=data.get("scope", ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def is_expired(self, now: Optional[float] = None) -> bool:
        return (now if now is not None else time.time()) >= self.expires_at


def _is_json(response) -> bool:
    return "application/json" in (response.headers.get("content-type") or "")


def _oauth_error(response, grant_type: str):
    try:
        body = response.json()
    except ValueError:
        body = {}
    error = body.get("error") if isinstance(body, dict) else None
    description = body.get("error_description") if isinstance(body, dict) else None

    if response.status_code == 503:
        code = AuthErrorCode.PLATFORM_UNAVAILABLE
    elif response.status_code == 429 or error == "quota_overflow":
        code = AuthErrorCode.PLATFORM_TOO_LOAD
    elif error == "invalid_client":
        code = AuthErrorCode.INVALID_CLIENT
    elif error == "invalid_grant":
        if grant_type == "refresh_token":
            code = AuthErrorCode.REFRESH_INVALID
        else:
            code = _GRANT_ERRORS.get(description, AuthErrorCode.BAD_CREDENTIALS)
    elif error:
        code = AuthErrorCode.INVALID_GRANT
    else:
        code = AuthErrorCode.NOT_OK
    return create_auth_error(code, description or error or f"HTTP {response.status_code}")


class BackendClient:
    """Holds the current token and the cookie jar for one platform connection."""

    def __init__(
        self,
        client_id: str,
        client_secret: str = "",
        scope: str = "",
        timeout: float = 10.0,
        http: Optional[requests.Session] = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.scope = scope
        self.timeout = timeout
        self.http = http or requests.Session()
        self.token: Optional[OAuth2Token] = None

    def _request(self, method: str, url: str, **kwargs):
        try:
            return self.http.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            log.error(f"Network error on {method} {url}: {e}")
            raise create_auth_error(AuthErrorCode.NETWORK_ERROR, str(e)) from e

    def _grant(self, platform: Platform, body: Dict[str, str]) -> OAuth2Token:
        body = {"client_id": self.client_id, "client_secret": self.client_secret, "scope": self.scope, **body}
        resp = self._request(
            "POST",
            platform.endpoint(TOKEN_PATH),
            data=body,
            headers={"Accept": "application/json, application/x-www-form-urlencoded"},
            auth=(self.client_id, self.client_secret),
        )
        if not 200 <= resp.status_code < 300:
            raise _oauth_error(resp, body["grant_type"])
        try:
            data = resp.json()
            token = OAuth2Token.from_response(data, previous=self.token)
        except (ValueError, KeyError, TypeError) as e:
            raise create_auth_error(AuthErrorCode.BAD_RESPONSE, "invalid oauth response") from e
        self.token = token
        return token

    def get_token(self, platform: Platform, credentials: Credentials) -> OAuth2Token:
        log.info(f"Requesting new token on {platform.name}")
        return self._grant(
            platform,
            {"grant_type": "password", "username": credentials.username, "password": credentials.password},
        )

    def refresh_token(self, platform: Platform) -> OAuth2Token:
        if not self.token or not self.token.refresh_token:
            raise create_auth_error(AuthErrorCode.REFRESH_INVALID, "no refresh token")
        log.info(f"Refreshing token on {platform.name}")
        return self._grant(platform, {"grant_type": "refresh_token", "refresh_token": self.token.refresh_token})

    def load_token(self, data: Mapping[str, Any]) -> OAuth2Token:
        try:
            self.token = OAuth2Token.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise create_auth_error(AuthErrorCode.NOT_AUTHENTICATED, "stored token is unusable") from e
        return self.token

    def forget_token(self):
        self.token = None

    def clear_cookies(self):
        self.http.cookies.clear()

    def _sign(self, headers: Dict[str, str]) -> Dict[str, str]:
        if not self.token or not self.token.access_token:
            raise create_auth_error(AuthErrorCode.NOT_AUTHENTICATED, "unable to sign without access token")
        if self.token.token_type.lower() != "bearer":
            raise create_auth_error(AuthErrorCode.NOT_AUTHENTICATED, "only Bearer token type supported")
        return {**headers, "Authorization": f"Bearer {self.token.access_token}"}

    def fetch_json(
        self,
        platform: Platform,
        path: str,
        method: str = "GET",
        params: Optional[Dict[str, Any]] = None,
        signed: bool = True,
    ) -> Any:
        headers = {"Accept": "application/json"}
        if signed:
            headers = self._sign(headers)
        resp = self._request(method, platform.endpoint(path), params=params, headers=headers)
        if not 200 <= resp.status_code < 300:
            raise create_auth_error(AuthErrorCode.NOT_OK, f"{path}: HTTP {resp.status_code}")
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise create_auth_error(AuthErrorCode.BAD_RESPONSE, f"{path}: invalid JSON") from e

    def submit_form(self, platform: Platform, path: str, fields: Mapping[str, Any], signed: bool = False):
        """POST `fields` as multipart/form-data and return the raw response."""
        headers = {"Accept": "application/json"}
        if signed:
            headers = self._sign(headers)
        files = {key: (None, "" if value is None else str(value)) for key, value in fields.items()}
        return self._request("POST", platform.endpoint(path), files=files, headers=headers)

    def post_json(self, platform: Platform, path: str, payload: Mapping[str, Any]):
        return self._request(
            "POST",
            platform.endpoint(path),
            json=dict(payload),
            headers={"Accept": "application/json"},
        )


def response_error_field(response) -> Optional[Any]:
    """Truthy `error` field of a JSON response body, if any."""
    if not _is_json(response):
        return None
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("error") or None
    return None
