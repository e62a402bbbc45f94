"""Static configuration: runtime settings and the platform catalogue."""

import logging
import os
from dataclasses import dataclass
from typing import List, Optional

import streamlit as st
import toml

from use_cases.session_models import Platform

log = logging.getLogger(__name__)


def get_secret(key: str) -> Optional[str]:
    try:
        return st.secrets.get(key)
    except FileNotFoundError:
        return None


def _setting(key: str, default: Optional[str] = None) -> Optional[str]:
    return get_secret(key) or os.getenv(key) or default


@dataclass(frozen=True)
class Settings:
    auth_db: str = "auth.db"
    platforms_file: str = "platforms.toml"
    oauth_client_id: str = "app-mobile"
    oauth_client_secret: str = ""
    oauth_scope: str = "userinfo userbook directory timeline"
    http_timeout: float = 10.0
    push_device_token: Optional[str] = None


def load_settings() -> Settings:
    defaults = Settings()
    timeout_raw = _setting("HTTP_TIMEOUT")
    try:
        http_timeout = float(timeout_raw) if timeout_raw else defaults.http_timeout
    except ValueError:
        log.warning(f"Invalid HTTP_TIMEOUT {timeout_raw!r}, using {defaults.http_timeout}")
        http_timeout = defaults.http_timeout
    return Settings(
        auth_db=_setting("AUTH_DB", defaults.auth_db),
        platforms_file=_setting("PLATFORMS_FILE", defaults.platforms_file),
        oauth_client_id=_setting("OAUTH_CLIENT_ID", defaults.oauth_client_id),
        oauth_client_secret=_setting("OAUTH_CLIENT_SECRET", defaults.oauth_client_secret),
        oauth_scope=_setting("OAUTH_SCOPE", defaults.oauth_scope),
        http_timeout=http_timeout,
        push_device_token=_setting("PUSH_DEVICE_TOKEN"),
    )


def load_platforms(path: str) -> List[Platform]:
    """
    Read `[[platforms]]` tables from a TOML file.
    A missing file yields an empty catalogue; malformed entries are skipped.
    """
    if not os.path.exists(path):
        log.warning(f"Platforms file {path} not found")
        return []

    data = toml.load(path)
    platforms = []
    for entry in data.get("platforms", []):
        name = entry.get("name")
        url = entry.get("url")
        if not name or not url:
            log.warning(f"Skipping platform entry without name/url: {entry}")
            continue
        platforms.append(
            Platform(
                name=name,
                url=url,
                wayf=bool(entry.get("wayf", False)),
                web_theme=entry.get("web_theme"),
                legal_urls=dict(entry.get("legal_urls", {})),
                display_name=entry.get("display_name"),
            )
        )
    return platforms


def find_platform(platforms: List[Platform], name: Optional[str]) -> Optional[Platform]:
    if not name:
        return None
    for platform in platforms:
        if platform.name == name:
            return platform
    return None
