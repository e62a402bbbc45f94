from unittest.mock import patch

from infrastructure import config


def test_load_platforms_reads_toml(tmp_path):
    path = tmp_path / "platforms.toml"
    path.write_text(
        """
[[platforms]]
name = "demo"
url = "https://demo.example.org"
web_theme = "neo"

[[platforms]]
name = "federated"
url = "https://sso.example.org"
wayf = true
display_name = "Federated SSO"

[[platforms]]
name = "broken"
""",
        encoding="utf-8",
    )

    platforms = config.load_platforms(str(path))

    assert [p.name for p in platforms] == ["demo", "federated"]
    assert platforms[0].web_theme == "neo"
    assert platforms[1].wayf is True
    assert platforms[1].display_name == "Federated SSO"


def test_missing_platforms_file_is_empty_catalogue(tmp_path):
    assert config.load_platforms(str(tmp_path / "nope.toml")) == []


def test_find_platform(tmp_path):
    path = tmp_path / "platforms.toml"
    path.write_text('[[platforms]]\nname = "demo"\nurl = "https://demo.example.org"\n', encoding="utf-8")
    platforms = config.load_platforms(str(path))

    assert config.find_platform(platforms, "demo") is platforms[0]
    assert config.find_platform(platforms, "other") is None
    assert config.find_platform(platforms, None) is None


@patch("infrastructure.config.get_secret", return_value=None)
def test_load_settings_from_environment(_mock_secret, monkeypatch):
    monkeypatch.setenv("AUTH_DB", "/tmp/custom.db")
    monkeypatch.setenv("OAUTH_CLIENT_ID", "web-client")
    monkeypatch.setenv("HTTP_TIMEOUT", "2.5")
    monkeypatch.delenv("PUSH_DEVICE_TOKEN", raising=False)

    settings = config.load_settings()

    assert settings.auth_db == "/tmp/custom.db"
    assert settings.oauth_client_id == "web-client"
    assert settings.http_timeout == 2.5
    assert settings.push_device_token is None


@patch("infrastructure.config.get_secret", return_value=None)
def test_invalid_timeout_falls_back_to_default(_mock_secret, monkeypatch):
    monkeypatch.setenv("HTTP_TIMEOUT", "soon")
    assert config.load_settings().http_timeout == config.Settings().http_timeout


@patch("infrastructure.config.get_secret", side_effect=lambda key: "from-secrets" if key == "OAUTH_SCOPE" else None)
def test_secrets_take_precedence_over_environment(_mock_secret, monkeypatch):
    monkeypatch.setenv("OAUTH_SCOPE", "from-env")
    assert config.load_settings().oauth_scope == "from-secrets"
