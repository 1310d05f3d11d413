import base64

import pytest

from onshape_stl_mcp_server.config import DEFAULT_API_URL, OnshapeSettings, load_settings
from onshape_stl_mcp_server.errors import ConfigurationError


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("ACCESS_KEY", "SECRET_KEY", "API_URL", "TIMEOUT", "LOG_LEVEL", "JSON_LOGS"):
        monkeypatch.delenv(f"ONSHAPE_{name}", raising=False)
    return monkeypatch


def test_missing_keys_are_fatal(clean_env):
    with pytest.raises(ConfigurationError, match="ONSHAPE_ACCESS_KEY"):
        load_settings(_env_file=None)


def test_blank_secret_is_fatal(clean_env):
    clean_env.setenv("ONSHAPE_ACCESS_KEY", "abc")
    clean_env.setenv("ONSHAPE_SECRET_KEY", "   ")

    with pytest.raises(ConfigurationError):
        load_settings(_env_file=None)


def test_settings_read_from_environment(clean_env):
    clean_env.setenv("ONSHAPE_ACCESS_KEY", "abc")
    clean_env.setenv("ONSHAPE_SECRET_KEY", "xyz")
    clean_env.setenv("ONSHAPE_TIMEOUT", "12.5")

    settings = load_settings(_env_file=None)

    assert settings.access_key == "abc"
    assert settings.secret_key == "xyz"
    assert settings.api_url == DEFAULT_API_URL
    assert settings.timeout == 12.5
    assert settings.auth_header == "Basic " + base64.b64encode(b"abc:xyz").decode("ascii")


def test_settings_read_from_dotenv(clean_env, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "ONSHAPE_ACCESS_KEY=from-file\nONSHAPE_SECRET_KEY=secret\nONSHAPE_API_URL=https://acme.onshape.com/api/v11\n",
        encoding="utf-8",
    )

    settings = load_settings(_env_file=env_file)

    assert settings.access_key == "from-file"
    assert settings.web_url == "https://acme.onshape.com"


def test_settings_are_immutable(clean_env):
    settings = OnshapeSettings(access_key="a", secret_key="b", _env_file=None)

    with pytest.raises(Exception):
        settings.access_key = "other"


def test_web_url_defaults_for_odd_api_url(clean_env):
    settings = OnshapeSettings(access_key="a", secret_key="b", api_url="not a url", _env_file=None)
    assert settings.web_url == "https://cad.onshape.com"


def test_empty_api_url_falls_back_to_default(clean_env):
    clean_env.setenv("ONSHAPE_ACCESS_KEY", "abc")
    clean_env.setenv("ONSHAPE_SECRET_KEY", "xyz")
    clean_env.setenv("ONSHAPE_API_URL", "")

    settings = load_settings(_env_file=None)

    assert settings.api_url == DEFAULT_API_URL
    assert settings.web_url == "https://cad.onshape.com"


def test_empty_key_in_dotenv_counts_as_missing(clean_env, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("ONSHAPE_ACCESS_KEY=\nONSHAPE_SECRET_KEY=secret\nONSHAPE_API_URL=\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_settings(_env_file=env_file)
