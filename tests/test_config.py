import json

import pytest

from minty.local_ipfs.config import DEFAULT_API_URL, StoreSettings, load_settings
from minty.local_ipfs.errors import ConfigError


@pytest.fixture(autouse=True)
def default_config(tmp_path, monkeypatch):
    path = tmp_path / "etc" / "config.json"
    monkeypatch.setattr("minty.local_ipfs.config.DEFAULT_CONFIG_PATH", path)
    return path


def test_defaults():
    settings = load_settings(environ={})
    assert settings == StoreSettings()
    assert settings.api_url == DEFAULT_API_URL


def test_default_config_file_is_read_when_present(default_config):
    default_config.parent.mkdir()
    default_config.write_text(json.dumps({"api_url": "http://saved-node:5001"}))

    assert load_settings(environ={}).api_url == "http://saved-node:5001"


def test_explicit_config_wins_over_default_file(default_config, tmp_path):
    default_config.parent.mkdir()
    default_config.write_text(json.dumps({"api_url": "http://saved-node:5001"}))
    explicit = tmp_path / "other.json"
    explicit.write_text(json.dumps({"api_url": "http://explicit:5001"}))

    assert load_settings(explicit, environ={}).api_url == "http://explicit:5001"


def test_file_then_env_precedence(tmp_path):
    path = tmp_path / "minty.json"
    path.write_text(json.dumps({"api_url": "http://file:5001/", "timeout": 10, "extra": 1}))

    settings = load_settings(path, environ={"MINTY_IPFS_TIMEOUT": "3"})

    assert settings.api_url == "http://file:5001"
    assert settings.timeout == 3.0


def test_config_path_from_environment(tmp_path):
    path = tmp_path / "minty.json"
    path.write_text(json.dumps({"gateway_url": "http://gw/ipfs"}))
    settings = load_settings(environ={"MINTY_CONFIG": str(path)})
    assert settings.gateway_url == "http://gw/ipfs"


def test_override_ignores_none():
    settings = StoreSettings().override(api_url="http://cli:5001/", timeout=None)
    assert settings.api_url == "http://cli:5001"
    assert settings.timeout == StoreSettings().timeout


@pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
def test_bad_config_file(tmp_path, content):
    path = tmp_path / "minty.json"
    path.write_text(content)
    with pytest.raises(ConfigError):
        load_settings(path, environ={})


def test_missing_explicit_config_file(tmp_path):
    with pytest.raises(ConfigError):
        load_settings(tmp_path / "absent.json", environ={})
    with pytest.raises(ConfigError):
        load_settings(environ={"MINTY_CONFIG": str(tmp_path / "absent.json")})


@pytest.mark.parametrize("value", ["abc", "0", "-5"])
def test_bad_timeout(value):
    with pytest.raises(ConfigError):
        load_settings(environ={"MINTY_IPFS_TIMEOUT": value})
