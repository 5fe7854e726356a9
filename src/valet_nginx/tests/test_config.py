"""
Tests for configuration management
"""
from pathlib import Path

import pwd

import pytest
from unittest.mock import patch

from valet_nginx.lib.config import (
    Config,
    ConfigError,
    MissingConfiguration,
    ValetEnvironment,
    DEFAULT_HOME_PATH,
    listen_address
)

def test_defaults():
    """Test default settings"""
    config = Config()
    assert config.tld == "test"
    assert config.loopback == "127.0.0.1"
    assert config.proxy_type == "nginx"

def test_save_and_load(tmp_path):
    """Test settings survive a save"""
    path = tmp_path / "valet" / "config.yaml"
    Config(tld="localhost", loopback="10.200.10.1").save(path)

    config = Config.load(path)
    assert config.tld == "localhost"
    assert config.loopback == "10.200.10.1"

def test_load_missing_file(tmp_path):
    """Test loading before init"""
    with pytest.raises(ConfigError, match="Configuration not found"):
        Config.load(tmp_path / "config.yaml")

def test_load_not_a_mapping(tmp_path):
    """Test loading a file that is not a mapping"""
    path = tmp_path / "config.yaml"
    path.write_text("- test\n- 127.0.0.1\n")

    with pytest.raises(ConfigError, match="not a mapping"):
        Config.load(path)

def test_load_ignores_unknown_keys(tmp_path):
    """Test settings written by other Valet components are tolerated"""
    path = tmp_path / "config.yaml"
    path.write_text("tld: test\nloopback: 127.0.0.1\npaths: []\n")

    assert Config.load(path).tld == "test"

def test_environment_overrides(tmp_path, monkeypatch):
    """Test environment variables win over the file"""
    path = tmp_path / "config.yaml"
    Config().save(path)
    monkeypatch.setenv("VALET_TLD", "dev")
    monkeypatch.setenv("VALET_LOOPBACK", "10.0.0.5")

    config = Config.load(path)
    assert config.tld == "dev"
    assert config.loopback == "10.0.0.5"

@pytest.mark.parametrize("tld,loopback", [
    ("", "127.0.0.1"),
    ("test", ""),
    ("   ", "127.0.0.1"),
    ("test", None),
    ("test", "not-an-ip"),
])
def test_require_network_settings_rejects(tld, loopback):
    """Test incomplete settings are refused"""
    with pytest.raises(MissingConfiguration):
        Config(tld=tld, loopback=loopback).require_network_settings()

def test_require_network_settings_accepts_ipv6():
    """Test an IPv6 loopback"""
    Config(loopback="::1").require_network_settings()

def test_detect_environment(monkeypatch, tmp_path):
    """Test environment detection under sudo"""
    monkeypatch.setenv("SUDO_USER", "alice")
    monkeypatch.setenv("VALET_HOME_PATH", str(tmp_path / "valet"))
    monkeypatch.setenv("VALET_SERVER_PATH", str(tmp_path / "server.php"))

    env = ValetEnvironment.detect()

    assert env.user == "alice"
    assert env.home_path == tmp_path / "valet"
    assert env.config_file == tmp_path / "valet" / "config.yaml"
    assert env.nginx_path == tmp_path / "valet" / "Nginx"
    assert env.default_loopback == "127.0.0.1"

def test_detect_environment_defaults():
    """Test environment detection without overrides"""
    env = ValetEnvironment.detect()
    assert env.home_path == DEFAULT_HOME_PATH

def test_tokens(env):
    """Test the template token set"""
    assert env.tokens() == {
        "VALET_USER": env.user,
        "VALET_HOME_PATH": str(env.home_path),
        "VALET_SERVER_PATH": str(env.server_path),
        "VALET_STATIC_PREFIX": "static-prefix",
    }
    assert isinstance(env.home_path, Path)

def sudo_user_entry(home):
    return pwd.struct_passwd(("alice", "x", 1000, 1000, "", home, "/bin/sh"))

def test_detect_environment_resolves_sudo_home(monkeypatch):
    """Test that sudo does not move the Valet home into root's home"""
    monkeypatch.setenv("SUDO_USER", "alice")
    monkeypatch.setenv("HOME", "/root")

    with patch("valet_nginx.lib.config.pwd.getpwnam", return_value=sudo_user_entry("/home/alice")) as getpwnam:
        env = ValetEnvironment.detect()

    getpwnam.assert_called_once_with("alice")
    assert env.user == "alice"
    assert env.home_path == Path("/home/alice/.config/valet")
    assert env.server_path == Path("/home/alice/.composer/vendor/laravel/valet/server.php")

def test_detect_environment_unknown_sudo_user(monkeypatch):
    """Test a SUDO_USER without a passwd entry"""
    monkeypatch.setenv("SUDO_USER", "ghost")

    with patch("valet_nginx.lib.config.pwd.getpwnam", side_effect=KeyError("ghost")):
        with pytest.raises(ConfigError, match="Unknown user in SUDO_USER: ghost"):
            ValetEnvironment.detect()

def test_load_without_environment_overrides(tmp_path, monkeypatch):
    """Test reading the stored settings only"""
    path = tmp_path / "config.yaml"
    Config().save(path)
    monkeypatch.setenv("VALET_TLD", "dev")
    monkeypatch.setenv("VALET_LOOPBACK", "10.0.0.5")

    config = Config.load(path, apply_env=False)
    assert config.tld == "test"
    assert config.loopback == "127.0.0.1"

@pytest.mark.parametrize("address,expected", [
    ("127.0.0.1", "127.0.0.1"),
    ("10.200.10.1", "10.200.10.1"),
    ("::1", "[::1]"),
    ("fd00::10", "[fd00::10]"),
])
def test_listen_address(address, expected):
    """Test addresses as written in nginx listen directives"""
    assert listen_address(address) == expected
