"""
Tests for the command-line interface
"""
from pathlib import Path

import pytest
from unittest.mock import Mock, patch
from typer.testing import CliRunner

from valet_nginx.cli import app
from valet_nginx.lib.config import Config
from valet_nginx.lib.cmd.common import load_proxy
from valet_nginx.lib.installer import Installer
from valet_nginx.lib.proxy.base import ConfigurationInvalid
from valet_nginx.lib.proxy.nginx import NginxProxy
from valet_nginx.lib.site import SiteError

runner = CliRunner()

@pytest.fixture
def home(tmp_path, monkeypatch):
    """Valet home with saved settings"""
    home = tmp_path / "valet"
    monkeypatch.setenv("VALET_HOME_PATH", str(home))
    Config(tld="test").save(home / "config.yaml")
    return home

@pytest.fixture
def proxy():
    proxy = Mock()
    proxy.nginx_conf = Path("/etc/nginx/nginx.conf")
    proxy.env.nginx_path = Path("/home/alice/.config/valet/Nginx")
    return proxy

def test_sites(proxy):
    """Test listing configured sites"""
    proxy.configured_sites.return_value = ["foo.test", "bar.test"]
    proxy.site.secured.return_value = ["foo.test"]

    with patch("valet_nginx.lib.cmd.manage.load_proxy", return_value=proxy):
        result = runner.invoke(app, ["sites"])

    assert result.exit_code == 0
    assert "foo.test" in result.output
    assert "bar.test" in result.output

def test_sites_empty(proxy):
    """Test listing when no site has a server block"""
    proxy.configured_sites.return_value = []
    proxy.site.secured.return_value = []

    with patch("valet_nginx.lib.cmd.manage.load_proxy", return_value=proxy):
        result = runner.invoke(app, ["sites"])

    assert result.exit_code == 0
    assert "No sites" in result.output

def test_restart_invalid_configuration(proxy):
    """Test restart is refused with a broken configuration"""
    proxy.restart.side_effect = ConfigurationInvalid(1, "unexpected end of file")

    with patch("valet_nginx.lib.cmd.proxy.load_proxy", return_value=proxy):
        result = runner.invoke(app, ["restart"])

    assert result.exit_code == 1
    assert "Nginx was not restarted" in result.output

def test_lint(proxy):
    """Test a passing configuration check"""
    with patch("valet_nginx.lib.cmd.proxy.load_proxy", return_value=proxy):
        result = runner.invoke(app, ["lint"])

    assert result.exit_code == 0
    proxy.lint.assert_called_once_with()

def test_uninstall_requires_confirmation(proxy):
    """Test uninstall does nothing when the user declines"""
    with patch("valet_nginx.lib.cmd.install.load_proxy", return_value=proxy):
        result = runner.invoke(app, ["uninstall"], input="n\n")

    assert result.exit_code == 0
    proxy.uninstall.assert_not_called()

def test_uninstall_force(proxy):
    """Test uninstall without confirmation"""
    with patch("valet_nginx.lib.cmd.install.load_proxy", return_value=proxy):
        result = runner.invoke(app, ["uninstall", "--force"])

    assert result.exit_code == 0
    proxy.uninstall.assert_called_once_with()

def test_tld_show(home):
    """Test showing the current tld"""
    result = runner.invoke(app, ["tld"])

    assert result.exit_code == 0
    assert result.output.strip() == "test"

def test_tld_change(home, proxy):
    """Test changing the tld regenerates sites and restarts nginx"""
    with patch("valet_nginx.lib.cmd.settings.load_proxy", return_value=proxy):
        result = runner.invoke(app, ["tld", "localhost"])

    assert result.exit_code == 0
    assert Config.load(home / "config.yaml").tld == "localhost"
    proxy.site.resecure_for_new_configuration.assert_called_once_with(
        {"tld": "test", "loopback": "127.0.0.1"},
        {"tld": "localhost", "loopback": "127.0.0.1"}
    )
    proxy.restart.assert_called_once_with()

def test_tld_change_refused_with_secured_sites(home, proxy):
    """Test a refused tld change keeps the saved tld and does not restart nginx"""
    proxy.site.resecure_for_new_configuration.side_effect = SiteError("Certificates were issued for .test domains (foo.test)")

    with patch("valet_nginx.lib.cmd.settings.load_proxy", return_value=proxy):
        result = runner.invoke(app, ["tld", "localhost"])

    assert result.exit_code == 1
    assert "Certificates were issued" in result.output
    assert Config.load(home / "config.yaml").tld == "test"
    proxy.restart.assert_not_called()

def test_tld_change_keeps_environment_overrides_out_of_file(home, proxy, monkeypatch):
    """Test VALET_LOOPBACK is not written into the saved settings"""
    monkeypatch.setenv("VALET_LOOPBACK", "10.0.0.5")

    with patch("valet_nginx.lib.cmd.settings.load_proxy", return_value=proxy):
        result = runner.invoke(app, ["tld", "localhost"])

    assert result.exit_code == 0
    saved = Config.load(home / "config.yaml", apply_env=False)
    assert saved.tld == "localhost"
    assert saved.loopback == "127.0.0.1"

def test_tld_show_uses_environment_override(home, monkeypatch):
    """Test the effective tld is shown"""
    monkeypatch.setenv("VALET_TLD", "dev")

    result = runner.invoke(app, ["tld"])

    assert result.output.strip() == "dev"

def test_loopback_invalid(home):
    """Test an invalid loopback is refused"""
    result = runner.invoke(app, ["loopback", "not-an-ip"])

    assert result.exit_code == 1
    assert Config.load(home / "config.yaml").loopback == "127.0.0.1"

def test_loopback_change(home, proxy):
    """Test changing the loopback rewrites server blocks"""
    with patch("valet_nginx.lib.cmd.settings.load_proxy", return_value=proxy):
        result = runner.invoke(app, ["loopback", "10.200.10.1"])

    assert result.exit_code == 0
    assert Config.load(home / "config.yaml").loopback == "10.200.10.1"
    proxy.site.alias_loopback.assert_called_once_with("127.0.0.1", "10.200.10.1")
    proxy.install_server.assert_called_once_with()
    proxy.rewrite_secure_nginx_files.assert_called_once_with()
    proxy.restart.assert_called_once_with()

@pytest.fixture
def installer(tmp_path):
    installer = Mock(spec=Installer)
    installer.etc_dir.return_value = tmp_path / "etc"
    installer.log_dir.return_value = tmp_path / "log"
    return installer

def test_load_proxy_uses_configured_type(home, installer):
    """Test the proxy type stored in the settings selects the provider"""
    with patch("valet_nginx.lib.factory.InstallerFactory.create", return_value=installer):
        proxy = load_proxy()

    assert isinstance(proxy, NginxProxy)
    assert proxy.env.home_path == home

def test_load_proxy_unsupported_type(home):
    """Test an unknown proxy type in the settings"""
    Config(proxy_type="caddy").save(home / "config.yaml")

    with pytest.raises(ValueError, match="Unsupported provider: caddy"):
        load_proxy()

def test_load_proxy_before_init(tmp_path, monkeypatch, installer):
    """Test the default provider is used before settings exist"""
    monkeypatch.setenv("VALET_HOME_PATH", str(tmp_path / "fresh"))

    with patch("valet_nginx.lib.factory.InstallerFactory.create", return_value=installer):
        assert isinstance(load_proxy(), NginxProxy)
