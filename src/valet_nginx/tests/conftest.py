"""
Shared fixtures for Valet Nginx tests
"""
import getpass

import pytest

from valet_nginx.lib.config import ValetEnvironment


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep developer settings out of the tests"""
    for name in ("VALET_TLD", "VALET_LOOPBACK", "VALET_HOME_PATH", "VALET_SERVER_PATH",
                 "VALET_STATIC_PREFIX", "SUDO_USER"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def env(tmp_path):
    """Valet environment rooted in a temporary home"""
    home = tmp_path / "home"
    home.mkdir()
    return ValetEnvironment(
        home_path=home,
        server_path=tmp_path / "valet" / "server.php",
        static_prefix="static-prefix",
        user=getpass.getuser(),
    )
