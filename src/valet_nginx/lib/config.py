"""
Configuration management for Valet Nginx
"""
import getpass
import ipaddress
import os
import pwd
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv
import yaml
from rich.prompt import Prompt

# Load environment variables from .env file
load_dotenv()

DEFAULT_HOME_PATH = Path("~/.config/valet").expanduser()
HOME_CONFIG_DIR = Path(".config") / "valet"
SERVER_SUBPATH = Path(".composer") / "vendor" / "laravel" / "valet" / "server.php"
DEFAULT_LOOPBACK = "127.0.0.1"
DEFAULT_TLD = "test"
DEFAULT_SERVER_PATH = Path("~").expanduser() / SERVER_SUBPATH
DEFAULT_STATIC_PREFIX = "41c270e4-5535-4daa-b23e-c269744c2f45"


def listen_address(address: str) -> str:
    """Format an IP for an nginx listen directive; IPv6 needs brackets"""
    if ipaddress.ip_address(address).version == 6:
        return f"[{address}]"
    return address


def _sudo_home(user: str) -> Path:
    try:
        return Path(pwd.getpwnam(user).pw_dir)
    except KeyError:
        raise ConfigError(f"Unknown user in SUDO_USER: {user}")


@dataclass(frozen=True)
class ValetEnvironment:
    """Identity and paths of the running Valet environment"""
    home_path: Path
    server_path: Path
    static_prefix: str
    user: str
    default_loopback: str = DEFAULT_LOOPBACK

    @classmethod
    def detect(cls) -> 'ValetEnvironment':
        """Build the environment from the current process"""
        home = os.getenv("VALET_HOME_PATH")
        server = os.getenv("VALET_SERVER_PATH")
        sudo_user = os.getenv("SUDO_USER")

        # sudo resets HOME to root's, the invoking user's home is what Valet uses
        default_home, default_server = DEFAULT_HOME_PATH, DEFAULT_SERVER_PATH
        if sudo_user and not (home and server):
            user_home = _sudo_home(sudo_user)
            default_home = user_home / HOME_CONFIG_DIR
            default_server = user_home / SERVER_SUBPATH

        return cls(
            home_path=Path(home).expanduser() if home else default_home,
            server_path=Path(server).expanduser() if server else default_server,
            static_prefix=os.getenv("VALET_STATIC_PREFIX", DEFAULT_STATIC_PREFIX),
            # Files must stay owned by the invoking user when run through sudo
            user=sudo_user or getpass.getuser(),
        )

    @property
    def config_file(self) -> Path:
        return self.home_path / "config.yaml"

    @property
    def nginx_path(self) -> Path:
        """Directory holding one server block per configured site"""
        return self.home_path / "Nginx"

    @property
    def certificates_path(self) -> Path:
        return self.home_path / "Certificates"

    @property
    def stubs_path(self) -> Path:
        """User overrides for the packaged stubs"""
        return self.home_path / "stubs"

    def tokens(self) -> Dict[str, str]:
        """Template placeholders and their literal values"""
        return {
            "VALET_USER": self.user,
            "VALET_HOME_PATH": str(self.home_path),
            "VALET_SERVER_PATH": str(self.server_path),
            "VALET_STATIC_PREFIX": self.static_prefix,
        }


@dataclass
class Config:
    """Persisted global settings"""
    tld: str = DEFAULT_TLD
    loopback: str = DEFAULT_LOOPBACK
    proxy_type: str = "nginx"

    @classmethod
    def load(cls, path: Path, apply_env: bool = True) -> 'Config':
        """
        Load configuration from file

        Args:
            path: YAML file to read
            apply_env: Whether VALET_TLD / VALET_LOOPBACK override the file;
                pass False before saving so overrides are not persisted
        """
        if not path.exists():
            raise ConfigError(f"Configuration not found at {path}. Please run 'valet-nginx init' first.")

        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Could not read configuration {path}: {e}")

        if not isinstance(data, dict):
            raise ConfigError(f"Configuration {path} is not a mapping")

        known = {key: data[key] for key in ('tld', 'loopback', 'proxy_type') if key in data}
        config = cls(**known)
        if not apply_env:
            return config

        # Environment variables take precedence over the config file
        env_tld = os.getenv("VALET_TLD")
        env_loopback = os.getenv("VALET_LOOPBACK")
        if env_tld:
            config.tld = env_tld
        if env_loopback:
            config.loopback = env_loopback

        return config

    def save(self, path: Path):
        """Save configuration to file"""
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w') as f:
            yaml.safe_dump(asdict(self), f)

    def require_network_settings(self) -> None:
        """
        Make sure tld and loopback can be written into server blocks

        Raises:
            MissingConfiguration: If either value is empty or the loopback is not an IP
        """
        if not self.tld or not str(self.tld).strip():
            raise MissingConfiguration("No tld configured. Run 'valet-nginx tld <name>' first.")
        if not self.loopback or not str(self.loopback).strip():
            raise MissingConfiguration("No loopback configured. Run 'valet-nginx loopback <ip>' first.")
        try:
            ipaddress.ip_address(str(self.loopback))
        except ValueError:
            raise MissingConfiguration(f"Configured loopback {self.loopback!r} is not a valid IP address")

    @classmethod
    def initialize_interactive(cls, path: Path, defaults: Optional['Config'] = None) -> 'Config':
        """Initialize configuration interactively"""
        defaults = defaults or cls()
        print("Welcome to Valet Nginx setup!")

        config = cls(
            tld=Prompt.ask("Top-level domain for your sites", default=defaults.tld),
            loopback=Prompt.ask("Loopback address Nginx should listen on", default=defaults.loopback),
        )
        config.require_network_settings()
        config.save(path)

        return config


class ConfigError(Exception):
    """Configuration error"""
    pass


class MissingConfiguration(ConfigError):
    """Global settings are absent or malformed"""
    pass
