"""
Base class for reverse proxy servers
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List


@dataclass(frozen=True)
class ProxyPaths:
    """Where a proxy keeps its configuration and logs"""
    config_dir: Path
    log_dir: Path
    main_config: Path

    @classmethod
    def under(cls, etc_dir: Path, log_dir: Path, name: str, config_name: str) -> 'ProxyPaths':
        config_dir = Path(etc_dir) / name
        return cls(
            config_dir=config_dir,
            log_dir=Path(log_dir) / name,
            main_config=config_dir / config_name,
        )


class ReverseProxy(ABC):
    """Abstract base class for reverse proxy servers"""

    @abstractmethod
    def install(self) -> None:
        """
        Install the proxy and all of its configuration

        Raises:
            InstallationFailure: If the proxy binary cannot be installed
            FilesystemFailure: If configuration cannot be written
        """
        pass

    @abstractmethod
    def lint(self) -> None:
        """
        Check the main configuration file for syntax errors

        Raises:
            ConfigurationInvalid: If the proxy rejects its configuration
        """
        pass

    @abstractmethod
    def restart(self) -> None:
        """
        Restart the proxy service after validating its configuration

        Raises:
            ConfigurationInvalid: If validation fails; the service is left alone
            ServiceError: If the service manager fails to restart it
        """
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop the proxy service"""
        pass

    @abstractmethod
    def uninstall(self) -> None:
        """Remove the proxy, its configuration and its logs"""
        pass

    @abstractmethod
    def configured_sites(self) -> List[str]:
        """
        Get sites that have an explicit server configuration

        Returns:
            Site names in directory order
        """
        pass


class ProxyError(Exception):
    """Base exception for proxy operations"""
    pass


class InstallationFailure(ProxyError):
    """Package installer could not install the proxy"""
    pass


class ServiceError(ProxyError):
    """Service manager could not control the proxy service"""
    pass


class ConfigurationInvalid(ProxyError):
    """Proxy rejected its own configuration"""

    def __init__(self, exit_code: int, output: str):
        self.exit_code = exit_code
        self.output = output
        super().__init__(
            f"Nginx cannot start; please check your nginx.conf [{exit_code}: {output.strip()}]."
        )
