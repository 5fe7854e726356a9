"""
Package and service installers
"""
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, List, Union

from .proxy.base import InstallationFailure, ServiceError
from .runner import CommandLine

logger = logging.getLogger(__name__)


def _names(names: Union[str, Iterable[str]]) -> List[str]:
    if isinstance(names, str):
        return names.split()
    return list(names)


class Installer(ABC):
    """Installs and controls OS services"""

    def __init__(self, cli: CommandLine):
        self.cli = cli

    @abstractmethod
    def installed(self, package: str) -> bool:
        """Whether ``package`` is installed"""
        pass

    @abstractmethod
    def install_or_fail(self, package: str) -> None:
        """
        Install a package

        Raises:
            InstallationFailure: If the package manager reports an error
        """
        pass

    @abstractmethod
    def _service_command(self, action: str, service: str) -> List[str]:
        pass

    @abstractmethod
    def uninstall_formula(self, names: Union[str, Iterable[str]]) -> None:
        """Remove packages, skipping the ones that are not installed"""
        pass

    @abstractmethod
    def etc_dir(self) -> Path:
        pass

    @abstractmethod
    def log_dir(self) -> Path:
        pass

    def has_installed_nginx(self) -> bool:
        return any(self.installed(name) for name in ('nginx', 'nginx-full'))

    def nginx_service_name(self) -> str:
        return 'nginx-full' if self.installed('nginx-full') else 'nginx'

    def restart_service(self, name: str) -> None:
        """
        Restart a service

        Raises:
            ServiceError: If the service manager reports an error
        """
        logger.info(f"Restarting {name}...")
        result = self.cli.run(self._service_command('restart', name), sudo=True)
        if not result.ok:
            raise ServiceError(f"Could not restart {name} [{result.exit_code}: {result.output.strip()}]")

    def stop_service(self, names: Union[str, Iterable[str]]) -> None:
        """
        Stop one or more services

        Every name is attempted; failures are collected and raised together.

        Raises:
            ServiceError: If any service failed to stop
        """
        failed = []
        for name in _names(names):
            logger.info(f"Stopping {name}...")
            result = self.cli.run(self._service_command('stop', name), sudo=True)
            if not result.ok:
                logger.warning(f"Could not stop {name}: {result.output.strip()}")
                failed.append(name)

        if failed:
            raise ServiceError(f"Could not stop {', '.join(failed)}")


class AptInstaller(Installer):
    """Debian/Ubuntu packages managed by apt and systemd"""

    def installed(self, package: str) -> bool:
        result = self.cli.run(['dpkg-query', '-W', '-f=${Status}', package])
        return result.ok and 'install ok installed' in result.output

    def install_or_fail(self, package: str) -> None:
        logger.info(f"Installing {package}...")
        result = self.cli.run(['apt-get', 'install', '-y', package], sudo=True)
        if not result.ok:
            raise InstallationFailure(
                f"Could not install {package}. Try 'sudo apt-get install {package}' and check its output.\n"
                f"{result.output.strip()}"
            )

    def _service_command(self, action: str, service: str) -> List[str]:
        return ['systemctl', action, service]

    def uninstall_formula(self, names: Union[str, Iterable[str]]) -> None:
        for name in _names(names):
            if not self.installed(name):
                logger.debug(f"{name} is not installed")
                continue
            logger.info(f"Removing {name}...")
            result = self.cli.run(['apt-get', 'purge', '-y', name], sudo=True)
            if not result.ok:
                logger.warning(f"Could not remove {name}: {result.output.strip()}")

    def etc_dir(self) -> Path:
        return Path('/etc')

    def log_dir(self) -> Path:
        return Path('/var/log')


class BrewInstaller(Installer):
    """macOS formulae managed by Homebrew"""

    def __init__(self, cli: CommandLine, prefix: Path):
        super().__init__(cli)
        self.prefix = Path(prefix)

    def installed(self, package: str) -> bool:
        return self.cli.quietly(['brew', 'list', '--formula', package]) == 0

    def install_or_fail(self, package: str) -> None:
        logger.info(f"Installing {package}...")
        result = self.cli.run(['brew', 'install', package])
        if not result.ok:
            raise InstallationFailure(
                f"Could not install {package}. Try 'brew install {package}' and check its output.\n"
                f"{result.output.strip()}"
            )

    def _service_command(self, action: str, service: str) -> List[str]:
        return ['brew', 'services', action, service]

    def uninstall_formula(self, names: Union[str, Iterable[str]]) -> None:
        for name in _names(names):
            if not self.installed(name):
                logger.debug(f"{name} is not installed")
                continue
            logger.info(f"Removing {name}...")
            result = self.cli.run(['brew', 'uninstall', '--force', name])
            if not result.ok:
                logger.warning(f"Could not remove {name}: {result.output.strip()}")

    def etc_dir(self) -> Path:
        return self.prefix / 'etc'

    def log_dir(self) -> Path:
        return self.prefix / 'var' / 'log'
