"""
Factory classes for provider instantiation
"""
from typing import Type, Dict, Optional

from .config import ValetEnvironment
from .filesystem import Filesystem, Templates
from .installer import Installer, AptInstaller, BrewInstaller
from .proxy.base import ReverseProxy
from .proxy.nginx import NginxProxy
from .runner import CommandLine
from .site import SiteRegistry
from .utils import get_system_info, brew_prefix

class InstallerFactory:
    """Factory for package installers"""

    _providers: Dict[str, Type[Installer]] = {
        'linux': AptInstaller,
        'darwin': BrewInstaller
    }

    @classmethod
    def create(cls, cli: CommandLine, os_type: Optional[str] = None) -> Installer:
        """
        Create installer instance

        Args:
            cli: Command runner the installer uses
            os_type: Host OS (if None, detected from the running system)

        Returns:
            Installer instance

        Raises:
            ValueError: If the OS is not supported
        """
        if os_type is None:
            os_type, _ = get_system_info()
        if os_type not in cls._providers:
            raise ValueError(f"Unsupported operating system: {os_type}")

        installer_class = cls._providers[os_type]
        if installer_class is BrewInstaller:
            return BrewInstaller(cli, brew_prefix())
        return installer_class(cli)

class ProxyProviderFactory:
    """Factory for proxy providers"""

    _providers: Dict[str, Type[ReverseProxy]] = {
        'nginx': NginxProxy
    }

    @classmethod
    def create(cls, provider_type: str = 'nginx', env: Optional[ValetEnvironment] = None,
               installer: Optional[Installer] = None) -> ReverseProxy:
        """
        Create proxy provider instance with its collaborators

        Args:
            provider_type: Provider type
            env: Valet environment (if None, detected from the process)
            installer: Installer to use (if None, picked for the host OS)

        Returns:
            Proxy provider instance (e.g. NginxProxy)

        Raises:
            ValueError: If provider type is not supported
        """
        if provider_type not in cls._providers:
            raise ValueError(f"Unsupported provider: {provider_type}")

        env = env or ValetEnvironment.detect()
        cli = CommandLine()
        files = Filesystem(env.user)
        templates = Templates(files, overrides=env.stubs_path)
        site = SiteRegistry(env, files, templates)
        installer = installer or InstallerFactory.create(cli)

        return cls._providers[provider_type](env, cli, files, templates, site, installer)

