"""
Nginx reverse proxy implementation
"""
import logging
from typing import TYPE_CHECKING, Dict, List

from ..config import Config, ValetEnvironment
from ..filesystem import Filesystem, Templates, STUB_PLACEHOLDERS
from ..runner import CommandLine
from .base import ReverseProxy, ProxyPaths, ProxyError, ConfigurationInvalid

if TYPE_CHECKING:
    from ..installer import Installer
    from ..site import SiteRegistry

logger = logging.getLogger(__name__)

SERVICE_VARIANTS = ('nginx', 'nginx-full')


class NginxProxy(ReverseProxy):
    """Nginx managed on behalf of Valet"""

    def __init__(self, env: ValetEnvironment, cli: CommandLine, files: Filesystem,
                 templates: Templates, site: 'SiteRegistry', installer: 'Installer'):
        """Initialize Nginx proxy"""
        self.env = env
        self.cli = cli
        self.files = files
        self.templates = templates
        self.site = site
        self.installer = installer

        self.paths = ProxyPaths.under(installer.etc_dir(), installer.log_dir(), 'nginx', 'nginx.conf')

    @property
    def nginx_dir(self):
        return self.paths.config_dir

    @property
    def nginx_conf(self):
        return self.paths.main_config

    def _settings(self) -> Config:
        """Read global settings; never cached so changes by other processes are seen"""
        settings = Config.load(self.env.config_file)
        settings.require_network_settings()
        return settings

    def _tokens_for(self, stub: str) -> Dict[str, str]:
        env_tokens = self.env.tokens()
        return {key: env_tokens[key] for key in STUB_PLACEHOLDERS[stub]}

    def install(self) -> None:
        """Install Nginx and its configuration files"""
        if not self.installer.has_installed_nginx():
            self.installer.install_or_fail('nginx')

        self.install_configuration()
        self.install_server()
        self.install_nginx_directory()

    def install_configuration(self) -> None:
        """Install the main Nginx configuration file"""
        logger.info("Installing nginx configuration...")

        tokens = self._tokens_for('nginx.conf')
        contents = self.templates.render('nginx.conf', self.templates.get_stub('nginx.conf'), tokens)

        self.files.ensure_dir_exists(self.nginx_dir)
        self.files.put_as_user(self.nginx_conf, contents)

    def install_server(self) -> None:
        """Install the Valet server block and the fastcgi parameters"""
        self.files.ensure_dir_exists(self.nginx_dir / 'valet')

        loopback = self._settings().loopback
        stub = self.site.replace_loopback(self.templates.get_stub('valet.conf'), loopback)
        tokens = self._tokens_for('valet.conf')

        self.files.put_as_user(
            self.nginx_dir / 'valet' / 'valet.conf',
            self.templates.render('valet.conf', stub, tokens)
        )

        self.files.put_as_user(
            self.nginx_dir / 'fastcgi_params',
            self.templates.get_stub('fastcgi_params')
        )

    def install_nginx_directory(self) -> None:
        """
        Install the directory of site-specific Nginx servers

        Existing secure sites are regenerated afterwards.
        """
        logger.info("Installing nginx directory...")

        nginx_directory = self.env.nginx_path
        if not self.files.is_dir(nginx_directory):
            self.files.mkdir_as_user(nginx_directory)

        self.files.put_as_user(nginx_directory / '.keep', '\n')

        self.rewrite_secure_nginx_files()

    def lint(self) -> None:
        """Check nginx.conf for errors"""
        result = self.cli.run(['nginx', '-c', str(self.nginx_conf), '-t'], sudo=True)

        if result.exit_code != 0:
            logger.error(f"Nginx configuration test failed: {result.output.strip()}")
            raise ConfigurationInvalid(result.exit_code, result.output)

        logger.debug("Nginx configuration test successful")

    def rewrite_secure_nginx_files(self) -> None:
        """Generate fresh Nginx servers for existing secure sites"""
        settings = self._settings()

        if settings.loopback != self.env.default_loopback:
            self.site.alias_loopback(self.env.default_loopback, settings.loopback)

        config = {'tld': settings.tld, 'loopback': settings.loopback}

        self.site.resecure_for_new_configuration(config, config)

    def restart(self) -> None:
        """Restart the Nginx service"""
        self.lint()

        self.installer.restart_service(self.installer.nginx_service_name())

    def stop(self) -> None:
        """Stop the Nginx service"""
        self.installer.stop_service('nginx')

    def uninstall(self) -> None:
        """Forcefully uninstall Nginx"""
        for name in SERVICE_VARIANTS:
            try:
                self.installer.stop_service(name)
            except ProxyError as e:
                logger.warning(f"Could not stop {name}: {e}")

        self.installer.uninstall_formula(list(SERVICE_VARIANTS))

        result = self.cli.run(['rm', '-rf', str(self.paths.config_dir), str(self.paths.log_dir)], sudo=True)
        if not result.ok:
            raise ProxyError(f"Failed to remove Nginx files: {result.output.strip()}")

        logger.info("Uninstalled Nginx")

    def configured_sites(self) -> List[str]:
        """Return a list of all sites with explicit Nginx configurations"""
        return [
            name for name in self.files.scandir(self.env.nginx_path)
            if not name.startswith('.')
        ]
