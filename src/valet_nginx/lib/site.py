"""
Registry of secured sites and their generated server blocks
"""
import logging
import re
from pathlib import Path
from typing import Dict, List

from .config import ValetEnvironment, listen_address
from .filesystem import Filesystem, Templates

logger = logging.getLogger(__name__)

LOOPBACK_MARKER = '#listen VALET_LOOPBACK:80; # valet loopback'


def _address_pattern(address: str) -> 're.Pattern':
    """Match ``address`` as a whole, so 127.0.0.1 never matches inside 127.0.0.10"""
    return re.compile(r'(?<![\w.:\[])' + re.escape(address) + r'(?![\w.\]]|:[0-9a-fA-F]*:)')


class SiteRegistry:
    """Tracks secured sites and rebuilds their Nginx server blocks"""

    def __init__(self, env: ValetEnvironment, files: Filesystem, templates: Templates):
        self.env = env
        self.files = files
        self.templates = templates

    def secured(self) -> List[str]:
        """Domains that have a certificate"""
        path = self.env.certificates_path
        if not self.files.is_dir(path):
            return []
        return [
            name[:-len('.crt')]
            for name in self.files.scandir(path)
            if name.endswith('.crt') and not name.startswith('.')
        ]

    def replace_loopback(self, text: str, loopback: str) -> str:
        """Enable the loopback listener in a stub when a custom loopback is configured"""
        if loopback == self.env.default_loopback:
            return text
        listener = LOOPBACK_MARKER[1:].replace('VALET_LOOPBACK', listen_address(loopback))
        return text.replace(LOOPBACK_MARKER, listener)

    def alias_loopback(self, old: str, new: str) -> None:
        """Point every per-site server block at the new loopback"""
        path = self.env.nginx_path
        if old == new or not self.files.is_dir(path):
            return

        pattern = _address_pattern(listen_address(old))
        replacement = listen_address(new)
        for name in self.files.scandir(path):
            if name.startswith('.'):
                continue
            site_conf = path / name
            contents = self.files.get(site_conf)
            updated = pattern.sub(lambda _: replacement, contents)
            if updated != contents:
                logger.debug(f"Replacing {old} with {new} in {site_conf}")
                self.files.put_as_user(site_conf, updated)

    def _build_secure_server(self, url: str, loopback: str) -> str:
        certificates = self.env.certificates_path
        cert = certificates / f"{url}.crt"
        if not self.files.exists(cert):
            logger.warning(f"No certificate found for {url} at {cert}")

        tokens = dict(self.env.tokens())
        del tokens['VALET_USER']
        tokens.update({
            'VALET_SITE': url,
            'VALET_CERT': str(cert),
            'VALET_KEY': str(certificates / f"{url}.key"),
            'VALET_LOOPBACK': listen_address(loopback),
        })
        return self.templates.render(
            'secure.valet.conf', self.templates.get_stub('secure.valet.conf'), tokens
        )

    def resecure_for_new_configuration(self, old: Dict[str, str], new: Dict[str, str]) -> None:
        """
        Rebuild the server block of every secured site

        Args:
            old: Settings the sites were generated with (``tld``, ``loopback``)
            new: Settings to generate them with

        Raises:
            SiteError: If the tld changes while sites are secured; their
                certificates only cover the old domain names
        """
        if not self.files.is_dir(self.env.certificates_path):
            logger.debug("No certificates directory, nothing to resecure")
            return

        secured = self.secured()
        if old['tld'] != new['tld'] and secured:
            raise SiteError(
                f"Certificates were issued for .{old['tld']} domains ({', '.join(secured)}). "
                f"Unsecure these sites before switching the tld to .{new['tld']}."
            )

        self.files.ensure_dir_exists(self.env.nginx_path, owner=self.env.user)

        for url in secured:
            logger.info(f"Generating server block for {url}")
            self.files.put_as_user(
                Path(self.env.nginx_path) / url,
                self._build_secure_server(url, new['loopback'])
            )


class SiteError(Exception):
    """Secured sites cannot be rebuilt with the requested settings"""
    pass
