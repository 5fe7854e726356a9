"""
Command implementations for Valet Nginx
"""

from .init import init_command
from .install import install_command, uninstall_command
from .proxy import restart_command, stop_command, lint_command, rewrite_command
from .manage import sites_command
from .settings import tld_command, loopback_command

__all__ = [
    'init_command',
    'install_command',
    'uninstall_command',
    'restart_command',
    'stop_command',
    'lint_command',
    'rewrite_command',
    'sites_command',
    'tld_command',
    'loopback_command'
]
