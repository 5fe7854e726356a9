"""
Core library for Valet Nginx
"""

from .config import Config, ConfigError, MissingConfiguration, ValetEnvironment
from .factory import InstallerFactory, ProxyProviderFactory

# Import utils module, not individual functions
import valet_nginx.lib.utils as utils

__all__ = [
    "Config",
    "ConfigError",
    "MissingConfiguration",
    "ValetEnvironment",
    "InstallerFactory",
    "ProxyProviderFactory",
    "utils"
]
