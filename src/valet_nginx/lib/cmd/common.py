"""
Shared helpers for command implementations
"""
import logging

from rich.console import Console

from ..config import Config, ValetEnvironment
from ..factory import ProxyProviderFactory

console = Console()

def enable_debug(debug: bool) -> None:
    """Switch logging to DEBUG when requested"""
    if debug:
        logging.getLogger().setLevel(logging.DEBUG)

def load_proxy(env: ValetEnvironment = None):
    """Create the proxy configured for the current environment"""
    env = env or ValetEnvironment.detect()
    proxy_type = Config().proxy_type
    if env.config_file.exists():
        proxy_type = Config.load(env.config_file).proxy_type
    return ProxyProviderFactory.create(proxy_type, env=env)
