"""
Utility functions for Valet Nginx
"""
import os
import platform
import logging
from pathlib import Path
from typing import Tuple
from functools import lru_cache

logger = logging.getLogger(__name__)

@lru_cache(maxsize=1)
def get_system_info() -> Tuple[str, str]:
    """
    Get system information

    Returns:
        Tuple of (os_type, architecture)
    """
    os_type = platform.system().lower()
    arch = platform.machine().lower()

    # Normalize architecture names
    arch_map = {
        'x86_64': 'amd64',
        'amd64': 'amd64',
        'aarch64': 'arm64',
        'arm64': 'arm64',
        'armv7l': 'arm',
        'armv6l': 'arm'
    }

    # Normalize OS names
    os_map = {
        'darwin': 'darwin',
        'linux': 'linux',
        'windows': 'windows'
    }

    return os_map.get(os_type, os_type), arch_map.get(arch, arch)

def brew_prefix() -> Path:
    """Homebrew installation prefix for this machine"""
    env_prefix = os.getenv("HOMEBREW_PREFIX")
    if env_prefix:
        return Path(env_prefix)
    _, arch = get_system_info()
    return Path('/opt/homebrew') if arch == 'arm64' else Path('/usr/local')

def is_root() -> bool:
    """Whether the process runs with root privileges"""
    return os.name != 'nt' and os.geteuid() == 0
