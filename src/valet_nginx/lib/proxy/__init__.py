"""
Proxy module initialization
"""
from .base import (
    ReverseProxy,
    ProxyPaths,
    ProxyError,
    InstallationFailure,
    ServiceError,
    ConfigurationInvalid
)
from .nginx import NginxProxy

__all__ = [
    "ReverseProxy",
    "ProxyPaths",
    "ProxyError",
    "InstallationFailure",
    "ServiceError",
    "ConfigurationInvalid",
    "NginxProxy"
]
