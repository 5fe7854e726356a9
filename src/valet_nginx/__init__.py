"""
Valet Nginx - manage the Nginx server of a local Valet environment
"""

__version__ = "0.1.0"
