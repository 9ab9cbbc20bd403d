"""
Configuration package for the Azure DevOps issue counter.
Contains configuration management and loading utilities.
"""

from .config import Config, ConnectionSettings
from .config_loader import ConfigLoader

__all__ = [
    'Config',
    'ConnectionSettings',
    'ConfigLoader'
]
