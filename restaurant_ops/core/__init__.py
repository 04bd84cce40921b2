"""
Core module initialization.
Exports configuration, logging setup and the service result envelope.
"""

from restaurant_ops.core.config import get_settings, setup_logging, Settings, EnvironmentMode
from restaurant_ops.core.errors import ErrorKind, ServiceResult

__all__ = [
    "get_settings",
    "setup_logging",
    "Settings",
    "EnvironmentMode",
    "ErrorKind",
    "ServiceResult",
]
