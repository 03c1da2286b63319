"""
Core infrastructure for azsharedblob.

Configuration lives in :mod:`azsharedblob.core.config_manager`; it is not
re-exported here because it depends on the protocol package, which itself
logs through this package.
"""

from .logging_config import setup_logging, get_logger

__all__ = [
    "setup_logging",
    "get_logger",
]
