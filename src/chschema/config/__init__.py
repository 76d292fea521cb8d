"""Configuration management: profiles, TOML loading, and config models.

Usage:
    >>> from chschema.config import load_db_config, DatabaseProfile, DatabaseConfig
"""

from chschema.config.loader import load_db_config
from chschema.config.models import (
    ConnectionResult,
    DatabaseConfig,
    DatabaseProfile,
    ReconcileSettings,
)

__all__ = [
    "load_db_config",
    "ConnectionResult",
    "DatabaseConfig",
    "DatabaseProfile",
    "ReconcileSettings",
]
