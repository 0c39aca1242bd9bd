"""
Domain layer package.

Contains pure data models with no I/O dependencies.
"""

from autologship.domain.enums import AuthType, RestoreMode
from autologship.domain.exceptions import (
    ConfigurationConflictError,
    LogShippingError,
    NotFoundError,
    RemoteExecutionError,
    SqlConnectionError,
    UnsupportedVersionError,
)
from autologship.domain.models import (
    ConnectionTarget,
    Credential,
    SecondaryDatabaseConfig,
)

__all__ = [
    # Enums
    "AuthType",
    "RestoreMode",
    # Models
    "ConnectionTarget",
    "Credential",
    "SecondaryDatabaseConfig",
    # Errors
    "ConfigurationConflictError",
    "LogShippingError",
    "NotFoundError",
    "RemoteExecutionError",
    "SqlConnectionError",
    "UnsupportedVersionError",
]
