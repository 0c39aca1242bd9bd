"""
AutoLogShip - SQL Server Log Shipping Secondary Configuration Tool.

Registers a secondary database for log shipping by validating the requested
options against both instances and issuing a single call to
sp_add_log_shipping_secondary_database on the secondary.
Supports SQL Server 2008 through 2022+.

Usage:
    # CLI (recommended)
    autologship --secondary SQL2 --primary-server SQL1 \\
        --secondary-database DB1_DR --primary-database DB1 --restore-threshold 45

    # Programmatic
    from autologship.application.secondary_database_service import SecondaryDatabaseService

    service = SecondaryDatabaseService()
    result = service.add_secondary_database(secondary, primary, config)
"""

__version__ = "0.1.0"
__author__ = "AutoLogShip Team"

from autologship.application.secondary_database_service import SecondaryDatabaseService

__all__ = ["SecondaryDatabaseService", "__version__"]
