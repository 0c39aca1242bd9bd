"""
AutoLogShip - SQL Server Log Shipping Secondary Configuration Tool

Adds a secondary database to a log shipping configuration by calling
sp_add_log_shipping_secondary_database on the secondary instance.
"""

import sys
from autologship.interface.cli import main


if __name__ == "__main__":
    sys.exit(main())
