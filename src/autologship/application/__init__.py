"""
Application layer package.

Builds the log shipping procedure call and orchestrates the run against
the two instances.
"""

from autologship.application.command_builder import (
    PROCEDURE_NAME,
    ProcedureCall,
    build_add_secondary_database_call,
)
from autologship.application.secondary_database_service import (
    AddSecondaryResult,
    SecondaryDatabaseService,
    resolve_restore_options,
)

__all__ = [
    "PROCEDURE_NAME",
    "ProcedureCall",
    "build_add_secondary_database_call",
    "AddSecondaryResult",
    "SecondaryDatabaseService",
    "resolve_restore_options",
]
