"""
Command builder for sp_add_log_shipping_secondary_database.

Assembles the procedure call as an ordered list of named arguments. The
driver receives the parameterized form (``@name = ?``); the literal T-SQL
form is only rendered for dry-run output and error messages.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from autologship.domain.models import NOT_SET, SecondaryDatabaseConfig

PROCEDURE_NAME = "master.sys.sp_add_log_shipping_secondary_database"


@dataclass(frozen=True)
class ProcedureCall:
    """A stored procedure invocation with ordered named arguments."""

    procedure: str
    arguments: list[tuple[str, Any]] = field(default_factory=list)

    @property
    def parameter_names(self) -> list[str]:
        return [name for name, _ in self.arguments]

    @property
    def parameters(self) -> tuple[Any, ...]:
        """Argument values in placeholder order."""
        return tuple(value for _, value in self.arguments)

    def get(self, name: str, default: Any = None) -> Any:
        for arg_name, value in self.arguments:
            if arg_name == name:
                return value
        return default

    def to_sql(self) -> str:
        """Parameterized statement for the driver."""
        if not self.arguments:
            return f"EXEC {self.procedure}"
        assignments = ", ".join(f"@{name} = ?" for name in self.parameter_names)
        return f"EXEC {self.procedure} {assignments}"

    def render(self) -> str:
        """
        Literal T-SQL text of the call.

        Used for display and diagnostics only, never sent to the server.
        """
        lines = [f"EXEC {self.procedure}"]
        for index, (name, value) in enumerate(self.arguments):
            prefix = "" if index == 0 else ","
            lines.append(f"{prefix}@{name} = {render_literal(value)}")
        return "\n".join(lines) + ";"


def render_literal(value: Any) -> str:
    """Render a Python value as a T-SQL literal."""
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int):
        return str(int(value))
    text = str(value).replace("'", "''")
    return f"N'{text}'"


def build_add_secondary_database_call(config: SecondaryDatabaseConfig) -> ProcedureCall:
    """
    Build the sp_add_log_shipping_secondary_database call for a config.

    Parameter order is fixed. block_size and buffer_count are only sent when
    set (not -1), max_transfer_size only when >= 1; otherwise the server
    default applies. @overwrite = 1 always closes the call, so an existing
    secondary registration for the database is replaced.

    The config is expected to be already validated (no restore mode
    conflict); this function does not check it.
    """
    arguments: list[tuple[str, Any]] = [
        ("secondary_database", config.secondary_database),
        ("primary_server", config.primary_server),
        ("primary_database", config.primary_database),
        ("restore_delay", config.restore_delay),
        ("restore_all", config.restore_all),
        ("restore_mode", int(config.restore_mode)),
        ("disconnect_users", config.disconnect_users_flag),
        ("restore_threshold", config.restore_threshold),
        ("threshold_alert", config.threshold_alert),
        ("threshold_alert_enabled", config.threshold_alert_enabled_flag),
        ("history_retention_period", config.history_retention),
    ]

    if config.block_size != NOT_SET:
        arguments.append(("block_size", config.block_size))
    if config.buffer_count != NOT_SET:
        arguments.append(("buffer_count", config.buffer_count))
    if config.max_transfer_size is not None and config.max_transfer_size >= 1:
        arguments.append(("max_transfer_size", config.max_transfer_size))

    arguments.append(("overwrite", 1))
    return ProcedureCall(procedure=PROCEDURE_NAME, arguments=arguments)
