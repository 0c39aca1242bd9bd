"""
Secondary database service - registers a log shipping secondary.

Flow (strictly linear, first failure aborts):
1. Connect to the secondary, check its version
2. Connect to the primary
3. Verify the primary database exists on the primary
4. Verify the secondary database exists on the secondary
5. Resolve the restore mode / disconnect users combination
6. Build the procedure call
7. Execute it on the secondary (or print it in dry-run mode)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

from autologship.application.command_builder import (
    ProcedureCall,
    build_add_secondary_database_call,
)
from autologship.domain.exceptions import (
    ConfigurationConflictError,
    NotFoundError,
    UnsupportedVersionError,
)
from autologship.domain.models import ConnectionTarget, SecondaryDatabaseConfig

if TYPE_CHECKING:
    from autologship.infrastructure.sql_server import SqlConnector

# @overwrite was added to the procedure in SQL Server 2008
MINIMUM_VERSION_MAJOR = 10

ACTION = "Executing the query to add log shipping secondary database"


@dataclass
class AddSecondaryResult:
    """Outcome of one add_secondary_database run."""

    instance: str
    secondary_database: str
    call: ProcedureCall
    command: str
    executed: bool = False
    dry_run: bool = False
    warnings: list[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        if self.dry_run:
            return f"Dry run: {ACTION} {self.secondary_database} on {self.instance}"
        return f"Finished adding the secondary database {self.secondary_database} to log shipping."


def resolve_restore_options(
    config: SecondaryDatabaseConfig,
    force: bool = False,
    logger: logging.Logger | None = None,
) -> tuple[SecondaryDatabaseConfig, list[str]]:
    """
    Apply the restore mode / disconnect users rule.

    Disconnecting users is illegal in NoRecovery mode. Without force this
    raises; with force disconnect_users is turned off and a warning logged.
    Standby mode accepts either setting.

    Returns:
        (config to use, warnings emitted)

    Raises:
        ConfigurationConflictError: NoRecovery + disconnect users, no force
    """
    log = logger or logging.getLogger(__name__)

    if not config.has_mode_conflict:
        return config, []

    if not force:
        raise ConfigurationConflictError(
            "The restore mode is set to 0 (NoRecovery) and disconnect users is set to 1. "
            "Please enable the force option to continue."
        )

    warning = (
        "The restore mode is set to 0 (NoRecovery) and disconnect users is set to 1. "
        "Force is set: disconnect users is changed to 0."
    )
    log.warning(warning)
    return config.model_copy(update={"disconnect_users": False}), [warning]


class SecondaryDatabaseService:
    """
    Registers a secondary database for log shipping.

    Usage:
        service = SecondaryDatabaseService(dry_run=False, force=False)
        result = service.add_secondary_database(secondary, primary, config)
    """

    def __init__(
        self,
        dry_run: bool = False,
        force: bool = False,
        logger: logging.Logger | None = None,
        connector_factory: Callable[[ConnectionTarget], SqlConnector] | None = None,
    ) -> None:
        """
        Initialize the service.

        Args:
            dry_run: Build and report the command without executing it
            force: Coerce disconnect_users to 0 instead of failing in NoRecovery mode
            logger: Logger receiving progress and warnings
            connector_factory: Builds a connector per target (defaults to SqlConnector)
        """
        if connector_factory is None:
            from autologship.infrastructure.sql_server import SqlConnector

            connector_factory = SqlConnector

        self.dry_run = dry_run
        self.force = force
        self.logger = logger or logging.getLogger(__name__)
        self.connector_factory = connector_factory

    def add_secondary_database(
        self,
        secondary: ConnectionTarget,
        primary: ConnectionTarget,
        config: SecondaryDatabaseConfig,
    ) -> AddSecondaryResult:
        """
        Validate both instances and register the secondary database.

        Raises:
            SqlConnectionError: Either instance is unreachable
            UnsupportedVersionError: Secondary older than SQL Server 2008
            NotFoundError: A database is missing on its instance
            ConfigurationConflictError: NoRecovery + disconnect users without force
            RemoteExecutionError: The procedure call failed
        """
        log = self.logger
        log.info(
            "Configuring %s on %s as log shipping secondary of %s.%s",
            config.secondary_database, secondary.display_name,
            config.primary_server, config.primary_database
        )

        with self.connector_factory(secondary) as secondary_sql:
            self._check_version(secondary_sql, secondary)

            with self.connector_factory(primary) as primary_sql:
                log.debug("Checking primary database %s", config.primary_database)
                if not primary_sql.database_exists(config.primary_database):
                    raise NotFoundError(config.primary_database, primary.display_name)

            log.debug("Checking secondary database %s", config.secondary_database)
            if not secondary_sql.database_exists(config.secondary_database):
                raise NotFoundError(config.secondary_database, secondary.display_name)

            config, warnings = resolve_restore_options(config, self.force, log)

            call = build_add_secondary_database_call(config)
            command = call.render()
            result = AddSecondaryResult(
                instance=secondary.display_name,
                secondary_database=config.secondary_database,
                call=call,
                command=command,
                dry_run=self.dry_run,
                warnings=warnings,
            )

            if self.dry_run:
                log.info("DRY RUN - %s on %s", ACTION, secondary.display_name)
                log.info("Command:\n%s", command)
                return result

            log.debug("%s:\n%s", ACTION, command)
            secondary_sql.execute_procedure(call)

        result.executed = True
        log.info(result.message)
        return result

    def _check_version(self, sql: SqlConnector, target: ConnectionTarget) -> None:
        info = sql.detect_version()
        if info.version_major < MINIMUM_VERSION_MAJOR:
            raise UnsupportedVersionError(
                target.display_name, info.version_major, MINIMUM_VERSION_MAJOR
            )
