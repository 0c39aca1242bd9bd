"""
SQL Server connection and query execution module.

Handles:
- Connection string building
- ODBC driver detection and fallback
- SQL Server version detection
- Database existence checks
- Parameterized procedure execution
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List

import pyodbc

from autologship.domain.enums import AuthType
from autologship.domain.exceptions import RemoteExecutionError, SqlConnectionError

if TYPE_CHECKING:
    from autologship.application.command_builder import ProcedureCall
    from autologship.domain.models import ConnectionTarget

logger = logging.getLogger(__name__)


@dataclass
class SqlServerInfo:
    """SQL Server instance information."""
    server_name: str
    version: str
    version_major: int
    edition: str


def _odbc_value(value: str) -> str:
    """Brace-quote a connection string value so ';' and '}' survive."""
    return "{" + value.replace("}", "}}") + "}"


class SqlConnector:
    """
    SQL Server connection manager.

    Holds one open connection for the duration of a run. Use as a context
    manager so the connection is closed on every exit path:

        with SqlConnector(target) as sql:
            if sql.database_exists("DB1"):
                ...
    """

    def __init__(self, target: ConnectionTarget):
        """
        Initialize SQL connector.

        Args:
            target: Instance address, authentication and timeout
        """
        self.target = target
        self.server_instance = target.server_instance
        self._connection_string: str | None = None
        self._connection: pyodbc.Connection | None = None
        self._server_info: SqlServerInfo | None = None

        logger.debug(
            "SqlConnector initialized for %s (auth=%s)",
            self.server_instance, target.auth_type.value
        )

    def __enter__(self) -> "SqlConnector":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _detect_odbc_driver(self) -> str:
        """
        Detect best available ODBC driver.

        Returns:
            ODBC driver name

        Raises:
            RuntimeError: If no suitable driver found
        """
        drivers = pyodbc.drivers()
        logger.debug("Available ODBC drivers: %s", drivers)

        # Preferred drivers (newest first)
        preferred = [
            "ODBC Driver 18 for SQL Server",
            "ODBC Driver 17 for SQL Server",
            "ODBC Driver 13 for SQL Server",
            "ODBC Driver 11 for SQL Server"
        ]

        for driver in preferred:
            if driver in drivers:
                logger.debug("Using ODBC driver: %s", driver)
                return driver

        # Fallback drivers
        fallback = [
            "SQL Server Native Client 11.0",
            "SQL Server Native Client 10.0",
            "SQL Server"
        ]

        for driver in fallback:
            if driver in drivers:
                logger.warning("Using fallback ODBC driver: %s", driver)
                return driver

        raise RuntimeError("No SQL Server ODBC driver found. Please install ODBC Driver 17 or 18.")

    def build_connection_string(self) -> str:
        """
        Build ODBC connection string.

        Returns:
            Connection string

        Raises:
            ValueError: If SQL authentication is requested without a credential
        """
        if self._connection_string:
            return self._connection_string

        driver = self._detect_odbc_driver()

        parts = [
            f"DRIVER={{{driver}}}",
            f"SERVER={self.server_instance}",
            "DATABASE=master",
            "Encrypt=no",  # Disable encryption for compatibility
            "TrustServerCertificate=yes"
        ]

        if self.target.auth_type == AuthType.INTEGRATED:
            parts.append("Trusted_Connection=yes")
        else:
            credential = self.target.credential
            if credential is None:
                raise ValueError("Username and password required for SQL authentication")
            parts.append(f"UID={_odbc_value(credential.username)}")
            parts.append(f"PWD={_odbc_value(credential.get_password())}")

        self._connection_string = ";".join(parts)
        logger.debug("Connection string built (credentials masked)")
        return self._connection_string

    def connect(self) -> pyodbc.Connection:
        """
        Open the connection (no-op if already open).

        Autocommit is on so administrative procedures run in their own
        transaction scope.

        Raises:
            SqlConnectionError: If the instance cannot be reached
        """
        if self._connection is not None:
            return self._connection

        try:
            conn_str = self.build_connection_string()
            self._connection = pyodbc.connect(
                conn_str, autocommit=True, timeout=self.target.connect_timeout
            )
        except (pyodbc.Error, RuntimeError, ValueError) as e:
            logger.error("Connection failed for %s: %s", self.server_instance, e)
            raise SqlConnectionError(self.server_instance, str(e)) from e

        logger.info("Connected to %s", self.server_instance)
        return self._connection

    def close(self) -> None:
        """Close the connection if open."""
        if self._connection is None:
            return
        try:
            self._connection.close()
        except pyodbc.Error as e:
            logger.debug("Ignoring error while closing %s: %s", self.server_instance, e)
        finally:
            self._connection = None
            logger.debug("Connection to %s closed", self.server_instance)

    def detect_version(self) -> SqlServerInfo:
        """
        Detect SQL Server version and properties.

        Returns:
            SqlServerInfo object

        Raises:
            RemoteExecutionError: If the query fails
        """
        if self._server_info:
            return self._server_info

        # PARSENAME extracts the major version on SQL 2008
        # (ProductMajorVersion was added in SQL 2012)
        rows = self.execute_query("""
            SELECT
                CAST(SERVERPROPERTY('ServerName') AS NVARCHAR(256)) AS ServerName,
                CAST(SERVERPROPERTY('ProductVersion') AS NVARCHAR(128)) AS Version,
                CAST(PARSENAME(CAST(SERVERPROPERTY('ProductVersion') AS NVARCHAR(128)), 4) AS INT) AS VersionMajor,
                CAST(SERVERPROPERTY('Edition') AS NVARCHAR(256)) AS Edition
        """)
        row = rows[0] if rows else {}

        self._server_info = SqlServerInfo(
            server_name=row.get("ServerName") or "",
            version=row.get("Version") or "",
            version_major=row.get("VersionMajor") or 0,
            edition=row.get("Edition") or "",
        )

        logger.info(
            "Detected SQL Server %s (%s) on %s",
            self._server_info.version, self._server_info.edition, self.server_instance
        )
        return self._server_info

    def database_exists(self, database: str) -> bool:
        """
        Check whether a database exists on this instance.

        Args:
            database: Database name (matched with the server collation)
        """
        exists = self.execute_scalar(
            "SELECT COUNT(*) FROM sys.databases WHERE name = ?", (database,)
        )
        logger.debug("Database %s on %s: exists=%s", database, self.server_instance, bool(exists))
        return bool(exists)

    def execute_query(self, query: str, params: tuple = ()) -> List[Dict[str, Any]]:
        """
        Execute SQL query and return results as list of dictionaries.

        Args:
            query: SQL query string with ? placeholders
            params: Placeholder values

        Returns:
            List of dictionaries (column name -> value)

        Raises:
            RemoteExecutionError: If query execution fails
        """
        connection = self.connect()
        cursor = None
        try:
            cursor = connection.cursor()
            cursor.execute(query, *params)

            # Get column names
            columns = [column[0] for column in cursor.description] if cursor.description else []
            if not columns:
                return []

            results = []
            for row in cursor.fetchall():
                row_dict = {}
                for i, column in enumerate(columns):
                    value = row[i]
                    # Handle special types
                    if value is None or isinstance(value, (str, int, float, bool)):
                        row_dict[column] = value
                    else:
                        row_dict[column] = str(value)
                results.append(row_dict)

            logger.debug("Query returned %d rows, %d columns", len(results), len(columns))
            return results
        except pyodbc.Error as e:
            logger.error("Query failed on %s: %s", self.server_instance, e)
            raise RemoteExecutionError(self.server_instance, query.strip(), str(e)) from e
        finally:
            if cursor is not None:
                cursor.close()

    def execute_scalar(self, query: str, params: tuple = ()) -> Any:
        """
        Execute query and return single scalar value.

        Returns:
            Single value from first row, first column
        """
        results = self.execute_query(query, params)
        if results:
            first_row = results[0]
            return list(first_row.values())[0] if first_row else None
        return None

    def execute_procedure(self, call: ProcedureCall) -> int:
        """
        Execute a stored procedure call with bound parameters.

        Drains every result set so errors raised late in the procedure
        still surface here.

        Returns:
            Row count reported by the driver (-1 when unknown)

        Raises:
            RemoteExecutionError: If the procedure fails; carries the
                rendered command text
        """
        connection = self.connect()
        cursor = None
        try:
            cursor = connection.cursor()
            logger.debug("Executing %s with %d parameters", call.procedure, len(call.arguments))
            cursor.execute(call.to_sql(), *call.parameters)
            rowcount = cursor.rowcount
            while cursor.nextset():
                pass
            return rowcount
        except pyodbc.Error as e:
            logger.error("Error executing the query on %s: %s", self.server_instance, e)
            raise RemoteExecutionError(self.server_instance, call.render(), str(e)) from e
        finally:
            if cursor is not None:
                cursor.close()
