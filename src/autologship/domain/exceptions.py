"""
Domain exceptions.

Every failure of a log shipping configuration run is terminal for that run;
none of these are retried.
"""


class LogShippingError(Exception):
    """Base class for all AutoLogShip errors."""


class SqlConnectionError(LogShippingError):
    """Raised when a SQL Server instance cannot be reached."""

    def __init__(self, instance: str, message: str):
        super().__init__(message)
        self.instance = instance
        self.message = message

    def __str__(self) -> str:
        return f"Failure connecting to {self.instance}: {self.message}"


class NotFoundError(LogShippingError):
    """Raised when a referenced database does not exist on its instance."""

    def __init__(self, database: str, instance: str):
        super().__init__(database, instance)
        self.database = database
        self.instance = instance

    def __str__(self) -> str:
        return f"Database {self.database} does not exist on instance {self.instance}"


class ConfigurationConflictError(LogShippingError):
    """Raised when restore mode NoRecovery is combined with disconnect users."""


class UnsupportedVersionError(LogShippingError):
    """Raised when the secondary instance is older than the procedure supports."""

    def __init__(self, instance: str, version_major: int, minimum_major: int):
        super().__init__(instance, version_major, minimum_major)
        self.instance = instance
        self.version_major = version_major
        self.minimum_major = minimum_major

    def __str__(self) -> str:
        return (
            f"Instance {self.instance} is version {self.version_major}; "
            f"major version {self.minimum_major} (SQL Server 2008) or later is required"
        )


class RemoteExecutionError(LogShippingError):
    """Raised when the administrative procedure call fails on the secondary."""

    def __init__(self, instance: str, command: str, message: str):
        super().__init__(message)
        self.instance = instance
        self.command = command
        self.message = message

    def __str__(self) -> str:
        return f"Error executing the query on {self.instance}.\n{self.message}\n{self.command}"
