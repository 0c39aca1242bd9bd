"""
Domain models for log shipping configuration.

Defines the two connection targets of a run and the option set that is sent
to sp_add_log_shipping_secondary_database. All models are transient: they
live for one invocation and are discarded afterwards.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from .enums import AuthType, RestoreMode

# Procedure defaults; 14421 is the secondary restore threshold alert message
DEFAULT_THRESHOLD_ALERT = 14421
DEFAULT_HISTORY_RETENTION = 14420

# Sentinel meaning "let the server choose" for block size and buffer count
NOT_SET = -1


class Credential(BaseModel):
    """
    Domain model for SQL authentication credentials.

    Securely handles username/password combinations.
    """

    username: str = Field(..., description="SQL login name")
    password: SecretStr = Field(..., description="SQL login password")

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        """Validate username is not empty."""
        if not v or not v.strip():
            raise ValueError("Username cannot be empty")
        return v.strip()

    def get_password(self) -> str:
        """Get the plain text password."""
        return self.password.get_secret_value()  # pylint: disable=no-member


class ConnectionTarget(BaseModel):
    """
    A SQL Server instance to connect to.

    One run uses two targets: the secondary (where the procedure runs) and
    the primary (where the source database must exist).
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    server: str = Field(..., description="SQL Server host name or IP")
    instance: Optional[str] = Field(None, description="Named instance (null for default)")
    port: Optional[int] = Field(None, description="TCP port (null for default/browser)")
    auth_type: AuthType = Field(AuthType.INTEGRATED, description="Authentication method", alias="auth")
    credential: Optional[Credential] = Field(None, description="SQL credentials (auth=sql only)")
    connect_timeout: int = Field(30, description="Seconds to wait for SQL connection")
    name: Optional[str] = Field(None, description="Human-readable display name")

    @field_validator("auth_type", mode="before")
    @classmethod
    def normalize_auth(cls, v):
        """Accept auth strings in any case."""
        if isinstance(v, str):
            return AuthType(v.strip().lower())
        return v

    @field_validator("server")
    @classmethod
    def validate_server(cls, v: str) -> str:
        """Validate server name format."""
        if not v or not v.strip():
            raise ValueError("Server name cannot be empty")
        return v.strip()

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: Optional[int]) -> Optional[int]:
        """Validate port number."""
        if v is not None and (v < 1 or v > 65535):
            raise ValueError("Port must be between 1 and 65535")
        return v

    @classmethod
    def from_instance_string(
        cls,
        value: str,
        credential: Credential | None = None,
        connect_timeout: int = 30,
    ) -> "ConnectionTarget":
        """
        Parse "HOST", "HOST\\INSTANCE" or "HOST,PORT" into a target.

        A credential switches the target to SQL authentication.
        """
        text = (value or "").strip()
        server, instance, port = text, None, None
        if "," in text:
            server, port_text = text.split(",", 1)
            try:
                port = int(port_text.strip())
            except ValueError:
                raise ValueError(f"Invalid port in instance string: {value!r}") from None
        elif "\\" in text:
            server, instance = text.split("\\", 1)
            instance = instance.strip() or None
        return cls(
            server=server,
            instance=instance,
            port=port,
            auth_type=AuthType.SQL if credential else AuthType.INTEGRATED,
            credential=credential,
            connect_timeout=connect_timeout,
        )

    @property
    def server_instance(self) -> str:
        """Server instance string for connection."""
        if self.port:
            return f"{self.server},{self.port}"
        elif self.instance:
            return f"{self.server}\\{self.instance}"
        return self.server

    @property
    def display_name(self) -> str:
        """Human-readable name for messages; falls back to the instance string."""
        return self.name or self.server_instance


class SecondaryDatabaseConfig(BaseModel):
    """
    Options for registering a log shipping secondary database.

    Field names follow the procedure parameters; restore_mode accepts the
    numeric code or the symbolic name and is normalized to RestoreMode.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    secondary_database: str
    primary_server: str
    primary_database: str
    restore_delay: int = Field(0, ge=0, description="Minutes to wait before restoring a backup")
    restore_all: int = Field(1, description="1 restores all available backups per job run")
    restore_mode: RestoreMode = RestoreMode.NORECOVERY
    disconnect_users: bool = False
    restore_threshold: int = Field(..., ge=0, description="Minutes allowed between restores before alerting")
    threshold_alert: int = DEFAULT_THRESHOLD_ALERT
    threshold_alert_enabled: bool = False
    history_retention: int = Field(DEFAULT_HISTORY_RETENTION, ge=0, description="Minutes of history kept")
    block_size: int = NOT_SET
    buffer_count: int = NOT_SET
    max_transfer_size: Optional[int] = Field(None, ge=0)

    @field_validator("secondary_database", "primary_server", "primary_database")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Names cannot be empty."""
        if not v or not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()

    @field_validator("restore_mode", mode="before")
    @classmethod
    def parse_restore_mode(cls, v):
        """Accept 0/1 or NoRecovery/Standby."""
        return RestoreMode.parse(v)

    @field_validator("restore_all", mode="before")
    @classmethod
    def validate_restore_all(cls, v):
        """restore_all is a 0/1 switch."""
        if isinstance(v, bool):
            return int(v)
        if v not in (0, 1):
            raise ValueError("restore_all must be 0 or 1")
        return v

    @field_validator("block_size", "buffer_count")
    @classmethod
    def validate_optional_size(cls, v: int) -> int:
        """Either the -1 sentinel or a positive value."""
        if v != NOT_SET and v < 1:
            raise ValueError("Value must be -1 (server default) or a positive integer")
        return v

    @property
    def disconnect_users_flag(self) -> int:
        """disconnect_users as the 0/1 value the procedure expects."""
        return 1 if self.disconnect_users else 0

    @property
    def threshold_alert_enabled_flag(self) -> int:
        """threshold_alert_enabled as the 0/1 value the procedure expects."""
        return 1 if self.threshold_alert_enabled else 0

    @property
    def has_mode_conflict(self) -> bool:
        """Disconnecting users is only meaningful in standby mode."""
        return self.restore_mode == RestoreMode.NORECOVERY and self.disconnect_users
