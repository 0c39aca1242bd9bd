"""
Domain enums for log shipping configuration.

This module defines all enumeration types used in the domain layer.
"""

from enum import Enum, IntEnum


class AuthType(Enum):
    """Authentication types for SQL Server connections."""

    INTEGRATED = "integrated"
    SQL = "sql"


class RestoreMode(IntEnum):
    """
    Restore mode of the secondary database.

    NORECOVERY leaves the database restoring so further logs can be applied.
    STANDBY makes it readable between restores.
    """

    NORECOVERY = 0
    STANDBY = 1

    @classmethod
    def parse(cls, value: "RestoreMode | int | str") -> "RestoreMode":
        """
        Build a RestoreMode from its numeric code or symbolic name.

        Accepts 0/1, "0"/"1", and "NoRecovery"/"Standby" (any case).

        Raises:
            ValueError: If the value is not a known restore mode
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid restore mode: {value!r}")
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                raise ValueError(
                    f"Invalid restore mode: {value!r} (expected 0|NoRecovery or 1|Standby)"
                ) from None
        if isinstance(value, str):
            text = value.strip()
            if text.isdigit():
                return cls.parse(int(text))
            for member in cls:
                if member.name.lower() == text.lower():
                    return member
        raise ValueError(
            f"Invalid restore mode: {value!r} (expected 0|NoRecovery or 1|Standby)"
        )

    @property
    def label(self) -> str:
        """Display name as SQL Server documents it."""
        return "NoRecovery" if self is RestoreMode.NORECOVERY else "Standby"
