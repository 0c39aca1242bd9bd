"""
Shared fixtures.

SQL Server access is replaced by MagicMock connectors so no instance or
ODBC driver is needed.
"""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from autologship.domain.models import ConnectionTarget, SecondaryDatabaseConfig


def make_connector(databases=(), version_major: int = 15) -> MagicMock:
    """Build a mock SqlConnector that knows a fixed set of databases."""
    connector = MagicMock(name="SqlConnector")
    connector.__enter__.return_value = connector
    connector.__exit__.return_value = False
    connector.detect_version.return_value = SimpleNamespace(
        server_name="TEST", version=f"{version_major}.0.2000.5",
        version_major=version_major, edition="Developer Edition",
    )
    connector.database_exists.side_effect = lambda name: name in databases
    return connector


class ConnectorFactory:
    """Hands out a prepared mock connector per target, keyed by server."""

    def __init__(self, connectors: dict[str, MagicMock]):
        self.connectors = connectors
        self.opened: list[str] = []

    def __call__(self, target: ConnectionTarget) -> MagicMock:
        self.opened.append(target.server)
        return self.connectors[target.server]


@pytest.fixture
def secondary_target() -> ConnectionTarget:
    return ConnectionTarget.from_instance_string("sql2")


@pytest.fixture
def primary_target() -> ConnectionTarget:
    return ConnectionTarget.from_instance_string("sql1")


@pytest.fixture
def base_options() -> dict:
    """Options of the DB1 -> DB1_DR scenario."""
    return {
        "secondary_database": "DB1_DR",
        "primary_server": "sql1",
        "primary_database": "DB1",
        "restore_delay": 0,
        "restore_threshold": 45,
        "history_retention": 14420,
    }


@pytest.fixture
def config(base_options) -> SecondaryDatabaseConfig:
    return SecondaryDatabaseConfig(**base_options)


@pytest.fixture
def secondary_connector() -> MagicMock:
    return make_connector(databases={"DB1_DR", "master"})


@pytest.fixture
def primary_connector() -> MagicMock:
    return make_connector(databases={"DB1", "master"})


@pytest.fixture
def connector_factory(secondary_connector, primary_connector) -> ConnectorFactory:
    return ConnectorFactory({"sql2": secondary_connector, "sql1": primary_connector})


@pytest.fixture
def connector_builder():
    """Expose make_connector to tests that need custom database sets."""
    return make_connector


@pytest.fixture
def make_factory():
    """Build a ConnectorFactory from a server -> connector mapping."""
    return ConnectorFactory
