"""
Tests for ConfigLoader: targets file, credential files, options file and
target resolution.
"""

import json

import pytest

from autologship.domain.enums import AuthType
from autologship.domain.models import Credential
from autologship.infrastructure.config_loader import ConfigLoader


def write_json(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestLoadSqlTargets:
    """Test cases for ConfigLoader.load_sql_targets."""

    def setup_method(self):
        self.loader = ConfigLoader()

    def test_loads_targets_by_id(self, tmp_path):
        path = write_json(tmp_path / "sql_targets.json", {
            "targets": [
                {"id": "sql1", "server": "sql1.corp.local", "name": "Primary"},
                {"id": "sql2", "server": "sql2.corp.local", "instance": "DR", "connect_timeout": 15},
            ]
        })

        targets = self.loader.load_sql_targets(path)

        assert set(targets) == {"sql1", "sql2"}
        assert targets["sql1"].auth_type == AuthType.INTEGRATED
        assert targets["sql1"].display_name == "Primary"
        assert targets["sql2"].server_instance == "sql2.corp.local\\DR"
        assert targets["sql2"].connect_timeout == 15

    def test_inline_credentials(self, tmp_path):
        path = write_json(tmp_path / "sql_targets.json", {
            "targets": [{"id": "sql2", "server": "sql2", "username": "logship", "password": "pw"}]
        })

        target = self.loader.load_sql_targets(path)["sql2"]

        assert target.auth_type == AuthType.SQL
        assert target.credential.username == "logship"
        assert target.credential.get_password() == "pw"

    def test_credential_file_relative_to_targets_file(self, tmp_path):
        (tmp_path / "credentials").mkdir()
        write_json(tmp_path / "credentials" / "sql2.json", {"username": "logship", "password": "pw"})
        path = write_json(tmp_path / "sql_targets.json", {
            "targets": [{"id": "sql2", "server": "sql2", "auth": "sql", "credential_file": "credentials/sql2.json"}]
        })

        target = self.loader.load_sql_targets(path)["sql2"]

        assert target.credential.username == "logship"
        assert target.credential.get_password() == "pw"

    def test_username_without_password(self, tmp_path):
        path = write_json(tmp_path / "sql_targets.json", {
            "targets": [{"id": "sql2", "server": "sql2", "username": "logship"}]
        })

        with pytest.raises(ValueError, match="no password"):
            self.loader.load_sql_targets(path)

    def test_missing_id(self, tmp_path):
        path = write_json(tmp_path / "sql_targets.json", {"targets": [{"server": "sql2"}]})

        with pytest.raises(ValueError, match="no 'id'"):
            self.loader.load_sql_targets(path)

    def test_invalid_target(self, tmp_path):
        path = write_json(tmp_path / "sql_targets.json", {
            "targets": [{"id": "bad", "server": "sql2", "port": 0}]
        })

        with pytest.raises(ValueError, match="Invalid target 'bad'"):
            self.loader.load_sql_targets(path)

    def test_file_not_found(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Hint"):
            self.loader.load_sql_targets(tmp_path / "missing.json")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "sql_targets.json"
        path.write_text("   ", encoding="utf-8")

        with pytest.raises(ValueError, match="empty"):
            self.loader.load_sql_targets(path)

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "sql_targets.json"
        path.write_text('{"targets": [', encoding="utf-8")

        with pytest.raises(ValueError, match="Invalid JSON"):
            self.loader.load_sql_targets(path)

    def test_not_an_object(self, tmp_path):
        path = write_json(tmp_path / "sql_targets.json", ["sql1"])

        with pytest.raises(ValueError, match="JSON object"):
            self.loader.load_sql_targets(path)


class TestLoadOptions:
    """Test cases for ConfigLoader.load_options."""

    def test_nested_options(self, tmp_path):
        path = write_json(tmp_path / "options.json", {
            "secondary_database_options": {"restore_mode": "Standby", "restore_threshold": 45}
        })

        assert ConfigLoader().load_options(path) == {"restore_mode": "Standby", "restore_threshold": 45}

    def test_top_level_options(self, tmp_path):
        path = write_json(tmp_path / "options.json", {"history_retention": 2880})

        assert ConfigLoader().load_options(path) == {"history_retention": 2880}

    def test_unknown_option(self, tmp_path):
        path = write_json(tmp_path / "options.json", {"restore_mod": 1})

        with pytest.raises(ValueError, match="restore_mod"):
            ConfigLoader().load_options(path)


class TestResolveTarget:
    """Test cases for ConfigLoader.resolve_target."""

    def setup_method(self):
        self.loader = ConfigLoader()

    def test_unknown_reference_parsed_as_instance(self):
        target = self.loader.resolve_target("sql2\\DR", {})

        assert target.server == "sql2"
        assert target.instance == "DR"
        assert target.connect_timeout == 30

    def test_known_reference(self, tmp_path):
        path = write_json(tmp_path / "sql_targets.json", {
            "targets": [{"id": "dr", "server": "sql2.corp.local", "port": 1435}]
        })
        targets = self.loader.load_sql_targets(path)

        target = self.loader.resolve_target("dr", targets)

        assert target.server_instance == "sql2.corp.local,1435"

    def test_overrides_applied_to_known_target(self, tmp_path):
        path = write_json(tmp_path / "sql_targets.json", {
            "targets": [{"id": "dr", "server": "sql2"}]
        })
        targets = self.loader.load_sql_targets(path)
        credential = Credential(username="logship", password="pw")

        target = self.loader.resolve_target("dr", targets, credential=credential, connect_timeout=5)

        assert target.auth_type == AuthType.SQL
        assert target.credential is credential
        assert target.connect_timeout == 5
        assert targets["dr"].auth_type == AuthType.INTEGRATED
