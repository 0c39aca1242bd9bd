"""
Configuration loader module.

Handles loading and validation of the optional JSON configuration files:
- sql_targets.json: named SQL Server connection targets
- logship options file: defaults for SecondaryDatabaseConfig fields
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict

from pydantic import ValidationError

from autologship.domain.enums import AuthType
from autologship.domain.models import ConnectionTarget, Credential, SecondaryDatabaseConfig

logger = logging.getLogger(__name__)


class ConfigLoader:
    """
    Load and validate configuration files.

    Paths are used as given; credential files referenced from a targets file
    are resolved relative to that file's directory.
    """

    def _load_json_file(self, filepath: Path, required: bool = True) -> dict | None:
        """
        Load and parse a JSON file with clear error messages.

        Args:
            filepath: Absolute or relative path to JSON file
            required: If True, raises exception on error. If False, returns None.

        Returns:
            Parsed JSON as dict, or None if optional file not found

        Raises:
            FileNotFoundError: If required file doesn't exist
            ValueError: If JSON is malformed, empty or not an object
            PermissionError: If file cannot be read
        """
        if not filepath.exists():
            if required:
                raise FileNotFoundError(
                    f"Configuration file not found: {filepath}\n"
                    f"Hint: Copy the .example.json file and customize it."
                )
            logger.debug("Optional config not found: %s", filepath)
            return None

        try:
            content = filepath.read_text(encoding="utf-8")
        except PermissionError as e:
            raise PermissionError(
                f"Cannot read config file (permission denied): {filepath}\n"
                f"Hint: Check file permissions or if another process has it locked."
            ) from e

        if not content.strip():
            raise ValueError(
                f"Configuration file is empty: {filepath}\n"
                f"Hint: Add valid JSON content or copy from .example.json"
            )

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ValueError(
                f"Invalid JSON in config file: {filepath}\n"
                f"Error at line {e.lineno}, column {e.colno}: {e.msg}\n"
                f"Hint: Validate JSON syntax. Note: .json files cannot have comments."
            ) from e

        if not isinstance(data, dict):
            raise ValueError(f"Configuration file must contain a JSON object: {filepath}")
        return data

    def load_sql_targets(self, filepath: str | Path) -> Dict[str, ConnectionTarget]:
        """
        Load named SQL Server targets.

        Args:
            filepath: Path to a {"targets": [...]} JSON file

        Returns:
            Mapping of target id to ConnectionTarget

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        path = Path(filepath)
        logger.info("Loading SQL targets from: %s", path)
        data = self._load_json_file(path, required=True)

        targets: Dict[str, ConnectionTarget] = {}
        for index, item in enumerate(data.get("targets", [])):
            target_id = item.get("id")
            if not target_id:
                raise ValueError(f"Target #{index + 1} in {path} has no 'id'")

            username = item.get("username")
            password = item.get("password")
            credential_file = item.get("credential_file")
            if credential_file and not password:
                creds = self._load_credential_file(credential_file, path.parent)
                username = creds.get("username") or username
                password = creds.get("password")

            credential = None
            if username:
                if password is None:
                    raise ValueError(f"Target '{target_id}' has a username but no password")
                credential = Credential(username=username, password=password)

            try:
                target = ConnectionTarget(
                    server=item.get("server", ""),
                    instance=item.get("instance"),
                    port=item.get("port"),
                    auth=item.get("auth", "sql" if credential else "integrated"),
                    credential=credential,
                    connect_timeout=item.get("connect_timeout", 30),
                    name=item.get("name"),
                )
            except ValidationError as e:
                raise ValueError(f"Invalid target '{target_id}' in {path}:\n{e}") from e

            targets[target_id] = target
            logger.debug("Loaded target: %s -> %s", target_id, target.server_instance)

        logger.info("Loaded %d SQL Server targets", len(targets))
        return targets

    def _load_credential_file(self, filepath: str, base_dir: Path) -> dict:
        """
        Load credentials from a JSON file.

        Args:
            filepath: Path to credential file (relative to base_dir or absolute)
            base_dir: Directory of the file that referenced it

        Returns:
            Dictionary with 'username' and 'password' keys
        """
        path = Path(filepath)
        if not path.is_absolute():
            path = base_dir / filepath

        logger.debug("Loading credentials from: %s", path)
        data = self._load_json_file(path, required=False)

        if data is None:
            logger.warning("Credential file not found: %s", path)
            return {}

        return {
            "username": data.get("username"),
            "password": data.get("password"),
        }

    def load_options(self, filepath: str | Path) -> Dict[str, Any]:
        """
        Load default SecondaryDatabaseConfig values.

        Accepts either the field names at the top level or nested under
        "secondary_database_options".

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If the file contains unknown option names
        """
        path = Path(filepath)
        logger.info("Loading log shipping options from: %s", path)
        data = self._load_json_file(path, required=True)
        options = data.get("secondary_database_options", data)

        unknown = sorted(set(options) - set(SecondaryDatabaseConfig.model_fields))
        if unknown:
            raise ValueError(f"Unknown option(s) in {path}: {', '.join(unknown)}")

        logger.debug("Loaded %d option defaults", len(options))
        return dict(options)

    def resolve_target(
        self,
        reference: str,
        targets: Dict[str, ConnectionTarget],
        credential: Credential | None = None,
        connect_timeout: int | None = None,
    ) -> ConnectionTarget:
        """
        Resolve a CLI target reference.

        A reference matching a target id returns that target (an explicit
        credential or timeout overrides the file's). Anything else is parsed
        as an instance string.
        """
        target = targets.get(reference)
        if target is None:
            return ConnectionTarget.from_instance_string(
                reference, credential=credential, connect_timeout=connect_timeout or 30
            )

        updates: Dict[str, Any] = {}
        if credential is not None:
            updates["credential"] = credential
            updates["auth_type"] = AuthType.SQL
        if connect_timeout is not None:
            updates["connect_timeout"] = connect_timeout
        if updates:
            target = target.model_copy(update=updates)
        logger.debug("Resolved target '%s' to %s", reference, target.server_instance)
        return target
