"""
AutoLogShip CLI entry point.

Parses arguments, merges them over the optional options file, and runs
SecondaryDatabaseService once.
"""

import argparse
import logging
import sys
from typing import Any, Dict

from rich.prompt import Prompt

from autologship.application.secondary_database_service import SecondaryDatabaseService
from autologship.domain.enums import RestoreMode
from autologship.domain.exceptions import (
    ConfigurationConflictError,
    LogShippingError,
    NotFoundError,
    RemoteExecutionError,
    SqlConnectionError,
    UnsupportedVersionError,
)
from autologship.domain.models import ConnectionTarget, Credential, SecondaryDatabaseConfig
from autologship.infrastructure.config_loader import ConfigLoader
from autologship.infrastructure.logging_config import setup_logging
from autologship.interface.formatted_console import ConsoleRenderer

logger = logging.getLogger(__name__)

# Exit codes
EXIT_OK = 0
EXIT_EXECUTION_FAILED = 1
EXIT_INVALID_INPUT = 2
EXIT_CONNECTION_FAILED = 3
EXIT_NOT_FOUND = 4
EXIT_INTERRUPTED = 130

# CLI dests that map one-to-one onto SecondaryDatabaseConfig fields
OPTION_FIELDS = (
    "secondary_database",
    "primary_database",
    "restore_delay",
    "restore_all",
    "restore_mode",
    "disconnect_users",
    "restore_threshold",
    "threshold_alert",
    "threshold_alert_enabled",
    "history_retention",
    "block_size",
    "buffer_count",
    "max_transfer_size",
)


def _restore_mode(value: str) -> RestoreMode:
    try:
        return RestoreMode.parse(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="autologship",
        description="AutoLogShip - add a log shipping secondary database on SQL Server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Example:\n"
            "  autologship --secondary sql2 --primary-server sql1 \\\n"
            "      --secondary-database DB1_DR --primary-database DB1 \\\n"
            "      --restore-threshold 45 --restore-mode Standby --disconnect-users"
        ),
    )

    # Global args
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    parser.add_argument("--log-file", type=str, help="Write logs to file")
    parser.add_argument("--dry-run", action="store_true", help="Show the command without executing it")
    parser.add_argument(
        "--force", action="store_true",
        help="With NoRecovery, turn off --disconnect-users instead of failing",
    )
    parser.add_argument("--targets", type=str, help="SQL targets JSON file (lets instances be referenced by id)")
    parser.add_argument("--config", type=str, help="JSON file with default log shipping options")

    # Instances
    conn = parser.add_argument_group("instances")
    conn.add_argument("--secondary", required=True, help="Secondary instance (HOST, HOST\\INSTANCE, HOST,PORT or target id)")
    conn.add_argument("--secondary-username", help="SQL login for the secondary (default: integrated auth)")
    conn.add_argument("--secondary-password", help="Password for --secondary-username (prompted if omitted)")
    conn.add_argument("--primary-server", help="Primary instance (HOST, HOST\\INSTANCE, HOST,PORT or target id)")
    conn.add_argument("--primary-username", help="SQL login for the primary (default: integrated auth)")
    conn.add_argument("--primary-password", help="Password for --primary-username (prompted if omitted)")
    conn.add_argument("--connect-timeout", type=int, help="Connection timeout in seconds (default 30)")

    # Log shipping options; None means "not given" so the options file can supply it
    opts = parser.add_argument_group("log shipping options")
    opts.add_argument("--secondary-database", help="Database on the secondary that receives the logs")
    opts.add_argument("--primary-database", help="Source database on the primary")
    opts.add_argument("--restore-delay", type=int, help="Minutes to wait before restoring a backup (default 0)")
    opts.add_argument("--restore-all", type=int, choices=[0, 1], help="1 restores all available backups per run (default 1)")
    opts.add_argument(
        "--restore-mode", type=_restore_mode, metavar="{0,1,NoRecovery,Standby}",
        help="Restore mode (default NoRecovery)",
    )
    opts.add_argument(
        "--disconnect-users", action=argparse.BooleanOptionalAction, default=None,
        help="Disconnect users during restores (Standby only)",
    )
    opts.add_argument("--restore-threshold", type=int, help="Minutes allowed between restores before alerting")
    opts.add_argument("--threshold-alert", type=int, help="Alert raised when the threshold is exceeded (default 14421)")
    opts.add_argument(
        "--threshold-alert-enabled", action=argparse.BooleanOptionalAction, default=None,
        help="Enable the threshold alert",
    )
    opts.add_argument("--history-retention", type=int, help="Minutes of history to keep (default 14420)")
    opts.add_argument("--block-size", type=int, help="Backup device block size (default: server default)")
    opts.add_argument("--buffer-count", type=int, help="Buffers used by backup/restore (default: server default)")
    opts.add_argument("--max-transfer-size", type=int, help="Max input/output request size in bytes (default: server default)")

    return parser


def _credential(username: str | None, password: str | None, label: str) -> Credential | None:
    """Build a credential, prompting for a missing password."""
    if not username:
        return None
    if password is None:
        password = Prompt.ask(f"Password for {username} on {label}", password=True)
    return Credential(username=username, password=password)


def build_inputs(
    args: argparse.Namespace,
    loader: ConfigLoader | None = None,
) -> tuple[ConnectionTarget, ConnectionTarget, SecondaryDatabaseConfig]:
    """
    Turn parsed arguments into the two targets and the config.

    Raises:
        ValueError: Missing or invalid input (includes pydantic ValidationError)
        FileNotFoundError: A referenced config file does not exist
    """
    loader = loader or ConfigLoader()
    targets = loader.load_sql_targets(args.targets) if args.targets else {}
    options: Dict[str, Any] = loader.load_options(args.config) if args.config else {}

    for name in OPTION_FIELDS:
        value = getattr(args, name)
        if value is not None:
            options[name] = value

    primary_ref = args.primary_server or options.get("primary_server")
    if not primary_ref:
        raise ValueError("--primary-server is required (or primary_server in the options file)")

    secondary = loader.resolve_target(
        args.secondary, targets,
        credential=_credential(args.secondary_username, args.secondary_password, args.secondary),
        connect_timeout=args.connect_timeout,
    )
    primary = loader.resolve_target(
        primary_ref, targets,
        credential=_credential(args.primary_username, args.primary_password, primary_ref),
        connect_timeout=args.connect_timeout,
    )

    # The procedure records the primary by its instance name
    options["primary_server"] = primary.server_instance if primary_ref in targets else primary_ref

    return secondary, primary, SecondaryDatabaseConfig(**options)


def run(args: argparse.Namespace, console: ConsoleRenderer) -> int:
    """Run one configuration and map failures to exit codes."""
    try:
        secondary, primary, config = build_inputs(args)
    except (ValueError, FileNotFoundError, PermissionError) as e:
        logger.debug("Invalid input", exc_info=True)
        console.error(f"Invalid input: {e}")
        return EXIT_INVALID_INPUT

    console.header(f"Log shipping secondary: {config.secondary_database} on {secondary.display_name}")
    if args.dry_run:
        console.warning("DRY RUN MODE - No changes will be made")

    service = SecondaryDatabaseService(
        dry_run=args.dry_run,
        force=args.force,
        logger=logging.getLogger("autologship.run"),
    )

    try:
        result = service.add_secondary_database(secondary, primary, config)
    except ConfigurationConflictError as e:
        console.error(str(e))
        return EXIT_INVALID_INPUT
    except SqlConnectionError as e:
        console.error(str(e))
        return EXIT_CONNECTION_FAILED
    except (NotFoundError, UnsupportedVersionError) as e:
        console.error(str(e))
        return EXIT_NOT_FOUND
    except RemoteExecutionError as e:
        console.error(f"Error executing the query on {e.instance}: {e.message}")
        console.render_command(e.command, title="Failed command")
        return EXIT_EXECUTION_FAILED
    except LogShippingError as e:
        console.error(str(e))
        return EXIT_EXECUTION_FAILED

    for warning in result.warnings:
        console.warning(warning)

    console.render_call_summary(result.instance, result.call)
    if result.dry_run:
        console.step(result.message)
        console.render_command(result.command, title="Would execute")
    else:
        console.success(result.message)
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """Main entry point for AutoLogShip CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        log_file=args.log_file,
    )
    console = ConsoleRenderer()

    try:
        return run(args, console)
    except KeyboardInterrupt:
        console.warning("Interrupted")
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
