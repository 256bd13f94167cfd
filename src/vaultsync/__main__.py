"""CLI entry point for vaultsync."""

import argparse
from pathlib import Path

from . import __version__
from .config import Settings
from .logging import setup_logging
from .models import ConflictPolicy


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="vaultsync",
        description="Bidirectional sync between markdown vault task lines and Todoist",
    )
    parser.add_argument(
        "--vault",
        type=Path,
        default=None,
        help="Path to the vault containing .vaultsync.yml (default: current directory)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase logging verbosity (-v for INFO, -vv for DEBUG)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Path to write logs to file",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("sync", help="Sync tagged task lines with Todoist")

    create = commands.add_parser("create", help="Create a Todoist task from one line")
    create.add_argument("file", help="Vault-relative path of the document")
    create.add_argument("line", type=int, help="1-based line number")

    commands.add_parser("verify", help="Check that the Todoist API token works")
    commands.add_parser("projects", help="List Todoist projects")

    config = commands.add_parser("config", help="Show or change settings")
    config.add_argument("--token", dest="api_token", help="Todoist API token")
    config.add_argument("--marker", dest="sync_marker", help="Sync tag, e.g. #todoist")
    config.add_argument(
        "--project",
        dest="default_project_id",
        help="Default project ID for new tasks (empty string = Inbox)",
    )
    config.add_argument(
        "--interval",
        dest="sync_interval_minutes",
        type=int,
        help="Minutes between automatic syncs (0 disables)",
    )
    config.add_argument(
        "--policy",
        dest="conflict_policy",
        choices=[policy.value for policy in ConflictPolicy],
        help="How divergent edits are resolved",
    )

    return parser.parse_args(argv)


CONFIG_FIELDS = (
    "api_token",
    "sync_marker",
    "default_project_id",
    "sync_interval_minutes",
    "conflict_policy",
)


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_args(argv)

    # Build settings from CLI args
    settings_kwargs: dict = {}
    if args.vault:
        settings_kwargs["vault_root"] = args.vault
    if args.verbose:
        settings_kwargs["verbose"] = args.verbose
    if args.log_file:
        settings_kwargs["log_file"] = args.log_file

    settings = Settings(**settings_kwargs)

    # Setup logging based on verbosity
    setup_logging(settings.verbose, settings.log_file)

    vault_root = settings.vault_root

    if args.command == "sync":
        from .cli.sync import run_sync

        exit_code = run_sync(vault_root)
    elif args.command == "create":
        from .cli.task import run_create

        exit_code = run_create(vault_root, args.file, args.line)
    elif args.command == "verify":
        from .cli.account import run_verify

        exit_code = run_verify(vault_root)
    elif args.command == "projects":
        from .cli.account import run_projects

        exit_code = run_projects(vault_root)
    else:
        from .cli.settings import run_config

        changes = {
            name: getattr(args, name)
            for name in CONFIG_FIELDS
            if getattr(args, name) is not None
        }
        exit_code = run_config(vault_root, changes)

    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
