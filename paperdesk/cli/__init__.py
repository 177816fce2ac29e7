#!/usr/bin/env python3
"""
PaperDesk Administration CLI

Usage:
    python -m paperdesk.cli <command> [options]

Commands:
    db          Database operations (init, reconcile)
    faculty     Faculty directory (add, list)
    token       Identity tokens for development (issue)

Environment:
    DATABASE_URL    Async SQLAlchemy URL (default: local SQLite file)
    JWT_SECRET_KEY  Signing key shared with the API
    LOG_LEVEL       DEBUG|INFO|WARNING|ERROR
"""
import sys
import argparse
import logging
from typing import Optional

from paperdesk.cli.db_commands import DbCommand
from paperdesk.cli.faculty_commands import FacultyCommand
from paperdesk.cli.token_commands import TokenCommand


def setup_logging(level: str = "INFO") -> None:
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def create_parser() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="paperdesk",
        description="Faculty assignment and question paper scrutiny CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s db init
  %(prog)s faculty add --id F1 --name "Asha Rao" --email asha@example.edu
  %(prog)s token issue --role faculty --faculty-id F1
  %(prog)s db reconcile
        """
    )

    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 1.0.0"
    )

    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--database-url",
        default=None,
        help="Override DATABASE_URL for this invocation"
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be done without executing"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Database commands
    db_parser = subparsers.add_parser("db", help="Database operations")
    db_subparsers = db_parser.add_subparsers(dest="db_action")
    db_subparsers.add_parser("init", help="Create missing tables")
    db_subparsers.add_parser("reconcile", help="Align assignment paper status with stored papers")

    # Faculty commands
    faculty_parser = subparsers.add_parser("faculty", help="Faculty directory")
    faculty_subparsers = faculty_parser.add_subparsers(dest="faculty_action")

    add_parser = faculty_subparsers.add_parser("add", help="Register a faculty profile")
    add_parser.add_argument("--id", dest="faculty_id", required=True, help="Faculty ID")
    add_parser.add_argument("--name", dest="full_name", required=True, help="Full name as on record")
    add_parser.add_argument("--username", help="Login username")
    add_parser.add_argument("--email", help="Email address")
    add_parser.add_argument("--phone", help="Phone number")
    add_parser.add_argument("--campus-name", help="Campus name")
    add_parser.add_argument("--qualification", help="Highest qualification")
    add_parser.add_argument("--expertise", help="Subject expertise")

    faculty_subparsers.add_parser("list", help="List faculty profiles")

    # Token commands
    token_parser = subparsers.add_parser("token", help="Identity tokens")
    token_subparsers = token_parser.add_subparsers(dest="token_action")

    issue_parser = token_subparsers.add_parser("issue", help="Issue a signed identity token")
    issue_parser.add_argument("--role", choices=["admin", "faculty"], required=True)
    issue_parser.add_argument("--faculty-id", help="Faculty ID (required for faculty tokens)")
    issue_parser.add_argument("--username", help="Username claim")
    issue_parser.add_argument("--minutes", type=int, default=None, help="Lifetime in minutes")

    return parser


def main(args: Optional[list] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    parsed = parser.parse_args(args)

    if not parsed.command:
        parser.print_help()
        return 1

    setup_logging(parsed.log_level)

    command_map = {
        "db": DbCommand,
        "faculty": FacultyCommand,
        "token": TokenCommand,
    }

    if parsed.command in command_map:
        handler = command_map[parsed.command](
            dry_run=parsed.dry_run,
            database_url=parsed.database_url
        )
        return handler.execute(parsed)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
