"""
Database CLI Commands

Database operations: init, reconcile
"""
import asyncio

from paperdesk.cli.base import Command
from paperdesk.database import build_engine, create_all
from paperdesk.errors import APIError
from paperdesk.services.question_paper_store import reconcile_paper_status


class DbCommand(Command):
    """Database CLI command handler."""

    def execute(self, args) -> int:
        """Execute database command."""
        if args.db_action == "init":
            return self._init(args)
        elif args.db_action == "reconcile":
            return self._reconcile(args)
        else:
            print("Error: Unknown database action")
            return 1

    def _init(self, args) -> int:
        """Create any missing tables."""
        print("=== Database Initialization ===")
        if self.dry_run:
            print(f"[DRY RUN] Would create tables on {self.database_url}")
            return 0

        async def run():
            engine = build_engine(self.database_url)
            try:
                await create_all(engine)
            finally:
                await engine.dispose()

        asyncio.run(run())
        print("✓ Tables created")
        return 0

    def _reconcile(self, args) -> int:
        """Repair question_paper_status drift between assignments and papers."""
        print("=== Paper Status Reconciliation ===")
        if self.dry_run:
            print("[DRY RUN] Would reconcile assignment paper status")
            return 0

        try:
            corrected = self.run_with_session(reconcile_paper_status)
        except APIError as e:
            print(f"Error: {e.message}")
            return 1

        print(f"✓ Corrected {corrected} assignment(s)")
        return 0
