"""
Shared plumbing for CLI command handlers
"""
import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from paperdesk.config.settings import settings
from paperdesk.database import build_engine, build_sessionmaker
from paperdesk.rbac import Identity, Role

T = TypeVar("T")

CLI_IDENTITY = Identity(role=Role.ADMIN, username="cli")


class Command:
    """CLI command handler with its own engine per invocation."""

    def __init__(self, dry_run: bool = False, database_url: Optional[str] = None):
        self.dry_run = dry_run
        self.database_url = database_url or settings.DATABASE_URL

    def run_with_session(self, work: Callable[[AsyncSession], Awaitable[T]]) -> T:
        async def runner():
            engine = build_engine(self.database_url)
            try:
                async with build_sessionmaker(engine)() as session:
                    return await work(session)
            finally:
                await engine.dispose()

        return asyncio.run(runner())

    def execute(self, args) -> int:
        raise NotImplementedError
