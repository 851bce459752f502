import asyncio

import pytest

from elo_bot.config import EloSettings
from elo_bot.database.database import Database

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
def settings():
    return EloSettings(initial_elo=400, k_factor=32)


@pytest.fixture
def run_with_db():
    """
    Run an async test body against a fresh in-memory database.

    The engine is bound to the event loop that created it, so setup, the
    test body and teardown all share one asyncio.run call.
    """

    def runner(test_body):
        async def _run():
            db = Database(TEST_DB_URL)
            await db.initialize()
            try:
                return await test_body(db)
            finally:
                await db.close()

        return asyncio.run(_run())

    return runner
