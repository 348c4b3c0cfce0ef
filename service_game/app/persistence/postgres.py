"""
PostgreSQL persistence layer for the Game Service.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional

import asyncpg
from shared.errors import ServiceError
from shared.logging import get_logger
from shared.metrics import MetricsCollector
from shared.retry import RetryPolicy, power_backoff
from ..rules.models import Outcome, PlayRecord

MAX_RETRY_ATTEMPTS = 3
BACKOFF_BASE = 3.0

# Failures of the connection rather than of the statement
TRANSIENT_ERRORS = (
    asyncpg.exceptions.PostgresConnectionError,
    asyncpg.exceptions.CannotConnectNowError,
    asyncpg.exceptions.TooManyConnectionsError,
    OSError,
    asyncio.TimeoutError,
)

INSERT_RESULT = "INSERT INTO play_results (username, playtime, result) VALUES ($1, $2, $3)"
SELECT_LATEST = "SELECT username, playtime, result FROM play_results ORDER BY playtime DESC LIMIT $1"
SELECT_FOR_USER = "SELECT username, playtime, result FROM play_results WHERE username = $1"
DELETE_ALL = "DELETE FROM play_results"
DELETE_FOR_USER = "DELETE FROM play_results WHERE username = $1"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def affected_rows(status: str) -> int:
    """Row count from a command tag such as ``INSERT 0 1`` or ``DELETE 3``."""
    try:
        return int(status.rsplit(" ", 1)[-1])
    except (AttributeError, ValueError):
        return 0


class ResultStore:
    """Stores and queries game results in PostgreSQL.

    Every public operation acquires its own connection from the pool inside
    the retry policy, so a retried attempt always starts on a fresh
    connection and nothing is held between calls.
    """

    def __init__(self,
                 dsn: str,
                 min_size: int = 2,
                 max_size: int = 10,
                 pool: Optional[Any] = None,
                 metrics: Optional[MetricsCollector] = None,
                 clock: Callable[[], datetime] = utc_now,
                 max_retries: int = MAX_RETRY_ATTEMPTS):
        self.dsn = dsn
        self.min_size = min_size
        self.max_size = max_size
        self.pool = pool
        self.clock = clock
        self.logger = get_logger("game.persistence.postgres")

        self.retry_policy = RetryPolicy(
            "postgres",
            config=power_backoff(max_retries, BACKOFF_BASE),
            retry_on=TRANSIENT_ERRORS,
            on_retry=metrics.record_retry if metrics else None,
        )

    async def start(self):
        """Start the persistence layer."""
        try:
            if self.pool is None:
                self.pool = await asyncpg.create_pool(
                    self.dsn,
                    min_size=self.min_size,
                    max_size=self.max_size,
                    command_timeout=30
                )

            await self._create_tables()

            self.logger.info("PostgreSQL persistence started")

        except Exception as e:
            self.logger.error("Failed to start PostgreSQL persistence", error=str(e))
            raise ServiceError("Failed to start PostgreSQL persistence", details={"error": str(e)}) from e

    async def stop(self):
        """Stop the persistence layer."""
        if self.pool:
            await self.pool.close()
            self.pool = None
            self.logger.info("PostgreSQL persistence stopped")

    async def _create_tables(self):
        """Create database tables."""
        async with self.pool.acquire() as conn:
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS play_results (
                    username TEXT NOT NULL,
                    playtime TIMESTAMP WITH TIME ZONE NOT NULL,
                    result TEXT NOT NULL
                );
            """)
            await conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_play_results_playtime ON play_results(playtime DESC);
            """)
            await conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_play_results_username ON play_results(username);
            """)

    def _require_pool(self):
        if self.pool is None:
            raise ServiceError("Result store is not started")
        return self.pool

    async def _execute(self, query: str, *args) -> int:
        """Run a command and return the number of rows it affected."""
        pool = self._require_pool()

        async def _attempt() -> int:
            async with pool.acquire() as conn:
                status = await conn.execute(query, *args)
            return affected_rows(status)

        return await self.retry_policy.execute(_attempt)

    async def _fetch(self, query: str, *args) -> List[PlayRecord]:
        pool = self._require_pool()

        async def _attempt() -> List[PlayRecord]:
            async with pool.acquire() as conn:
                rows = await conn.fetch(query, *args)
            return [self._row_to_record(row) for row in rows]

        return await self.retry_policy.execute(_attempt)

    async def save(self, username: str, outcome_label: str) -> bool:
        """Store one result. True iff exactly one row was inserted."""
        self.logger.info("Saving result", username=username, result=outcome_label)

        inserted = await self._execute(INSERT_RESULT, username, self.clock(), outcome_label)
        saved = inserted == 1

        self.logger.info("Finished saving result", username=username, saved=saved)
        return saved

    async def delete_all(self) -> bool:
        """Delete every result. True iff at least one row was removed."""
        self.logger.info("Deleting all results")

        deleted = await self._execute(DELETE_ALL)

        self.logger.info("Finished deleting all results", deleted=deleted)
        return deleted > 0

    async def delete_for_user(self, username: str) -> bool:
        """Delete one user's results. True iff at least one row was removed."""
        self.logger.info("Deleting results for user", username=username)

        deleted = await self._execute(DELETE_FOR_USER, username)

        self.logger.info("Finished deleting results for user", username=username, deleted=deleted)
        return deleted > 0

    async def list_latest(self, count: int) -> List[PlayRecord]:
        """Most recent results first, at most ``count`` of them."""
        self.logger.info("Fetching latest results", count=count)

        if count <= 0:
            return []

        return await self._fetch(SELECT_LATEST, count)

    async def list_for_user(self, username: str) -> List[PlayRecord]:
        """All results of one user, in no particular order."""
        self.logger.info("Fetching results for user", username=username)

        return await self._fetch(SELECT_FOR_USER, username)

    def _row_to_record(self, row) -> PlayRecord:
        """Convert database row to PlayRecord object."""
        return PlayRecord(
            username=row['username'],
            played_at=row['playtime'],
            outcome=Outcome(row['result'])
        )

    async def health_check(self) -> bool:
        """Check database health."""
        if self.pool is None:
            return False
        try:
            async with self.pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
                return True
        except Exception:
            return False
