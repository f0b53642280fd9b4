# blogapi/database.py
import os
import re
import logging
import itertools
from contextlib import asynccontextmanager
from typing import Optional, Dict, List, Any

import aiosqlite
import asyncpg

from blogapi.config import DatabaseConfig
from blogapi.errors import DuplicateKeyError, StoreError

logger = logging.getLogger(__name__)

SQLITE = 'sqlite'
POSTGRES = 'postgres'

_PLACEHOLDER = re.compile(r'\?')

SQLITE_NOW = "strftime('%Y-%m-%dT%H:%M:%fZ', 'now')"
POSTGRES_NOW = "CURRENT_TIMESTAMP"

# case-insensitive comparison function per dialect
SQLITE_FOLD = 'casefold'
POSTGRES_FOLD = 'lower'


def _casefold(value):
    if isinstance(value, str):
        return value.casefold()
    return value


def to_postgres_placeholders(query: str) -> str:
    """Rewrite sqlite-style ``?`` placeholders into asyncpg ``$1, $2, ...``."""
    counter = itertools.count(1)
    return _PLACEHOLDER.sub(lambda _match: f"${next(counter)}", query)


def _affected_rows(status: str) -> int:
    # asyncpg returns the command tag, e.g. "UPDATE 1" / "DELETE 0"
    if not status:
        return 0
    last = status.split()[-1]
    return int(last) if last.isdigit() else 0


class Database:
    """Connection handle for the post/category store.

    Queries are written once with ``?`` placeholders; in PostgreSQL mode they
    are rewritten for asyncpg and run on a pool, in SQLite mode each call uses
    a short-lived aiosqlite connection.
    """

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self.use_postgres = config.use_postgres
        self.pool: Optional[asyncpg.Pool] = None
        self._initialized = False

    @property
    def dialect(self) -> str:
        return POSTGRES if self.use_postgres else SQLITE

    @property
    def now_sql(self) -> str:
        """SQL expression for the store's current timestamp."""
        return POSTGRES_NOW if self.use_postgres else SQLITE_NOW

    async def initialize(self):
        """Initialize database connection pool and schema."""
        if self._initialized:
            return

        if self.use_postgres:
            try:
                self.pool = await asyncpg.create_pool(
                    min_size=self.config.pool_min_size,
                    max_size=self.config.pool_max_size,
                    **self.config.postgres_kwargs()
                )
                logger.info(f"PostgreSQL connection pool created: {self.config.host}:{self.config.port}")
                await self._initialize_postgres_schema()
            except Exception as e:
                logger.error(f"PostgreSQL pool creation failed: {e}", exc_info=True)
                raise
        else:
            await self._initialize_sqlite_schema()

        self._initialized = True

    async def _initialize_postgres_schema(self):
        """Initialize PostgreSQL database schema."""
        async with self.pool.acquire() as conn:
            await conn.execute('''
                CREATE TABLE IF NOT EXISTS categories (
                    id VARCHAR(32) PRIMARY KEY,
                    name VARCHAR(50) NOT NULL UNIQUE,
                    description VARCHAR(200) NOT NULL DEFAULT '',
                    created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
                )
            ''')
            await conn.execute('''
                CREATE TABLE IF NOT EXISTS posts (
                    id VARCHAR(32) PRIMARY KEY,
                    title VARCHAR(200) NOT NULL,
                    content TEXT NOT NULL,
                    excerpt VARCHAR(300) NOT NULL DEFAULT '',
                    author TEXT NOT NULL DEFAULT 'Anonymous',
                    category TEXT NOT NULL DEFAULT 'General',
                    tags TEXT NOT NULL DEFAULT '[]',
                    status VARCHAR(16) NOT NULL DEFAULT 'draft' CHECK (status IN ('draft', 'published')),
                    view_count INTEGER NOT NULL DEFAULT 0 CHECK (view_count >= 0),
                    created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
                )
            ''')
            await conn.execute('CREATE INDEX IF NOT EXISTS idx_posts_status ON posts(status)')
            await conn.execute('CREATE INDEX IF NOT EXISTS idx_posts_category ON posts(category)')
            await conn.execute('CREATE INDEX IF NOT EXISTS idx_posts_created_at ON posts(created_at DESC)')

        logger.info("PostgreSQL blog database schema initialized")

    async def _initialize_sqlite_schema(self):
        """Initialize SQLite database schema."""
        directory = os.path.dirname(self.config.database_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        async with aiosqlite.connect(self.config.database_path) as conn:
            await conn.execute(f'''
                CREATE TABLE IF NOT EXISTS categories (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL UNIQUE,
                    description TEXT NOT NULL DEFAULT '',
                    created_at TEXT NOT NULL DEFAULT ({SQLITE_NOW}),
                    updated_at TEXT NOT NULL DEFAULT ({SQLITE_NOW})
                )
            ''')
            await conn.execute(f'''
                CREATE TABLE IF NOT EXISTS posts (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    content TEXT NOT NULL,
                    excerpt TEXT NOT NULL DEFAULT '',
                    author TEXT NOT NULL DEFAULT 'Anonymous',
                    category TEXT NOT NULL DEFAULT 'General',
                    tags TEXT NOT NULL DEFAULT '[]',
                    status TEXT NOT NULL DEFAULT 'draft' CHECK (status IN ('draft', 'published')),
                    view_count INTEGER NOT NULL DEFAULT 0 CHECK (view_count >= 0),
                    created_at TEXT NOT NULL DEFAULT ({SQLITE_NOW}),
                    updated_at TEXT NOT NULL DEFAULT ({SQLITE_NOW})
                )
            ''')
            await conn.execute('CREATE INDEX IF NOT EXISTS idx_posts_status ON posts(status)')
            await conn.execute('CREATE INDEX IF NOT EXISTS idx_posts_category ON posts(category)')
            await conn.execute('CREATE INDEX IF NOT EXISTS idx_posts_created_at ON posts(created_at DESC)')
            await conn.commit()

        logger.info("SQLite blog database schema initialized")

    @asynccontextmanager
    async def _connect_sqlite(self):
        """Short-lived SQLite connection with the ``casefold()`` SQL function registered."""
        async with aiosqlite.connect(self.config.database_path) as conn:
            # SQLite's lower()/LIKE only fold ASCII letters
            await conn.create_function(SQLITE_FOLD, 1, _casefold, deterministic=True)
            yield conn

    @asynccontextmanager
    async def _translate_errors(self):
        """Map driver exceptions onto the application error taxonomy."""
        try:
            yield
        except asyncpg.UniqueViolationError as e:
            raise DuplicateKeyError(f"Duplicate key: {e}") from e
        except aiosqlite.IntegrityError as e:
            if 'UNIQUE constraint failed' in str(e):
                raise DuplicateKeyError(f"Duplicate key: {e}") from e
            logger.error(f"Database integrity error: {e}", exc_info=True)
            raise StoreError(f"Database error: {e}") from e
        except (aiosqlite.Error, asyncpg.PostgresError, asyncpg.InterfaceError, OSError, OverflowError) as e:
            logger.error(f"Database error: {e}", exc_info=True)
            raise StoreError(f"Database error: {e}") from e

    async def fetch(self, query: str, *params: Any) -> List[Dict]:
        """Run a query and return every row as a dict."""
        async with self._translate_errors():
            if self.use_postgres:
                async with self.pool.acquire() as conn:
                    rows = await conn.fetch(to_postgres_placeholders(query), *params)
                    return [dict(row) for row in rows]
            async with self._connect_sqlite() as conn:
                conn.row_factory = aiosqlite.Row
                cursor = await conn.execute(query, params)
                rows = await cursor.fetchall()
                return [dict(row) for row in rows]

    async def fetchrow(self, query: str, *params: Any) -> Optional[Dict]:
        """Run a query and return the first row, or None."""
        async with self._translate_errors():
            if self.use_postgres:
                async with self.pool.acquire() as conn:
                    row = await conn.fetchrow(to_postgres_placeholders(query), *params)
                    return dict(row) if row else None
            async with self._connect_sqlite() as conn:
                conn.row_factory = aiosqlite.Row
                cursor = await conn.execute(query, params)
                row = await cursor.fetchone()
                return dict(row) if row else None

    async def fetchval(self, query: str, *params: Any) -> Any:
        """Run a query and return the first column of the first row."""
        async with self._translate_errors():
            if self.use_postgres:
                async with self.pool.acquire() as conn:
                    return await conn.fetchval(to_postgres_placeholders(query), *params)
            async with self._connect_sqlite() as conn:
                cursor = await conn.execute(query, params)
                row = await cursor.fetchone()
                return row[0] if row else None

    async def execute(self, query: str, *params: Any) -> int:
        """Run a write statement and return the number of affected rows."""
        async with self._translate_errors():
            if self.use_postgres:
                async with self.pool.acquire() as conn:
                    result = await conn.execute(to_postgres_placeholders(query), *params)
                    return _affected_rows(result)
            async with self._connect_sqlite() as conn:
                cursor = await conn.execute(query, params)
                await conn.commit()
                return cursor.rowcount

    async def health_check(self) -> bool:
        """Check database connection health."""
        try:
            await self.fetchval("SELECT 1")
            return True
        except StoreError as e:
            logger.error(f"Database health check failed: {e}")
            return False

    async def close(self):
        """Close database connection pool."""
        if self.use_postgres and self.pool:
            await self.pool.close()
            self.pool = None
            logger.info("PostgreSQL connection pool closed")
        self._initialized = False
