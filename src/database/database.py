# src/database/database.py
import json
import aiofiles
import asyncpg
import logging
from pathlib import Path
from typing import Optional
from ..config import Config

class Database:
    """Postgres connection pool for cloud mode"""
    
    def __init__(self, dsn: Optional[str] = None):
        self.dsn = dsn or Config.DATABASE_URL
        self.pool: Optional[asyncpg.Pool] = None
        self.logger = logging.getLogger(__name__)

    async def connect(self):
        """Open the pool and apply pending migrations"""
        try:
            self.pool = await asyncpg.create_pool(
                self.dsn,
                min_size=Config.DB_POOL_MIN,
                max_size=Config.DB_POOL_MAX,
                init=self._init_connection
            )
            
            # Run migrations
            await self._run_migrations()
            
            self.logger.info("Database connection established")
        except Exception as e:
            self.logger.error(f"Database connection failed: {e}")
            raise

    async def close(self):
        """Close the pool"""
        if self.pool:
            await self.pool.close()
            self.logger.info("Database connection closed")

    @staticmethod
    async def _init_connection(conn):
        """jsonb columns (stock, items, customer, methods) as Python objects"""
        for type_name in ("json", "jsonb"):
            await conn.set_type_codec(
                type_name,
                encoder=json.dumps,
                decoder=json.loads,
                schema="pg_catalog"
            )

    async def _run_migrations(self):
        """Apply migrations/*.sql in name order, each in its own transaction"""
        migrations_path = Path(__file__).parent / "migrations"
        try:
            async with self.pool.acquire() as conn:
                await conn.execute("""
                    CREATE TABLE IF NOT EXISTS migrations (
                        id SERIAL PRIMARY KEY,
                        name VARCHAR(255) NOT NULL UNIQUE,
                        applied_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
                    )
                """)
                applied = {r["name"] for r in await conn.fetch("SELECT name FROM migrations")}

                for migration_file in sorted(migrations_path.glob("*.sql")):
                    if migration_file.name in applied:
                        continue
                    async with aiofiles.open(migration_file, encoding="utf-8") as f:
                        sql = await f.read()
                    async with conn.transaction():
                        await conn.execute(sql)
                        await conn.execute(
                            "INSERT INTO migrations (name) VALUES ($1)",
                            migration_file.name
                        )
                    self.logger.info(f"Migration {migration_file.name} applied")
        except Exception as e:
            self.logger.error(f"Migration failed: {e}")
            raise
