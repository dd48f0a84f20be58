"""Dialect-specific INSERT for upserts.

PostgreSQL runs in production; SQLite backs the test-suite. Both expose the
same ``on_conflict_do_update(index_elements, set_, where)`` API.
"""

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession


def upsert_insert(db: AsyncSession, table):
    dialect_name = db.get_bind().dialect.name
    if dialect_name == "postgresql":
        return postgresql.insert(table)
    if dialect_name == "sqlite":
        return sqlite.insert(table)
    raise NotImplementedError(f"Upsert is not supported on dialect {dialect_name!r}")
