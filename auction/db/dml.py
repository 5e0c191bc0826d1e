"""
Dialect-aware INSERT constructs.

``ON CONFLICT`` clauses are dialect specific in SQLAlchemy; this picks the
PostgreSQL or SQLite flavour from the session's bind.
"""

from typing import Any, Union

from sqlalchemy import Table
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

Insert = Union[postgresql.Insert, sqlite.Insert]


def upsert_insert(session: AsyncSession, target: Any) -> Insert:
    """Return an INSERT for ``target`` that supports ``on_conflict_do_*``."""
    table: Table = getattr(target, "__table__", target)
    if session.get_bind().dialect.name == "sqlite":
        return sqlite.insert(table)
    return postgresql.insert(table)
