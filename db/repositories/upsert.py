"""
Dialect-aware INSERT construct supporting ON CONFLICT clauses.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session


def dialect_insert(session: Session, entity: Any) -> Any:
    """
    Return an INSERT for ``entity`` with ``on_conflict_do_*`` support.

    PostgreSQL in production, SQLite in tests; both accept
    ``index_elements=`` conflict targets.
    """

    dialect_name = session.get_bind().dialect.name
    if dialect_name == "sqlite":
        return sqlite.insert(entity)
    return postgresql.insert(entity)
