"""
Full-text question search.

The backend is chosen by database dialect. Creating or dropping the
``questions`` table through SQLAlchemy metadata creates or drops its index
too; migrated databases get it from the ``0002_question_search`` revision.
"""

from sqlalchemy import event

import repositories.db_models as db_models
from services.search.base_backend import SearchBackend
from services.search.postgresql_backend import PostgreSQLFTSBackend
from services.search.sqlite_fts5_backend import SQLiteFTS5Backend

_BACKENDS: dict[str, SearchBackend] = {
    "sqlite": SQLiteFTS5Backend(),
    "postgresql": PostgreSQLFTSBackend(),
}


def get_search_backend(dialect_name: str) -> SearchBackend:
    """Return the search backend for a SQLAlchemy dialect name."""
    try:
        return _BACKENDS[dialect_name]
    except KeyError:
        raise RuntimeError(f"No search backend for database dialect '{dialect_name}'")


@event.listens_for(db_models.Question.__table__, "after_create")
def _create_search_index(target, connection, **kw):
    get_search_backend(connection.dialect.name).create_index(connection)


@event.listens_for(db_models.Question.__table__, "after_drop")
def _drop_search_index(target, connection, **kw):
    # Dropping the table removes its triggers but not the FTS5 table
    get_search_backend(connection.dialect.name).drop_index(connection)


__all__ = [
    "SearchBackend",
    "SQLiteFTS5Backend",
    "PostgreSQLFTSBackend",
    "get_search_backend",
]
