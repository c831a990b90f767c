"""
Schema sources.

Live SQLite introspection and JSON snapshots for any dialect.
"""

from ..core.config import DatabaseConfig
from ..core.schema import DatabaseSchema, Dialect
from .snapshot import (
    load_schema_snapshot,
    save_schema_snapshot,
    schema_from_snapshot,
    schema_to_snapshot,
)
from .sqlite import IntrospectionError, SQLiteIntrospector, sqlite_path_from_dsn


def introspect_database(database: DatabaseConfig) -> DatabaseSchema:
    """
    Introspect the database described by a configuration entry.

    Raises:
        IntrospectionError: If the dialect has no live introspector
    """
    dialect = database.dialect
    if dialect == Dialect.SQLITE:
        return SQLiteIntrospector(sqlite_path_from_dsn(database.dsn)).introspect(
            name=database.db_name
        )

    raise IntrospectionError(
        f"Live introspection of {dialect.value} databases is not supported; "
        "export a schema snapshot and pass it with --schema-file or --schema-url"
    )


__all__ = [
    "IntrospectionError",
    "SQLiteIntrospector",
    "introspect_database",
    "load_schema_snapshot",
    "save_schema_snapshot",
    "schema_from_snapshot",
    "schema_to_snapshot",
    "sqlite_path_from_dsn",
]
