"""
Live schema introspection for SQLite database files.

Uses the standard library ``sqlite3`` module. Tables are read from
``sqlite_master`` in name order and columns from ``PRAGMA table_info``
in declaration order.
"""

import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Union

from ..core.errors import CodegenError
from ..core.schema import DatabaseSchema, Dialect, build_schema
from ..logging_config import get_logger

logger = get_logger(__name__)

TABLES_QUERY = (
    "SELECT name FROM sqlite_master "
    "WHERE type = 'table' AND name NOT LIKE 'sqlite_%' "
    "ORDER BY name"
)

# SQLite gives columns declared without a type BLOB affinity
UNTYPED_COLUMN_TYPE = "BLOB"


class IntrospectionError(CodegenError):
    """Raised when a database cannot be read."""

    pass


def sqlite_path_from_dsn(dsn: str) -> Path:
    """
    Extract the database file path from a DSN.

    Accepts ``sqlite:./app.db``, ``sqlite:///abs/app.db``,
    ``sqlite://./app.db`` and plain paths.
    """
    if not dsn:
        raise IntrospectionError("SQLite DSN is empty")

    path = dsn
    for prefix in ("sqlite3:", "sqlite:"):
        if path.startswith(prefix):
            path = path[len(prefix):]
            break
    if path.startswith("//"):
        path = path[2:]

    if not path:
        raise IntrospectionError(f"SQLite DSN has no file path: {dsn}")
    return Path(path)


class SQLiteIntrospector:
    """Reads tables and columns from a SQLite file."""

    def __init__(self, database: Union[str, Path]):
        self.path = Path(database)

    def _connect(self) -> sqlite3.Connection:
        if not self.path.exists():
            raise IntrospectionError(f"SQLite database not found: {self.path}")
        try:
            return sqlite3.connect(f"file:{self.path}?mode=ro", uri=True)
        except sqlite3.Error as e:
            raise IntrospectionError(f"Failed to open {self.path}: {e}") from e

    def list_tables(self, connection: sqlite3.Connection) -> List[str]:
        return [row[0] for row in connection.execute(TABLES_QUERY)]

    def list_columns(
        self, connection: sqlite3.Connection, table_name: str
    ) -> List[Dict[str, Any]]:
        quoted = table_name.replace('"', '""')
        columns = []
        for _cid, name, declared_type, notnull, default, pk in connection.execute(
            f'PRAGMA table_info("{quoted}")'
        ):
            if not declared_type:
                logger.debug(
                    f"Column {table_name}.{name} has no declared type, "
                    f"using {UNTYPED_COLUMN_TYPE}"
                )
            columns.append(
                {
                    "name": name,
                    "type": declared_type or UNTYPED_COLUMN_TYPE,
                    "nullable": not notnull,
                    "comment": None,
                    "default": default,
                    "primary_key": pk > 0,
                }
            )
        return columns

    def introspect(self, name: str = "main") -> DatabaseSchema:
        """
        Read the whole schema.

        Raises:
            IntrospectionError: If the database cannot be opened or queried
            SchemaError: If the reported schema is malformed
        """
        logger.info(f"Introspecting SQLite database {self.path}")
        connection = self._connect()
        try:
            raw_tables = [
                (table_name, self.list_columns(connection, table_name))
                for table_name in self.list_tables(connection)
            ]
        except sqlite3.Error as e:
            raise IntrospectionError(f"Failed to read schema of {self.path}: {e}") from e
        finally:
            connection.close()

        logger.info(f"Found {len(raw_tables)} tables in {self.path}")
        return build_schema(Dialect.SQLITE, raw_tables, name=name)
