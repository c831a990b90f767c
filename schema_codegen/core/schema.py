"""
Core schema representation for code generation.

Copies introspected tables and columns into a dialect-tagged,
immutable model that the rest of the pipeline reads.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
from enum import Enum

from .errors import CodegenError


class SchemaError(CodegenError):
    """Raised when introspection data is malformed."""

    pass


class Dialect(Enum):
    """Supported database dialects."""

    MYSQL = "mysql"
    POSTGRES = "postgres"
    SQLITE = "sqlite"

    @classmethod
    def parse(cls, value: "Dialect | str") -> "Dialect":
        """Parse a dialect name, accepting a few common spellings."""
        if isinstance(value, Dialect):
            return value
        if not isinstance(value, str):
            raise SchemaError(f"Invalid dialect: {value!r}")

        key = value.strip().lower()
        key = _DIALECT_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            supported = ", ".join(d.value for d in cls)
            raise SchemaError(
                f"Unsupported database dialect: {value}. Supported: {supported}"
            )


_DIALECT_ALIASES = {
    "postgresql": "postgres",
    "pg": "postgres",
    "sqlite3": "sqlite",
    "mariadb": "mysql",
}


@dataclass(frozen=True)
class Column:
    """A single column exactly as reported by the database."""

    name: str
    raw_type: str  # Dialect-specific type name (e.g. "varchar", "int8", "TEXT")
    nullable: bool = False
    comment: Optional[str] = None
    default_value: Optional[str] = None
    is_primary_key: bool = False


@dataclass(frozen=True)
class Table:
    """A table and its columns in introspection order."""

    name: str
    columns: Tuple[Column, ...] = field(default_factory=tuple)

    def get_column(self, name: str) -> Optional[Column]:
        """Get column by name."""
        for column in self.columns:
            if column.name == name:
                return column
        return None


@dataclass(frozen=True)
class DatabaseSchema:
    """All tables of one database, tagged with its dialect."""

    name: str
    dialect: Dialect
    tables: Tuple[Table, ...] = field(default_factory=tuple)

    def get_table(self, name: str) -> Optional[Table]:
        """Get table by name."""
        for table in self.tables:
            if table.name == name:
                return table
        return None

    @property
    def table_names(self) -> List[str]:
        return [table.name for table in self.tables]


_COLUMN_KEYS = ("name", "type", "nullable", "comment", "default", "primary_key")


def build_schema(
    dialect: "Dialect | str",
    raw_tables: Iterable[Any],
    name: str = "main",
) -> DatabaseSchema:
    """
    Build a DatabaseSchema from raw introspection output.

    Args:
        dialect: Database dialect of the source
        raw_tables: Ordered ``(table_name, columns)`` pairs, where each column
            is a ``(name, raw_type, nullable, comment[, default[, primary_key]])``
            tuple or a mapping with the same keys
        name: Database name

    Returns:
        DatabaseSchema preserving table and column order

    Raises:
        SchemaError: If any table or column is malformed
    """
    parsed_dialect = Dialect.parse(dialect)

    tables = []
    seen_tables = set()

    for raw_table in raw_tables:
        table_name, raw_columns = _split_table(raw_table)

        if table_name in seen_tables:
            raise SchemaError(f"Duplicate table in schema: {table_name}")
        seen_tables.add(table_name)

        columns = []
        seen_columns = set()
        for position, raw_column in enumerate(raw_columns):
            column = _build_column(table_name, position, raw_column)
            if column.name in seen_columns:
                raise SchemaError(
                    f"Duplicate column {table_name}.{column.name} in schema"
                )
            seen_columns.add(column.name)
            columns.append(column)

        tables.append(Table(name=table_name, columns=tuple(columns)))

    return DatabaseSchema(name=name, dialect=parsed_dialect, tables=tuple(tables))


def _split_table(raw_table: Any) -> Tuple[str, Sequence[Any]]:
    """Extract name and column list from a raw table entry."""
    if isinstance(raw_table, Mapping):
        table_name = raw_table.get("name")
        raw_columns = raw_table.get("columns", [])
    else:
        try:
            table_name, raw_columns = raw_table
        except (TypeError, ValueError):
            raise SchemaError(f"Malformed table entry: {raw_table!r}")

    if not isinstance(table_name, str) or not table_name.strip():
        raise SchemaError(f"Table name must be a non-empty string: {table_name!r}")

    if isinstance(raw_columns, (str, bytes)) or not isinstance(
        raw_columns, (list, tuple)
    ):
        raise SchemaError(f"Columns of table {table_name} must be a sequence")

    return table_name, raw_columns


def _build_column(table_name: str, position: int, raw_column: Any) -> Column:
    """Validate one raw column entry and copy it into a Column."""
    if isinstance(raw_column, Mapping):
        values: Dict[str, Any] = {key: raw_column.get(key) for key in _COLUMN_KEYS}
    elif isinstance(raw_column, (list, tuple)):
        if not 3 <= len(raw_column) <= len(_COLUMN_KEYS):
            raise SchemaError(
                f"Column #{position} of table {table_name} has "
                f"{len(raw_column)} values, expected 3 to {len(_COLUMN_KEYS)}"
            )
        values = dict.fromkeys(_COLUMN_KEYS)
        values.update(zip(_COLUMN_KEYS, raw_column))
    else:
        raise SchemaError(
            f"Malformed column #{position} in table {table_name}: {raw_column!r}"
        )

    column_name = values["name"]
    if not isinstance(column_name, str) or not column_name.strip():
        raise SchemaError(
            f"Column #{position} of table {table_name} has no name"
        )

    raw_type = values["type"]
    if not isinstance(raw_type, str) or not raw_type.strip():
        raise SchemaError(f"Column {table_name}.{column_name} has no type")

    nullable = values["nullable"]
    if nullable is None:
        nullable = False
    if not isinstance(nullable, bool):
        raise SchemaError(
            f"Column {table_name}.{column_name} has non-boolean nullable flag: "
            f"{nullable!r}"
        )

    comment = values["comment"]
    if comment is not None and not isinstance(comment, str):
        comment = str(comment)

    default_value = values["default"]
    if default_value is not None and not isinstance(default_value, str):
        default_value = str(default_value)

    return Column(
        name=column_name,
        raw_type=raw_type,
        nullable=nullable,
        comment=comment or None,
        default_value=default_value,
        is_primary_key=bool(values["primary_key"]),
    )
