"""
JSON schema snapshots.

A snapshot describes any dialect's schema without a live connection::

    {
      "name": "shop",
      "dialect": "postgres",
      "tables": [
        {"name": "users", "columns": [
          {"name": "id", "type": "int8", "nullable": false, "primary_key": true}
        ]}
      ]
    }
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..core.schema import DatabaseSchema, Dialect, SchemaError, build_schema
from ..logging_config import get_logger
from ..utils import load_json

logger = get_logger(__name__)


def schema_from_snapshot(
    data: Any, dialect: Optional[Union[Dialect, str]] = None
) -> DatabaseSchema:
    """
    Build a schema from deserialized snapshot data.

    Args:
        data: Parsed snapshot
        dialect: Dialect to use when the snapshot names none

    Raises:
        SchemaError: If the snapshot is malformed
    """
    if not isinstance(data, dict):
        raise SchemaError("Schema snapshot must be a JSON object")

    snapshot_dialect = data.get("dialect") or dialect
    if not snapshot_dialect:
        raise SchemaError("Schema snapshot does not name a dialect")

    if dialect and data.get("dialect"):
        if Dialect.parse(dialect) != Dialect.parse(data["dialect"]):
            logger.warning(
                f"Snapshot dialect {data['dialect']} differs from configured "
                f"{dialect}; using the snapshot's"
            )

    tables = data.get("tables")
    if not isinstance(tables, list):
        raise SchemaError("Schema snapshot must contain a 'tables' list")

    return build_schema(snapshot_dialect, tables, name=data.get("name") or "main")


def load_schema_snapshot(
    file_path: Optional[Union[str, Path]] = None,
    url: Optional[str] = None,
    dialect: Optional[Union[Dialect, str]] = None,
) -> DatabaseSchema:
    """
    Load a schema snapshot from a file or URL.

    Raises:
        JSONLoaderError: If the snapshot cannot be fetched or parsed
        SchemaError: If the snapshot is malformed
    """
    source, data = load_json(file_path=file_path, url=url)
    schema = schema_from_snapshot(data, dialect)
    logger.info(f"Loaded {len(schema.tables)} tables from snapshot {source}")
    return schema


def schema_to_snapshot(schema: DatabaseSchema) -> Dict[str, Any]:
    """Serialize a schema to the snapshot format."""
    return {
        "name": schema.name,
        "dialect": schema.dialect.value,
        "tables": [
            {
                "name": table.name,
                "columns": [
                    {
                        "name": column.name,
                        "type": column.raw_type,
                        "nullable": column.nullable,
                        "comment": column.comment,
                        "default": column.default_value,
                        "primary_key": column.is_primary_key,
                    }
                    for column in table.columns
                ],
            }
            for table in schema.tables
        ],
    }


def save_schema_snapshot(schema: DatabaseSchema, file_path: Union[str, Path]) -> Path:
    """Write a schema snapshot as JSON."""
    path = Path(file_path)
    path.write_text(
        json.dumps(schema_to_snapshot(schema), indent=2, ensure_ascii=False) + "\n",
        encoding="utf-8",
    )
    logger.info(f"Saved schema snapshot to {path}")
    return path
