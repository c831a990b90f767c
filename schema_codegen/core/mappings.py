"""
Built-in database type mappings.

Keyed ``dialect -> raw_type -> {language -> type, "generic" -> label}``.
Raw type keys match what each dialect reports: MySQL and Postgres in
lowercase, SQLite declared types in uppercase. User configuration entries
are merged on top of this table key by key.
"""

from typing import Dict

GENERIC_KEY = "generic"

TypeMappingTable = Dict[str, Dict[str, Dict[str, str]]]


def _row(generic, go, rust, typescript, csharp, java, python) -> Dict[str, str]:
    return {
        GENERIC_KEY: generic,
        "go": go,
        "rust": rust,
        "typescript": typescript,
        "csharp": csharp,
        "java": java,
        "python": python,
    }


_STRING = _row("string", "string", "String", "string", "string", "String", "str")
_DATETIME = _row(
    "datetime",
    "time.Time",
    "chrono::NaiveDateTime",
    "Date",
    "DateTime",
    "LocalDateTime",
    "datetime",
)
_BYTES = _row("bytes", "[]byte", "Vec<u8>", "Uint8Array", "byte[]", "byte[]", "bytes")
_BOOL = _row("boolean", "bool", "bool", "boolean", "bool", "Boolean", "bool")


BUILTIN_TYPE_MAPPINGS: TypeMappingTable = {
    "mysql": {
        "varchar": dict(_STRING),
        "char": dict(_STRING),
        "text": dict(_STRING),
        "mediumtext": dict(_STRING),
        "longtext": dict(_STRING),
        "enum": dict(_STRING),
        "int": _row("integer", "int64", "i64", "number", "int", "Integer", "int"),
        "smallint": _row("integer", "int16", "i16", "number", "short", "Short", "int"),
        "bigint": _row("integer", "int64", "i64", "number", "long", "Long", "int"),
        "tinyint": dict(_BOOL),
        "decimal": _row(
            "decimal", "float64", "f64", "number", "decimal", "BigDecimal", "Decimal"
        ),
        "float": _row("float", "float32", "f32", "number", "float", "Float", "float"),
        "double": _row(
            "float", "float64", "f64", "number", "double", "Double", "float"
        ),
        "datetime": dict(_DATETIME),
        "timestamp": dict(_DATETIME),
        "date": _row("date", "time.Time", "chrono::NaiveDate", "Date", "DateTime", "LocalDate", "date"),
        "json": _row(
            "json", "json.RawMessage", "serde_json::Value", "unknown", "string", "String", "dict"
        ),
        "blob": dict(_BYTES),
    },
    "postgres": {
        "text": dict(_STRING),
        "varchar": dict(_STRING),
        "bpchar": dict(_STRING),
        "int2": _row("integer", "int16", "i16", "number", "short", "Short", "int"),
        "int4": _row("integer", "int32", "i32", "number", "int", "Integer", "int"),
        "int8": _row("integer", "int64", "i64", "number", "long", "Long", "int"),
        "float4": _row("float", "float32", "f32", "number", "float", "Float", "float"),
        "float8": _row("float", "float64", "f64", "number", "double", "Double", "float"),
        "numeric": _row(
            "decimal", "float64", "f64", "number", "decimal", "BigDecimal", "Decimal"
        ),
        "bool": dict(_BOOL),
        "uuid": _row("string", "string", "uuid::Uuid", "string", "Guid", "UUID", "UUID"),
        "timestamp": dict(_DATETIME),
        "timestamptz": _row(
            "datetime",
            "time.Time",
            "chrono::DateTime<chrono::Utc>",
            "Date",
            "DateTimeOffset",
            "OffsetDateTime",
            "datetime",
        ),
        "date": _row("date", "time.Time", "chrono::NaiveDate", "Date", "DateTime", "LocalDate", "date"),
        "jsonb": _row(
            "json", "json.RawMessage", "serde_json::Value", "unknown", "string", "String", "dict"
        ),
        "bytea": dict(_BYTES),
    },
    "sqlite": {
        "TEXT": dict(_STRING),
        "INTEGER": _row("integer", "int64", "i64", "number", "long", "Long", "int"),
        "REAL": _row("float", "float64", "f64", "number", "double", "Double", "float"),
        "NUMERIC": _row(
            "decimal", "float64", "f64", "number", "decimal", "BigDecimal", "Decimal"
        ),
        "BLOB": dict(_BYTES),
    },
}
