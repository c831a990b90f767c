import pytest

from schema_codegen.core.schema import Column, Dialect, SchemaError, build_schema


def test_build_schema_preserves_order(sqlite_schema):
    assert sqlite_schema.dialect is Dialect.SQLITE
    assert sqlite_schema.name == "app"
    assert sqlite_schema.table_names == ["users", "posts", "migrations"]

    users = sqlite_schema.get_table("users")
    assert [c.name for c in users.columns] == ["id", "user_name", "email", "score"]
    assert users.get_column("id") == Column(
        name="id", raw_type="INTEGER", nullable=False, is_primary_key=True
    )
    assert users.get_column("user_name").comment == "Login name"
    assert users.get_column("score").default_value == "0.0"
    assert users.get_column("missing") is None


def test_names_and_types_are_not_transformed():
    schema = build_schema("mysql", [("OrderItems", [("Unit-Price", "DECIMAL", True, "")])])
    column = schema.tables[0].columns[0]
    assert schema.tables[0].name == "OrderItems"
    assert column.name == "Unit-Price"
    assert column.raw_type == "DECIMAL"
    assert column.comment is None


def test_mapping_entries():
    schema = build_schema(
        "postgres",
        [
            {
                "name": "users",
                "columns": [
                    {"name": "id", "type": "int8", "primary_key": True},
                    {"name": "note", "type": "text", "nullable": True, "default": 3},
                ],
            }
        ],
    )
    note = schema.tables[0].columns[1]
    assert note.nullable is True
    assert note.default_value == "3"
    assert schema.tables[0].columns[0].nullable is False


@pytest.mark.parametrize(
    "raw_tables",
    [
        [("users", [("id", None, False, None)])],
        [("users", [("id", "", False, None)])],
        [("users", [("", "int", False, None)])],
        [("", [("id", "int", False, None)])],
        [("users", [("id", "int", "yes", None)])],
        [("users", [("id", "int")])],
        [("users", "id int")],
        [("users", [("id", "int", False, None)]), ("users", [])],
        [("users", [("id", "int", False, None), ("id", "int", False, None)])],
        ["users"],
    ],
)
def test_malformed_input_raises_schema_error(raw_tables):
    with pytest.raises(SchemaError):
        build_schema("mysql", raw_tables)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("mysql", Dialect.MYSQL),
        ("MariaDB", Dialect.MYSQL),
        ("postgresql", Dialect.POSTGRES),
        ("pg", Dialect.POSTGRES),
        ("sqlite3", Dialect.SQLITE),
        (Dialect.SQLITE, Dialect.SQLITE),
    ],
)
def test_dialect_parse(value, expected):
    assert Dialect.parse(value) is expected


def test_unknown_dialect():
    with pytest.raises(SchemaError):
        build_schema("oracle", [])
