"""Shared fixtures for schema_codegen tests."""

import json

import pytest

from schema_codegen.core import (
    RenderContextAssembler,
    TypeMappingResolver,
    build_schema,
    load_config,
)
from schema_codegen.core.templates import TemplateEngine


SQLITE_TABLES = [
    (
        "users",
        [
            ("id", "INTEGER", False, None, None, True),
            ("user_name", "TEXT", False, "Login name"),
            ("email", "TEXT", True, None),
            ("score", "REAL", True, None, "0.0"),
        ],
    ),
    (
        "posts",
        [
            ("id", "INTEGER", False, None, None, True),
            ("user_id", "INTEGER", False, None),
            ("body", "TEXT", True, None),
        ],
    ),
    (
        "migrations",
        [
            ("version", "INTEGER", False, None),
        ],
    ),
]

MYSQL_TABLES = [
    (
        "accounts",
        [
            ("id", "bigint", False, None, None, True),
            ("display_name", "varchar", False, None),
            ("created_at", "datetime", False, None),
            ("deleted_at", "datetime", True, None),
            ("balance", "decimal", True, None),
        ],
    ),
]


@pytest.fixture
def sqlite_schema():
    return build_schema("sqlite", SQLITE_TABLES, name="app")


@pytest.fixture
def mysql_schema():
    return build_schema("mysql", MYSQL_TABLES, name="shop")


@pytest.fixture
def config():
    """Built-in defaults with no configuration file."""
    return load_config()


@pytest.fixture
def resolver(config):
    return TypeMappingResolver(config.type_mappings)


@pytest.fixture
def assembler(config, resolver):
    return RenderContextAssembler(config.naming, resolver)


@pytest.fixture
def render(config):
    """Render one table of a schema for one language with the built-in templates."""

    def _render(schema, table_name, language, cfg=None):
        cfg = cfg or config
        language_config = cfg.language(language)
        table_assembler = RenderContextAssembler(
            cfg.naming, TypeMappingResolver(cfg.type_mappings)
        )
        assembled = table_assembler.assemble(
            schema.get_table(table_name), language_config, schema.dialect
        )
        return TemplateEngine().render(assembled.context, language_config)

    return _render


@pytest.fixture
def snapshot_file(tmp_path):
    """A JSON schema snapshot of a small Postgres database."""
    path = tmp_path / "schema.json"
    path.write_text(
        json.dumps(
            {
                "name": "blog",
                "dialect": "postgres",
                "tables": [
                    {
                        "name": "authors",
                        "columns": [
                            {"name": "id", "type": "int8", "nullable": False, "primary_key": True},
                            {"name": "full_name", "type": "text", "nullable": False},
                            {"name": "bio", "type": "text", "nullable": True, "comment": "Short bio"},
                        ],
                    },
                    {
                        "name": "articles",
                        "columns": [
                            {"name": "id", "type": "int8", "nullable": False, "primary_key": True},
                            {"name": "author_id", "type": "int8", "nullable": False},
                            {"name": "published_at", "type": "timestamptz", "nullable": True},
                        ],
                    },
                ],
            }
        ),
        encoding="utf-8",
    )
    return path


class FakeRenderer:
    """Renderer that records calls and optionally fails for some tables."""

    def __init__(self, fail_tables=()):
        self.fail_tables = set(fail_tables)
        self.calls = []

    def render(self, context, language):
        from schema_codegen.core import TemplateError

        self.calls.append((language.name, context.table_name))
        if context.table_name in self.fail_tables:
            raise TemplateError(f"boom in {context.table_name}")
        fields = ",".join(f"{c.field_name}:{c.lang_type}" for c in context.columns)
        return f"{language.name}:{context.struct_name}({fields})\n"


@pytest.fixture
def fake_renderer():
    return FakeRenderer()


@pytest.fixture
def renderer_factory():
    return FakeRenderer
