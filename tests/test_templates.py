import pytest

from schema_codegen.core import (
    LanguageConfig,
    RenderContextAssembler,
    TemplateError,
    TypeMappingResolver,
    build_schema,
    load_config,
)
from schema_codegen.core.context import ColumnContext, RenderContext
from schema_codegen.core.templates import TemplateEngine, format_code


class TestBuiltinTemplates:
    def test_go(self, render, sqlite_schema):
        code = render(sqlite_schema, "users", "go")

        assert "package models" in code
        assert "// Users maps the users table." in code
        assert "type Users struct {" in code
        assert "\t// Login name" in code
        assert '\tId int64 `json:"id" db:"id"`' in code
        assert '\tUserName string `json:"user_name" db:"user_name"`' in code
        assert '\tEmail *string `json:"email" db:"email"`' in code
        assert "import (" not in code

    def test_go_imports(self, render, mysql_schema):
        code = render(mysql_schema, "accounts", "go")

        assert 'import (\n\t"time"\n)' in code
        assert "\tDeletedAt *time.Time" in code

    def test_typescript(self, render, sqlite_schema):
        code = render(sqlite_schema, "users", "typescript")

        assert "export interface Users {" in code
        assert "  /** Login name */\n  userName: string;" in code
        assert "  email: string | null;" in code
        assert "  score: number | null;" in code

    def test_rust(self, render, sqlite_schema):
        code = render(sqlite_schema, "users", "rust")

        assert "use serde::{Deserialize, Serialize};" in code
        assert "#[derive(Debug, Clone, PartialEq, Serialize, Deserialize)]" in code
        assert "pub struct Users {" in code
        assert "    pub id: i64," in code
        assert "    pub user_name: String," in code
        assert "    pub email: Option<String>," in code
        assert "serde(rename" not in code

    def test_rust_renames_fields_that_differ_from_columns(self, render):
        schema = build_schema("sqlite", [("Orders", [("OrderId", "INTEGER", False, None)])])
        code = render(schema, "Orders", "rust")

        assert '    #[serde(rename = "OrderId")]\n    pub order_id: i64,' in code

    def test_python(self, render, sqlite_schema):
        code = render(sqlite_schema, "users", "python")

        assert "from dataclasses import dataclass" in code
        assert "from typing import Optional" in code
        assert "@dataclass\nclass Users:" in code
        assert "    # Login name\n    user_name: str" in code
        assert "    email: Optional[str]" in code
        assert "    score: Optional[float]" in code

    def test_python_module_imports(self, render, mysql_schema):
        code = render(mysql_schema, "accounts", "python")

        assert "from datetime import datetime" in code
        assert "from decimal import Decimal" in code
        assert "    balance: Optional[Decimal]" in code

    def test_python_table_without_columns(self, render):
        schema = build_schema("sqlite", [("empty", [])])
        code = render(schema, "empty", "python")

        assert "class Empty:\n    pass" in code

    def test_java(self, render, sqlite_schema):
        code = render(sqlite_schema, "users", "java")

        assert "package models;" in code
        assert "public class Users {" in code
        assert "    private Long id;" in code
        assert "    private String userName;" in code
        assert "    private Double score;" in code
        assert "    public String getUserName() {" in code
        assert "    public void setUserName(String userName) {" in code
        assert "        this.userName = userName;" in code

    def test_csharp(self, render, sqlite_schema):
        code = render(sqlite_schema, "users", "csharp")

        assert "namespace Models" in code
        assert "    public class Users" in code
        assert "        public string UserName { get; set; }" in code
        assert "        public string? Email { get; set; }" in code
        assert "        public double? Score { get; set; }" in code

    def test_csharp_attribute_tags(self, sqlite_schema):
        config = load_config(
            custom_config={
                "languages": {"csharp": {"tags": ['[Column("{{ OriginalColumnName }}")]']}}
            }
        )
        language = config.language("csharp")
        assembled = RenderContextAssembler(
            config.naming, TypeMappingResolver(config.type_mappings)
        ).assemble(sqlite_schema.get_table("users"), language, sqlite_schema.dialect)
        code = TemplateEngine().render(assembled.context, language)

        assert (
            '        [Column("user_name")]\n'
            "        public string UserName { get; set; }"
        ) in code

    @pytest.mark.parametrize("language", ["go", "typescript", "rust", "python", "java", "csharp"])
    def test_output_is_tidy(self, render, sqlite_schema, language):
        code = render(sqlite_schema, "posts", language)

        assert code.endswith("\n")
        assert not code.endswith("\n\n")
        assert "\n\n\n\n" not in code
        assert all(line == line.rstrip() for line in code.split("\n"))


def _context(**overrides):
    values = dict(
        struct_name="Users",
        table_name="users",
        current_language="elixir",
        columns=[
            ColumnContext(
                field_name="user_name",
                lang_type="String.t()",
                base_type="String.t()",
                original_column_name="user_name",
            )
        ],
        custom={"module": "MyApp"},
    )
    values.update(overrides)
    return RenderContext(**values)


class TestTemplateLookup:
    def test_user_template_dir_shadows_builtin(self, tmp_path, sqlite_schema, config):
        (tmp_path / "go_struct.go.j2").write_text(
            "// custom {{ StructName }}\n", encoding="utf-8"
        )
        language = config.language("go")
        assembled = RenderContextAssembler(
            config.naming, TypeMappingResolver(config.type_mappings)
        ).assemble(sqlite_schema.get_table("users"), language, sqlite_schema.dialect)

        assert TemplateEngine(tmp_path).render(assembled.context, language) == "// custom Users\n"

    def test_builtin_used_when_user_dir_lacks_template(self, tmp_path):
        engine = TemplateEngine(tmp_path)
        assert engine.template_exists("rust_struct.rs.j2")

    def test_template_path(self, tmp_path):
        path = tmp_path / "model.ex.j2"
        path.write_text(
            'defmodule {{ Custom.module }}.{{ StructName }} do\n'
            '{% for col in Columns %}  field :{{ col.FieldName }}, "{{ col.LangType }}"\n{% endfor %}'
            "end\n",
            encoding="utf-8",
        )
        language = LanguageConfig(name="elixir", template_path=str(path))

        code = TemplateEngine().render(_context(), language)

        assert code == 'defmodule MyApp.Users do\n  field :user_name, "String.t()"\nend\n'

    def test_missing_template_path(self, tmp_path):
        language = LanguageConfig(name="elixir", template_path=str(tmp_path / "nope.j2"))
        with pytest.raises(TemplateError, match="Failed to read template"):
            TemplateEngine().render(_context(), language)

    def test_language_without_template(self):
        with pytest.raises(TemplateError, match="No template configured"):
            TemplateEngine().render(_context(), LanguageConfig(name="elixir"))

    def test_unknown_template_file(self):
        language = LanguageConfig(name="elixir", template_file="missing.ex.j2")
        with pytest.raises(TemplateError, match="missing.ex.j2"):
            TemplateEngine().render(_context(), language)

    def test_template_selected_by_extension(self):
        engine = TemplateEngine()
        engine.add_template("typescript_interface.ts.j2", "interface {{ StructName }}")
        language = LanguageConfig(name="deno", output_extension="ts")

        assert engine.render(_context(), language) == "interface Users\n"

    def test_syntax_error(self):
        engine = TemplateEngine()
        engine.add_template("broken.j2", "{% for x in %}")
        language = LanguageConfig(name="elixir", template_file="broken.j2")

        with pytest.raises(TemplateError, match="broken.j2"):
            engine.render(_context(), language)


class TestFilters:
    @pytest.fixture
    def engine(self):
        return TemplateEngine()

    @pytest.mark.parametrize(
        "template,expected",
        [
            ("{{ 'user_id' | pascal_case }}", "UserId"),
            ("{{ 'UserId' | snake_case }}", "user_id"),
            ("{{ 'user_id' | camel_case }}", "userId"),
            ("{{ 'user_id' | kebab_case }}", "user-id"),
            ("{{ 'userId' | screaming_snake_case }}", "USER_ID"),
            ("{{ 'category' | pluralize }}", "categories"),
            ("{{ 'box' | pluralize }}", "boxes"),
            ("{{ 'day' | pluralize }}", "days"),
            ("{{ 'name' | upper_first }}", "Name"),
            ("{{ 'Name' | lower_first }}", "name"),
            ("{{ 'a\nb' | comment('#') }}", "# a\n# b"),
            ("{{ 'a\n\nb' | indent(2) }}", "  a\n\n  b"),
        ],
    )
    def test_filters(self, engine, template, expected):
        assert engine.render_string(template, {}) == expected

    def test_quotes_are_not_escaped(self, engine):
        assert engine.render_string('{{ tag }}', {"tag": 'json:"id"'}) == 'json:"id"'

    def test_case_filter_error(self, engine):
        with pytest.raises(TemplateError):
            engine.render_string("{{ '__' | snake_case }}", {})


def test_format_code():
    assert format_code("\n\na  \n\n\n\n\nb\n\n") == "a\n\n\nb\n"
