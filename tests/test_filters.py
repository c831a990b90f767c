import pytest

from schema_codegen.core.filters import InvalidPatternError, TableFilter, retain
from schema_codegen.core.schema import build_schema

NAMES = ["users", "migrations", "_internal", "schema_versions", "a", "Orders2"]


@pytest.mark.parametrize("name", NAMES)
def test_default_patterns_retain_everything(name):
    assert retain(name)
    assert retain(name, ["*"], [])


@pytest.mark.parametrize("name", NAMES)
def test_exclude_star_drops_everything(name):
    assert not retain(name, ["*"], ["*"])


def test_exclude_wins_over_include():
    assert not retain("users", ["users"], ["user*"])
    assert not retain("users", ["users", "*"], ["users"])


def test_empty_include_retains_nothing():
    assert not retain("users", [], [])


def test_glob_semantics():
    assert retain("log1", ["log?"])
    assert not retain("log12", ["log?"])
    assert retain("schema_versions", ["schema_*"])
    assert retain("t1", ["t[0-9]"])
    assert not retain("Users", ["users"])


def test_table_filter_select_keeps_order():
    schema = build_schema(
        "sqlite",
        [
            ("users", [("id", "INTEGER", False, None)]),
            ("migrations", [("id", "INTEGER", False, None)]),
            ("_tmp", [("id", "INTEGER", False, None)]),
            ("posts", [("id", "INTEGER", False, None)]),
        ],
    )
    table_filter = TableFilter(["*"], ["_*", "migrations"])
    assert [t.name for t in table_filter.select(schema.tables)] == ["users", "posts"]


@pytest.mark.parametrize("pattern", ["", "user[", "[!abc", 5, None])
def test_invalid_patterns(pattern):
    with pytest.raises(InvalidPatternError):
        TableFilter([pattern], [])
    with pytest.raises(InvalidPatternError):
        TableFilter(["*"], [pattern])


def test_single_string_patterns_are_rejected():
    with pytest.raises(InvalidPatternError):
        TableFilter("users")
