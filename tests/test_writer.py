import pytest

from schema_codegen.core import OutputWriter, WriteError


@pytest.mark.parametrize(
    "structure,expected",
    [
        ("by_language", "go/user_accounts.go"),
        ("by_table", "user_accounts/user_accounts.go"),
        ("flat", "user_accounts.go"),
    ],
)
def test_layouts(tmp_path, structure, expected):
    writer = OutputWriter(tmp_path, structure=structure)
    assert writer.path_for("go", "UserAccounts", ".go") == tmp_path / expected


def test_write_creates_directories(tmp_path):
    writer = OutputWriter(tmp_path / "out")
    path = writer.write("rust", "users", "rs", "pub struct Users {}\n")

    assert path == tmp_path / "out" / "rust" / "users.rs"
    assert path.read_text(encoding="utf-8") == "pub struct Users {}\n"


def test_write_overwrites(tmp_path):
    writer = OutputWriter(tmp_path)
    writer.write("ts", "users", "ts", "old")
    path = writer.write("ts", "users", "ts", "new")
    assert path.read_text(encoding="utf-8") == "new"


def test_dry_run_writes_nothing(tmp_path):
    writer = OutputWriter(tmp_path, dry_run=True)
    path = writer.write("go", "users", "go", "package models\n")

    assert path == tmp_path / "go" / "users.go"
    assert not path.exists()
    assert list(tmp_path.iterdir()) == []


def test_invalid_structure(tmp_path):
    with pytest.raises(WriteError, match="Invalid output structure"):
        OutputWriter(tmp_path, structure="nested")


def test_unwritable_destination(tmp_path):
    (tmp_path / "go").write_text("", encoding="utf-8")
    with pytest.raises(WriteError, match="Failed to write"):
        OutputWriter(tmp_path).write("go", "users", "go", "x")
