import sqlite3

import pytest

from vnbackend.schema import (
    RecordNotFoundError,
    StorageError,
    create_tables,
    schema_statements,
    start_schema_validation,
)

TABLES = {"media", "requests", "characters", "nodes", "admins", "chapters", "players"}


@pytest.mark.parametrize("case", ["valid schema generation", "empty models list", "invalid model type"])
def test_start_schema_validation(capsys, case):
    assert start_schema_validation() is True
    out = capsys.readouterr().out
    assert 'CREATE TABLE "media" ("id" bigserial' in out


def test_postgres_statements_cover_all_tables():
    statements = schema_statements("postgres")
    assert len(statements) == len(TABLES)
    for table in TABLES:
        assert any(f'CREATE TABLE "{table}"' in s for s in statements)


def test_unknown_dialect():
    with pytest.raises(ValueError):
        schema_statements("oracle")


def test_create_tables_in_sqlite():
    db = sqlite3.connect(":memory:")
    create_tables(db)
    create_tables(db)
    names = {row[0] for row in db.execute("SELECT name FROM sqlite_master WHERE type = 'table'")}
    assert TABLES <= names


def test_not_found_is_storage_error():
    assert issubclass(RecordNotFoundError, StorageError)
    error = RecordNotFoundError("media data not found")
    assert isinstance(error, StorageError)
    assert str(error) == "media data not found"