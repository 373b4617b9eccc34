"""Database schema of the application and the storage errors."""

from __future__ import annotations

import sqlite3
import sys


class StorageError(Exception):
    """A storage operation failed."""


class RecordNotFoundError(StorageError):
    """The requested record does not exist."""


_TABLES: dict[str, list[tuple[str, str]]] = {
    "media": [("id", "pk"), ("file_data", "bytes"), ("content_type", "text")],
    "requests": [
        ("id", "pk"),
        ("type", "int"),
        ("status", "int"),
        ("requesting_admin", "bigint"),
        ("requested_chapter_id", "bigint"),
    ],
    "characters": [
        ("id", "pk"),
        ("name", "text"),
        ("slug", "text"),
        ("color", "text"),
        ("emotions", "json"),
    ],
    "nodes": [
        ("id", "pk"),
        ("slug", "text"),
        ("events", "json"),
        ("chapter_id", "bigint"),
        ("music", "bigint"),
        ("background", "bigint"),
        ("branching", "json"),
        ("end_info", "json"),
        ("comment", "text"),
    ],
    "admins": [
        ("id", "pk"),
        ("name", "text"),
        ("email", "text"),
        ("password", "text"),
        ("admin_status", "int"),
        ("created_chapters", "json"),
        ("request_sent", "json"),
        ("requests_received", "json"),
    ],
    "chapters": [
        ("id", "pk"),
        ("name", "text"),
        ("start_node", "bigint"),
        ("nodes", "json"),
        ("characters", "json"),
        ("status", "int"),
        ("updated_at", "json"),
        ("author", "bigint"),
    ],
    "players": [
        ("id", "pk"),
        ("name", "text"),
        ("email", "text"),
        ("phone", "text"),
        ("password", "text"),
        ("admin", "bool"),
        ("completed_chapters", "json"),
        ("chapters_progress", "json"),
        ("sound_settings", "json"),
    ],
}

_TYPES = {
    "postgres": {
        "pk": "bigserial",
        "bigint": "bigint",
        "int": "bigint",
        "text": "text",
        "bytes": "bytea",
        "json": "json",
        "bool": "boolean",
    },
    "sqlite": {
        "pk": "INTEGER PRIMARY KEY AUTOINCREMENT",
        "bigint": "INTEGER",
        "int": "INTEGER",
        "text": "TEXT",
        "bytes": "BLOB",
        "json": "TEXT",
        "bool": "INTEGER",
    },
}


def schema_statements(dialect: str) -> list[str]:
    """CREATE TABLE statements for every table, in the given SQL dialect."""
    try:
        types = _TYPES[dialect]
    except KeyError:
        raise ValueError(f"unsupported dialect: {dialect!r}") from None
    statements = []
    for table, columns in _TABLES.items():
        parts = [f'"{name}" {types[kind]}' for name, kind in columns]
        if dialect == "postgres":
            parts.append('PRIMARY KEY ("id")')
            statements.append(f'CREATE TABLE "{table}" ({",".join(parts)});')
        else:
            statements.append(f'CREATE TABLE IF NOT EXISTS "{table}" ({",".join(parts)});')
    return statements


def create_tables(db: sqlite3.Connection) -> None:
    """Create every table in a SQLite database when it does not exist yet."""
    with db:
        for statement in schema_statements("sqlite"):
            db.execute(statement)


def start_schema_validation() -> bool:
    """Print the PostgreSQL schema to stdout; report failure on stderr."""
    try:
        statements = schema_statements("postgres")
    except ValueError as exc:
        sys.stderr.write(f"failed to load schema: {exc}\n")
        return False
    sys.stdout.write("\n".join(statements) + "\n")
    return True