"""Storage of story chapters."""

from __future__ import annotations

import json
import re
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from vnbackend.schema import RecordNotFoundError, StorageError

DEFAULT_NAME = "Новая глава"
PUBLISHED_STATUS = 3

_SELECT = (
    "SELECT id, name, start_node, nodes, characters, status, updated_at, author "
    "FROM chapters"
)
_EXTRA_FRACTION = re.compile(r"(\.\d{6})\d+")


@dataclass
class Chapter:
    """A chapter: its nodes, characters, status and edit history."""

    id: int = 0
    name: str = ""
    start_node: int = 0
    nodes: list[int] | None = field(default_factory=list)
    characters: list[int] | None = field(default_factory=list)
    status: int = 0
    updated_at: dict[datetime, int] | None = field(default_factory=dict)
    author: int = 0


def _encode_ids(values: list[int] | None) -> str:
    if values is None:
        return "null"
    return json.dumps(list(values))


def _encode_updated_at(updated_at: dict[datetime, int] | None) -> str:
    if updated_at is None:
        return "null"
    return json.dumps({moment.isoformat(): value for moment, value in updated_at.items()})


def _parse_time(text: str) -> datetime:
    normalised = text[:-1] + "+00:00" if text.endswith("Z") else text
    normalised = _EXTRA_FRACTION.sub(r"\1", normalised)
    return datetime.fromisoformat(normalised)


def _load_json(raw: Any, name: str) -> Any:
    if raw is None:
        raise StorageError(f"failed to scan chapter: {name} is NULL")
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise StorageError(f"failed to unmarshal {name}: {exc}") from exc


def _decode_ids(raw: Any, name: str, allow_null: bool = False) -> list[int]:
    if raw is None and allow_null:
        return []
    data = _load_json(raw, name)
    if data is None:
        return []
    if not isinstance(data, list) or not all(
        isinstance(item, int) and not isinstance(item, bool) for item in data
    ):
        raise StorageError(f"failed to unmarshal {name}: expected a list of integers")
    return data


def _decode_updated_at(raw: Any) -> dict[datetime, int]:
    data = _load_json(raw, "updated_at")
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise StorageError("failed to unmarshal updated_at: expected an object")
    result: dict[datetime, int] = {}
    for key, value in data.items():
        if not isinstance(value, int) or isinstance(value, bool):
            raise StorageError(f"failed to unmarshal updated_at: {value!r} is not an integer")
        try:
            result[_parse_time(key)] = value
        except ValueError as exc:
            raise StorageError(f"failed to unmarshal updated_at: {exc}") from exc
    return result


def _from_row(row: tuple, null_lists_empty: bool = False) -> Chapter:
    chapter_id, name, start_node, nodes, characters, status, updated_at, author = row
    return Chapter(
        id=chapter_id,
        name=name or "",
        start_node=start_node or 0,
        nodes=_decode_ids(nodes, "nodes", null_lists_empty),
        characters=_decode_ids(characters, "characters", null_lists_empty),
        status=status or 0,
        updated_at=_decode_updated_at(updated_at),
        author=author or 0,
    )


def register_chapter(db: sqlite3.Connection | None, chapter: Chapter) -> int:
    """Insert a chapter with defaults filled in; return its id."""
    if db is None:
        raise StorageError("database connection is nil")
    values: dict[str, Any] = {
        "name": chapter.name or DEFAULT_NAME,
        "nodes": _encode_ids(chapter.nodes if chapter.nodes is not None else []),
        "characters": _encode_ids(
            chapter.characters if chapter.characters is not None else []
        ),
        "status": chapter.status,
        "author": chapter.author,
        "start_node": chapter.start_node,
    }
    if chapter.id:
        values = {"id": chapter.id, **values}
    columns = ", ".join(values)
    marks = ", ".join("?" for _ in values)
    try:
        with db:
            cursor = db.execute(
                f"INSERT INTO chapters ({columns}) VALUES ({marks})", tuple(values.values())
            )
            if cursor.rowcount == 0:
                raise StorageError("failed to create chapter record")
            chapter_id = chapter.id or cursor.lastrowid
            stamp = {datetime.now().astimezone(): chapter_id}
            db.execute(
                "UPDATE chapters SET updated_at = ? WHERE id = ?",
                (_encode_updated_at(stamp), chapter_id),
            )
    except sqlite3.DatabaseError as exc:
        raise StorageError(f"failed to create chapter record: {exc}") from exc
    return chapter_id


def select_chapter_with_id(db: sqlite3.Connection, chapter_id: int) -> Chapter:
    """Fetch one chapter by id."""
    row = db.execute(f"{_SELECT} WHERE id = ? LIMIT 1", (chapter_id,)).fetchone()
    if row is None:
        raise RecordNotFoundError("chapter data not found")
    return _from_row(row)


def update_chapter(db: sqlite3.Connection, chapter_id: int, new_chapter: Chapter) -> Chapter:
    """Overwrite a chapter's editable fields; return the stored chapter."""
    with db:
        cursor = db.execute(
            "UPDATE chapters SET name = ?, start_node = ?, nodes = ?, characters = ?, "
            "status = ?, updated_at = ? WHERE id = ?",
            (
                new_chapter.name,
                new_chapter.start_node,
                _encode_ids(new_chapter.nodes),
                _encode_ids(new_chapter.characters),
                new_chapter.status,
                _encode_updated_at(new_chapter.updated_at),
                chapter_id,
            ),
        )
    if cursor.rowcount == 0:
        raise RecordNotFoundError("chapter data not update")
    return select_chapter_with_id(db, chapter_id)


def delete_chapter(db: sqlite3.Connection, chapter_id: int) -> int:
    """Delete a chapter; return the number of rows deleted."""
    with db:
        cursor = db.execute("DELETE FROM chapters WHERE id = ?", (chapter_id,))
    if cursor.rowcount == 0:
        raise RecordNotFoundError("chapter data not update")
    return cursor.rowcount


def get_chapters_for_admin(db: sqlite3.Connection) -> list[Chapter]:
    """Fetch every chapter; missing node and character lists become empty."""
    try:
        rows = db.execute(f"{_SELECT} ORDER BY id").fetchall()
    except sqlite3.DatabaseError as exc:
        raise StorageError(f"failed to fetch chapters: {exc}") from exc
    return [_from_row(row, null_lists_empty=True) for row in rows]


def find_published_chapters(db: sqlite3.Connection) -> list[Chapter]:
    """Fetch every published chapter."""
    try:
        rows = db.execute(
            f"{_SELECT} WHERE status = ? ORDER BY id", (PUBLISHED_STATUS,)
        ).fetchall()
    except sqlite3.DatabaseError as exc:
        raise StorageError(f"failed to fetch published chapters: {exc}") from exc
    return [_from_row(row) for row in rows]