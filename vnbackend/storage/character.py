"""Storage of story characters."""

from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass, field

from vnbackend.schema import RecordNotFoundError, StorageError

_SELECT = "SELECT id, name, slug, color, emotions FROM characters"


@dataclass
class Character:
    """A character with its emotion index to media id mapping."""

    id: int = 0
    name: str = ""
    slug: str = ""
    color: str = ""
    emotions: dict[int, int] = field(default_factory=dict)


def _encode_emotions(emotions: dict[int, int] | None) -> str:
    if emotions is None:
        return "null"
    return json.dumps({str(k): v for k, v in emotions.items()}, sort_keys=True)


def _decode_emotions(raw: str | None) -> dict[int, int]:
    if raw is None:
        raise StorageError("failed to scan row: emotions is NULL")
    try:
        data = json.loads(raw)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError("emotions is not an object")
        result = {}
        for key, value in data.items():
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"emotion value {value!r} is not an integer")
            result[int(key)] = value
        return result
    except ValueError as exc:
        raise StorageError(f"failed to unmarshal emotions: {exc}") from exc


def _from_row(row: tuple) -> Character:
    character_id, name, slug, color, emotions = row
    return Character(
        id=character_id,
        name=name or "",
        slug=slug or "",
        color=color or "",
        emotions=_decode_emotions(emotions),
    )


def register_character(db: sqlite3.Connection | None, character: Character) -> int:
    """Insert a character; return the number of rows created."""
    if db is None:
        raise StorageError("db is nil")
    values = {
        "name": character.name,
        "slug": character.slug,
        "color": character.color,
        "emotions": _encode_emotions(character.emotions),
    }
    if character.id:
        values = {"id": character.id, **values}
    columns = ", ".join(values)
    marks = ", ".join("?" for _ in values)
    try:
        with db:
            cursor = db.execute(
                f"INSERT INTO characters ({columns}) VALUES ({marks})", tuple(values.values())
            )
    except sqlite3.DatabaseError as exc:
        raise StorageError("character not created") from exc
    if cursor.rowcount == 0:
        raise StorageError("character not created")
    return cursor.rowcount


def select_character_with_id(db: sqlite3.Connection, character_id: int) -> Character:
    """Fetch one character by id."""
    row = db.execute(f"{_SELECT} WHERE id = ?", (character_id,)).fetchone()
    if row is None:
        raise RecordNotFoundError("record not found")
    return _from_row(row)


def select_characters(db: sqlite3.Connection | None) -> list[Character]:
    """Fetch every character."""
    if db is None:
        raise StorageError("db is nil")
    return [_from_row(row) for row in db.execute(f"{_SELECT} ORDER BY id")]


def update_character(
    db: sqlite3.Connection, character_id: int, new_character: Character
) -> Character:
    """Overwrite a character's fields; return the stored character."""
    with db:
        cursor = db.execute(
            "UPDATE characters SET name = ?, slug = ?, color = ?, emotions = ? WHERE id = ?",
            (
                new_character.name,
                new_character.slug,
                new_character.color,
                _encode_emotions(new_character.emotions),
                character_id,
            ),
        )
    if cursor.rowcount == 0:
        raise RecordNotFoundError("character data not update")
    return Character(
        id=character_id,
        name=new_character.name,
        slug=new_character.slug,
        color=new_character.color,
        emotions=dict(new_character.emotions or {}),
    )


def delete_character(db: sqlite3.Connection, character_id: int) -> int:
    """Delete a character; return the number of rows deleted."""
    with db:
        cursor = db.execute("DELETE FROM characters WHERE id = ?", (character_id,))
    if cursor.rowcount == 0:
        raise RecordNotFoundError("character data not update")
    return cursor.rowcount