"""Storage of players and their progress through the chapters."""

from __future__ import annotations

import json
import logging
import sqlite3
from dataclasses import dataclass, field
from typing import Any

from vnbackend.schema import RecordNotFoundError, StorageError

_log = logging.getLogger(__name__)
_SELECT = (
    "SELECT id, name, email, phone, password, admin, completed_chapters, "
    "chapters_progress, sound_settings FROM players"
)


@dataclass
class Player:
    """A player account with its completed chapters and per-chapter progress."""

    id: int = 0
    name: str = ""
    email: str = ""
    phone: str = ""
    password: str = ""
    admin: bool = False
    completed_chapters: list[int] = field(default_factory=list)
    chapters_progress: dict[int, int] = field(default_factory=dict)
    sound_settings: Any = field(default_factory=dict)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _load(raw: Any, name: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise StorageError(f"failed to unmarshal {name}: {exc}") from exc


def _decode_completed(raw: Any) -> list[int]:
    if raw is None or raw == "":
        return []
    data = _load(raw, "completed_chapters")
    if data is None:
        return []
    if not isinstance(data, list) or not all(_is_int(item) for item in data):
        raise StorageError("failed to unmarshal completed_chapters: expected a list of integers")
    return data


def _decode_progress(raw: Any) -> dict[int, int]:
    if raw is None or raw == "":
        return {}
    data = _load(raw, "chapters_progress")
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise StorageError("failed to unmarshal chapters_progress: expected an object")
    result: dict[int, int] = {}
    for key, value in data.items():
        if not _is_int(value):
            raise StorageError(
                f"failed to unmarshal chapters_progress: {value!r} is not an integer"
            )
        try:
            result[int(key)] = value
        except ValueError as exc:
            raise StorageError(f"failed to unmarshal chapters_progress: {exc}") from exc
    return result


def _decode_sound(raw: Any) -> Any:
    if raw is None or raw == "":
        return {}
    return _load(raw, "sound_settings")


def _encode_progress(progress: dict[int, int] | None) -> str:
    if progress is None:
        return "null"
    return json.dumps({str(key): value for key, value in progress.items()})


def _encode_completed(completed: list[int] | None) -> str:
    if completed is None:
        return "null"
    return json.dumps(list(completed))


def _from_row(row: tuple) -> Player:
    player_id, name, email, phone, password, admin, completed, progress, sound = row
    return Player(
        id=player_id,
        name=name or "",
        email=email or "",
        phone=phone or "",
        password=password or "",
        admin=bool(admin),
        completed_chapters=_decode_completed(completed),
        chapters_progress=_decode_progress(progress),
        sound_settings=_decode_sound(sound),
    )


def register_player(db: sqlite3.Connection, player: Player) -> int:
    """Insert a player with empty progress; return the number of rows created."""
    if not player.email.strip():
        raise StorageError("email must not be empty")
    values: dict[str, Any] = {
        "name": player.name,
        "email": player.email,
        "phone": player.phone,
        "password": player.password,
        "admin": int(bool(player.admin)),
        "completed_chapters": "[]",
        "chapters_progress": "{}",
        "sound_settings": json.dumps(player.sound_settings),
    }
    if player.id:
        values = {"id": player.id, **values}
    columns = ", ".join(values)
    marks = ", ".join("?" for _ in values)
    try:
        with db:
            cursor = db.execute(
                f"INSERT INTO players ({columns}) VALUES ({marks})", tuple(values.values())
            )
    except sqlite3.DatabaseError as exc:
        raise StorageError(f"failed to create player: {exc}") from exc
    return cursor.rowcount


def select_player_with_email(db: sqlite3.Connection, email: str) -> Player:
    """Fetch one player by e-mail address."""
    row = db.execute(f"{_SELECT} WHERE email = ? LIMIT 1", (email,)).fetchone()
    if row is None:
        raise RecordNotFoundError("player data not found")
    return _from_row(row)


def select_player_with_id(db: sqlite3.Connection, player_id: int) -> Player:
    """Fetch one player by id."""
    row = db.execute(f"{_SELECT} WHERE id = ? LIMIT 1", (player_id,)).fetchone()
    if row is None:
        raise RecordNotFoundError("player data not found")
    return _from_row(row)


def update_player(db: sqlite3.Connection, player_id: int, new_player: Player) -> Player:
    """Overwrite a player's fields; return the stored player."""
    _log.debug(
        "update player %s: completed=%r progress=%r",
        player_id,
        new_player.completed_chapters,
        new_player.chapters_progress,
    )
    with db:
        cursor = db.execute(
            "UPDATE players SET name = ?, email = ?, phone = ?, password = ?, admin = ?, "
            "completed_chapters = ?, chapters_progress = ?, sound_settings = ? WHERE id = ?",
            (
                new_player.name,
                new_player.email,
                new_player.phone,
                new_player.password,
                int(bool(new_player.admin)),
                _encode_completed(new_player.completed_chapters),
                _encode_progress(new_player.chapters_progress),
                json.dumps(new_player.sound_settings),
                player_id,
            ),
        )
    if cursor.rowcount == 0:
        raise RecordNotFoundError("player data not updated")
    return select_player_with_id(db, player_id)


def delete_player(db: sqlite3.Connection, email: str) -> int:
    """Delete the players with this e-mail address; return the rows deleted."""
    with db:
        cursor = db.execute("DELETE FROM players WHERE email = ?", (email,))
    if cursor.rowcount == 0:
        raise RecordNotFoundError("player data not update")
    return cursor.rowcount