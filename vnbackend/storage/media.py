"""Storage of media files."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass

from vnbackend.schema import RecordNotFoundError, StorageError


@dataclass
class Media:
    """A stored file with its content type."""

    id: int = 0
    file_data: bytes | None = None
    content_type: str = ""


def _from_row(row: tuple) -> Media:
    media_id, file_data, content_type = row
    return Media(
        id=media_id,
        file_data=bytes(file_data) if file_data is not None else None,
        content_type=content_type or "",
    )


def register_media(db: sqlite3.Connection, media: Media) -> int:
    """Insert a media record; return the number of rows created."""
    values = {"file_data": media.file_data, "content_type": media.content_type}
    if media.id:
        values = {"id": media.id, **values}
    columns = ", ".join(values)
    marks = ", ".join("?" for _ in values)
    try:
        with db:
            cursor = db.execute(
                f"INSERT INTO media ({columns}) VALUES ({marks})", tuple(values.values())
            )
    except sqlite3.DatabaseError as exc:
        raise StorageError("media not created") from exc
    if cursor.rowcount == 0:
        raise StorageError("media not created")
    return cursor.rowcount


def select_media_with_id(db: sqlite3.Connection, media_id: int) -> Media:
    """Fetch one media record by id."""
    row = db.execute(
        "SELECT id, file_data, content_type FROM media WHERE id = ? LIMIT 1", (media_id,)
    ).fetchone()
    if row is None:
        raise RecordNotFoundError("media data not found")
    return _from_row(row)


def select_media(db: sqlite3.Connection) -> list[Media]:
    """Fetch every media record."""
    rows = db.execute("SELECT id, file_data, content_type FROM media ORDER BY id")
    return [_from_row(row) for row in rows]


def delete_media(db: sqlite3.Connection, media_id: int) -> int:
    """Delete a media record; return the number of rows deleted."""
    with db:
        cursor = db.execute("DELETE FROM media WHERE id = ?", (media_id,))
    if cursor.rowcount == 0:
        raise RecordNotFoundError("media data not update")
    return cursor.rowcount