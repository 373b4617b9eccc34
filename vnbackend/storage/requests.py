"""Storage of admin requests."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass

from vnbackend.schema import RecordNotFoundError, StorageError

_COLUMNS = ("id", "type", "status", "requesting_admin", "requested_chapter_id")


@dataclass
class Request:
    """A request from one admin concerning a chapter."""

    id: int = 0
    type: int = 0
    status: int = 0
    requesting_admin: int = 0
    requested_chapter_id: int = 0


def _select_sql(where: str = "") -> str:
    return f"SELECT {', '.join(_COLUMNS)} FROM requests {where}"


def register_request(db: sqlite3.Connection, request: Request) -> int:
    """Insert a request; return the number of rows created."""
    values = {
        "type": request.type,
        "status": request.status,
        "requesting_admin": request.requesting_admin,
        "requested_chapter_id": request.requested_chapter_id,
    }
    if request.id:
        values = {"id": request.id, **values}
    columns = ", ".join(values)
    marks = ", ".join("?" for _ in values)
    try:
        with db:
            cursor = db.execute(
                f"INSERT INTO requests ({columns}) VALUES ({marks})", tuple(values.values())
            )
    except sqlite3.DatabaseError as exc:
        raise StorageError("request not created") from exc
    if cursor.rowcount == 0:
        raise StorageError("request not created")
    return cursor.rowcount


def select_request_with_id(db: sqlite3.Connection, request_id: int) -> Request:
    """Fetch one request by id."""
    row = db.execute(_select_sql("WHERE id = ? LIMIT 1"), (request_id,)).fetchone()
    if row is None:
        raise RecordNotFoundError(f"request with id {request_id} not found")
    return Request(*row)


def update_request(db: sqlite3.Connection, request_id: int, new_request: Request) -> int:
    """Update the non-zero fields of a request; return the rows changed."""
    changes = {
        name: value
        for name, value in (
            ("type", new_request.type),
            ("status", new_request.status),
            ("requesting_admin", new_request.requesting_admin),
            ("requested_chapter_id", new_request.requested_chapter_id),
        )
        if value
    }
    if not changes:
        return 0
    assignments = ", ".join(f"{name} = ?" for name in changes)
    with db:
        cursor = db.execute(
            f"UPDATE requests SET {assignments} WHERE id = ?",
            (*changes.values(), request_id),
        )
    return cursor.rowcount


def delete_request(db: sqlite3.Connection, request_id: int) -> int:
    """Delete a request; return the number of rows deleted."""
    with db:
        cursor = db.execute("DELETE FROM requests WHERE id = ?", (request_id,))
    return cursor.rowcount


def get_all_requests(db: sqlite3.Connection) -> list[Request]:
    """Fetch every request; raise when there are none."""
    requests = [Request(*row) for row in db.execute(_select_sql("ORDER BY id"))]
    if not requests:
        raise RecordNotFoundError("no records found")
    return requests