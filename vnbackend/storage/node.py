"""Storage of story nodes."""

from __future__ import annotations

import json
import logging
import sqlite3
from dataclasses import dataclass, field
from typing import Any

from vnbackend.schema import RecordNotFoundError, StorageError

DEFAULT_SLUG = "default-slug"
DEFAULT_MEDIA = 1

_log = logging.getLogger(__name__)
_SELECT = (
    "SELECT id, slug, chapter_id, music, background, events, branching, end_info, comment "
    "FROM nodes"
)


@dataclass
class Node:
    """A scene of a chapter: its events, branching and ending."""

    id: int = 0
    slug: str = ""
    events: dict[int, Any] | None = field(default_factory=dict)
    chapter_id: int = 0
    music: int = 0
    background: int = 0
    branching: dict[str, Any] = field(default_factory=dict)
    end: dict[str, Any] = field(default_factory=dict)
    comment: str = ""


def _encode_events(events: dict[int, Any] | None) -> str:
    if events is None:
        return "null"
    return json.dumps({str(key): value for key, value in events.items()})


def _encode_object(value: dict[str, Any] | None) -> str:
    return json.dumps(value if value is not None else {})


def _load_object(raw: Any, name: str) -> dict:
    if raw is None:
        raise StorageError(f"failed to scan node: {name} is NULL")
    try:
        data = json.loads(raw)
    except ValueError as exc:
        raise StorageError(f"failed to unmarshal {name}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise StorageError(f"failed to unmarshal {name}: expected an object")
    return data


def _decode_events(raw: Any) -> dict[int, Any]:
    data = _load_object(raw, "events")
    try:
        return {int(key): value for key, value in data.items()}
    except ValueError as exc:
        raise StorageError(f"failed to unmarshal events: {exc}") from exc


def _from_row(row: tuple) -> Node:
    node_id, slug, chapter_id, music, background, events, branching, end, comment = row
    return Node(
        id=node_id,
        slug=slug or "",
        events=_decode_events(events),
        chapter_id=chapter_id or 0,
        music=music or 0,
        background=background or 0,
        branching=_load_object(branching, "branching"),
        end=_load_object(end, "end info"),
        comment=comment or "",
    )


def register_node(db: sqlite3.Connection, node: Node) -> int:
    """Insert a node with defaults filled in; return its id."""
    events_json = _encode_events(node.events if node.events is not None else {})
    _log.debug("events JSON: %s", events_json)
    values: dict[str, Any] = {
        "slug": node.slug or DEFAULT_SLUG,
        "events": events_json,
        "chapter_id": node.chapter_id,
        "music": node.music or DEFAULT_MEDIA,
        "background": node.background or DEFAULT_MEDIA,
        "branching": _encode_object({}),
        "end_info": _encode_object({}),
        "comment": node.comment,
    }
    if node.id:
        values = {"id": node.id, **values}
    columns = ", ".join(values)
    marks = ", ".join("?" for _ in values)
    try:
        with db:
            cursor = db.execute(
                f"INSERT INTO nodes ({columns}) VALUES ({marks})", tuple(values.values())
            )
    except sqlite3.DatabaseError as exc:
        raise StorageError(f"failed to create node record: {exc}") from exc
    if cursor.rowcount == 0:
        raise StorageError("failed to create node record")
    return node.id or cursor.lastrowid


def select_node_with_id(db: sqlite3.Connection, node_id: int) -> Node | None:
    """Fetch one node by id, or None when there is no such node."""
    row = db.execute(f"{_SELECT} WHERE id = ? LIMIT 1", (node_id,)).fetchone()
    return None if row is None else _from_row(row)


def update_node(db: sqlite3.Connection, node_id: int, new_node: Node) -> Node:
    """Overwrite a node's content (not its comment); return the stored node."""
    events_json = _encode_events(new_node.events)
    _log.debug("events JSON: %s", events_json)
    with db:
        cursor = db.execute(
            "UPDATE nodes SET slug = ?, events = ?, chapter_id = ?, music = ?, "
            "background = ?, branching = ?, end_info = ? WHERE id = ?",
            (
                new_node.slug,
                events_json,
                new_node.chapter_id,
                new_node.music,
                new_node.background,
                _encode_object(new_node.branching),
                _encode_object(new_node.end),
                node_id,
            ),
        )
    if cursor.rowcount == 0:
        raise RecordNotFoundError("node data not update")
    stored = select_node_with_id(db, node_id)
    if stored is None:
        raise RecordNotFoundError("node data not update")
    return stored


def delete_node(db: sqlite3.Connection, node_id: int) -> int:
    """Delete a node; return the number of rows deleted."""
    try:
        with db:
            cursor = db.execute("DELETE FROM nodes WHERE id = ?", (node_id,))
    except sqlite3.DatabaseError as exc:
        raise StorageError(f"failed to delete node: {exc}") from exc
    if cursor.rowcount == 0:
        raise RecordNotFoundError("record not found")
    return cursor.rowcount


def get_node_by_id(db: sqlite3.Connection, node_id: int) -> Node:
    """Fetch one node by id; an empty Node when there is none."""
    try:
        row = db.execute(f"{_SELECT} WHERE id = ?", (node_id,)).fetchone()
    except sqlite3.DatabaseError as exc:
        raise StorageError(f"failed to fetch node: {exc}") from exc
    return Node() if row is None else _from_row(row)