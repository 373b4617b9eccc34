"""Request bodies of the chapter and character endpoints and their responses."""

from __future__ import annotations

import json
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any

from vnbackend.storage.chapter import Chapter
from vnbackend.storage.character import Character

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_MISSING = object()


class PayloadError(ValueError):
    """A request body could not be used; carries the HTTP status to answer with."""

    def __init__(self, message: str, status: int = HTTPStatus.BAD_REQUEST) -> None:
        super().__init__(message)
        self.status = int(status)


@dataclass
class ResponseCharacter:
    """A character as sent to clients: ids rendered as strings."""

    id: str = ""
    name: str = ""
    slug: str = ""
    color: str = ""
    emotions: dict[str, str] = field(default_factory=dict)


@dataclass
class ResponseChapter:
    """A chapter as sent to clients: ids rendered as strings."""

    id: str = ""
    name: str = ""
    start_node: str = ""
    nodes: list[str] = field(default_factory=list)
    characters: list[str] = field(default_factory=list)
    status: int = 0
    author: str = ""


@dataclass
class ChapterUpdate:
    """The validated content of a chapter update request."""

    id: int = 0
    name: str = ""
    nodes: list[int] = field(default_factory=list)
    characters: list[int] = field(default_factory=list)
    author: int = 0
    start_node: int = 0
    status: int = 0


@dataclass
class CharacterUpdate:
    """The validated content of a character update request."""

    id: int = 0
    name: str = ""
    slug: str = ""
    color: str = ""
    emotions: dict[int, int] = field(default_factory=dict)


def _invalid_json() -> PayloadError:
    return PayloadError("invalid JSON format", HTTPStatus.BAD_REQUEST)


def _decode_object(body: str | bytes) -> dict[str, Any]:
    try:
        data = json.loads(body)
    except (ValueError, TypeError) as exc:
        raise _invalid_json() from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise _invalid_json()
    return data


def _lookup(data: dict[str, Any], name: str) -> Any:
    """Find a field as a JSON decoder matching names case-insensitively would."""
    folded = name.casefold()
    found: Any = _MISSING
    for key, value in data.items():
        if key == name or key.casefold() == folded:
            found = value
    return found


def _string(data: dict[str, Any], name: str) -> str:
    value = _lookup(data, name)
    if value is _MISSING or value is None:
        return ""
    if not isinstance(value, str):
        raise _invalid_json()
    return value


def _integer(data: dict[str, Any], name: str) -> int:
    value = _lookup(data, name)
    if value is _MISSING or value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise _invalid_json()
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise _invalid_json()
    return value


def _string_list(data: dict[str, Any], name: str) -> list[str]:
    value = _lookup(data, name)
    if value is _MISSING or value is None:
        return []
    if not isinstance(value, list):
        raise _invalid_json()
    items = []
    for item in value:
        if item is None:
            items.append("")
        elif isinstance(item, str):
            items.append(item)
        else:
            raise _invalid_json()
    return items


def _string_map(data: dict[str, Any], name: str) -> dict[str, str]:
    value = _lookup(data, name)
    if value is _MISSING or value is None:
        return {}
    if not isinstance(value, dict):
        raise _invalid_json()
    result = {}
    for key, item in value.items():
        if item is None:
            result[key] = ""
        elif isinstance(item, str):
            result[key] = item
        else:
            raise _invalid_json()
    return result


def _parse_int64(text: str, what: str = "id") -> int:
    if _INT_PATTERN.fullmatch(text):
        value = int(text)
        if _INT64_MIN <= value <= _INT64_MAX:
            return value
    raise PayloadError(f"failed to convert {what}", HTTPStatus.INTERNAL_SERVER_ERROR)


def prepare_character_for_response(
    characters: Iterable[Character] | None,
) -> list[ResponseCharacter]:
    """Render characters for a response, ids and emotions as strings."""
    if characters is None:
        return []
    return [
        ResponseCharacter(
            id=str(character.id),
            name=character.name,
            slug=character.slug,
            color=character.color,
            emotions={str(k): str(v) for k, v in (character.emotions or {}).items()},
        )
        for character in characters
    ]


def prepare_chapters_for_response(
    chapters: Iterable[Chapter] | None,
) -> list[ResponseChapter]:
    """Render chapters for a response, ids as strings."""
    if chapters is None:
        return []
    return [
        ResponseChapter(
            id=str(chapter.id),
            name=chapter.name,
            start_node=str(chapter.start_node),
            nodes=[str(node) for node in chapter.nodes or ()],
            characters=[str(character) for character in chapter.characters or ()],
            status=chapter.status,
            author=str(chapter.author),
        )
        for chapter in chapters
    ]


def parse_create_chapter_request(body: str | bytes) -> int:
    """Return the author id of a chapter creation request."""
    data = _decode_object(body)
    return _parse_int64(_string(data, "author"))


def parse_chapters_by_user_request(body: str | bytes) -> int:
    """Return the user id whose chapters are requested."""
    data = _decode_object(body)
    return _parse_int64(_string(data, "user_id"))


def parse_create_character_request(body: str | bytes) -> tuple[str, str]:
    """Return the name and slug of a character creation request."""
    data = _decode_object(body)
    return _string(data, "name"), _string(data, "slug")


def parse_update_chapter_request(body: str | bytes) -> ChapterUpdate:
    """Validate a chapter update request; an empty start node means 0."""
    data = _decode_object(body)
    raw_id = _string(data, "id")
    name = _string(data, "name")
    raw_start = _string(data, "start_node")
    raw_nodes = _string_list(data, "nodes")
    raw_characters = _string_list(data, "characters")
    status = _integer(data, "status")
    raw_author = _string(data, "update_author_id")

    chapter_id = _parse_int64(raw_id)
    nodes = [_parse_int64(node) for node in raw_nodes]
    characters = [_parse_int64(character) for character in raw_characters]
    author = _parse_int64(raw_author)
    start_node = _parse_int64(raw_start) if raw_start else 0
    return ChapterUpdate(
        id=chapter_id,
        name=name,
        nodes=nodes,
        characters=characters,
        author=author,
        start_node=start_node,
        status=status,
    )


def parse_update_character_request(body: str | bytes) -> CharacterUpdate:
    """Validate a character update request, converting emotion ids to integers."""
    data = _decode_object(body)
    raw_id = _string(data, "id")
    name = _string(data, "name")
    slug = _string(data, "slug")
    color = _string(data, "color")
    raw_emotions = _string_map(data, "emotions")

    character_id = _parse_int64(raw_id)
    emotions = {
        _parse_int64(index, "index"): _parse_int64(media, "index")
        for index, media in raw_emotions.items()
    }
    return CharacterUpdate(
        id=character_id, name=name, slug=slug, color=color, emotions=emotions
    )