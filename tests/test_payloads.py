import pytest

from vnbackend.payloads import (
    ChapterUpdate,
    CharacterUpdate,
    PayloadError,
    ResponseChapter,
    ResponseCharacter,
    parse_chapters_by_user_request,
    parse_create_chapter_request,
    parse_create_character_request,
    parse_update_chapter_request,
    parse_update_character_request,
    prepare_chapters_for_response,
    prepare_character_for_response,
)
from vnbackend.storage.chapter import Chapter
from vnbackend.storage.character import Character


def test_prepare_character_empty_list():
    assert prepare_character_for_response([]) == []


def test_prepare_character_single():
    characters = [
        Character(id=1, name="test_name", slug="test_slug", color="#FF0000", emotions={1: 2})
    ]
    assert prepare_character_for_response(characters) == [
        ResponseCharacter(
            id="1",
            name="test_name",
            slug="test_slug",
            color="#FF0000",
            emotions={"1": "2"},
        )
    ]


def test_prepare_character_none():
    assert prepare_character_for_response(None) == []


def test_prepare_chapters():
    chapters = [
        Chapter(
            id=7,
            name="Глава 1",
            start_node=3,
            nodes=[1, 2, 3],
            characters=[4, 5],
            status=2,
            author=11,
        )
    ]
    assert prepare_chapters_for_response(chapters) == [
        ResponseChapter(
            id="7",
            name="Глава 1",
            start_node="3",
            nodes=["1", "2", "3"],
            characters=["4", "5"],
            status=2,
            author="11",
        )
    ]


def test_prepare_chapters_none_lists():
    result = prepare_chapters_for_response([Chapter(id=1, nodes=None, characters=None)])
    assert result[0].nodes == []
    assert result[0].characters == []


@pytest.mark.parametrize(
    "body, status",
    [
        (b"", 400),
        ('{"author": "invalid json', 400),
        ('{"author": "not a number"}', 500),
        ("[1, 2]", 400),
        ('{"author": 5}', 400),
    ],
)
def test_create_chapter_errors(body, status):
    with pytest.raises(PayloadError) as info:
        parse_create_chapter_request(body)
    assert info.value.status == status


def test_create_chapter_ok():
    assert parse_create_chapter_request('{"author": "42"}') == 42
    assert parse_create_chapter_request(b'{"Author": "-3"}') == -3


def test_create_chapter_rejects_loose_integers():
    for text in (" 1", "1_0", "9223372036854775808"):
        with pytest.raises(PayloadError) as info:
            parse_create_chapter_request('{"author": "%s"}' % text)
        assert info.value.status == 500


@pytest.mark.parametrize(
    "body, status",
    [
        (b"", 400),
        ('{"user_id": "invalid json', 400),
        ('{"user_id": "not a number"}', 500),
    ],
)
def test_chapters_by_user_errors(body, status):
    with pytest.raises(PayloadError) as info:
        parse_chapters_by_user_request(body)
    assert info.value.status == status


def test_chapters_by_user_ok():
    assert parse_chapters_by_user_request('{"user_id": "+15"}') == 15


@pytest.mark.parametrize(
    "body",
    [
        b"",
        '{"name": "invalid json',
        '{"name": "Test Character", "slug": "test-character"',
        '{"name": 3}',
    ],
)
def test_create_character_invalid(body):
    with pytest.raises(PayloadError) as info:
        parse_create_character_request(body)
    assert info.value.status == 400


def test_create_character_ok():
    assert parse_create_character_request(
        '{"name": "Test Character", "slug": "test-character"}'
    ) == ("Test Character", "test-character")


def test_create_character_null_body():
    assert parse_create_character_request("null") == ("", "")


@pytest.mark.parametrize(
    "body, status",
    [
        (b"", 400),
        ('{"id": "invalid json"', 400),
        ('{"id": "not a number"}', 500),
        ('{"id": "1", "nodes": ["not a number"]}', 500),
        ('{"id": "1", "characters": ["not a number"]}', 500),
        ('{"id": "1", "update_author_id": "not a number"}', 500),
        ('{"id": "1", "start_node": "not a number"}', 500),
        ('{"id": "1", "update_author_id": "2", "start_node": "x"}', 500),
        ('{"id": "1", "status": 1.5}', 400),
    ],
)
def test_update_chapter_errors(body, status):
    with pytest.raises(PayloadError) as info:
        parse_update_chapter_request(body)
    assert info.value.status == status


def test_update_chapter_string_status_is_bad_request():
    body = """{
        "id": "1",
        "name": "Updated Chapter",
        "nodes": ["1", "2", "3"],
        "characters": ["1", "2"],
        "status": "1",
        "update_author_id": "123",
        "start_node": "1"
    }"""
    with pytest.raises(PayloadError) as info:
        parse_update_chapter_request(body)
    assert info.value.status == 400


def test_update_chapter_ok():
    body = """{
        "id": "1",
        "name": "Updated Chapter",
        "nodes": ["1", "2", "3"],
        "characters": ["1", "2"],
        "status": 1,
        "update_author_id": "123",
        "start_node": "1"
    }"""
    assert parse_update_chapter_request(body) == ChapterUpdate(
        id=1,
        name="Updated Chapter",
        nodes=[1, 2, 3],
        characters=[1, 2],
        author=123,
        start_node=1,
        status=1,
    )


def test_update_chapter_empty_start_node_is_zero():
    result = parse_update_chapter_request('{"id": "4", "update_author_id": "9"}')
    assert result.start_node == 0
    assert result.nodes == []
    assert result.characters == []
    assert result.author == 9


@pytest.mark.parametrize(
    "body, status",
    [
        ("{invalid json}", 400),
        (
            '{"id":"invalid","name":"Test Character","slug":"test-character",'
            '"color":"#FF0000","emotions":{"1":"2"}}',
            500,
        ),
        (
            '{"id":"1","name":"Test Character","slug":"test-character",'
            '"color":"#FF0000","emotions":{"invalid":"2"}}',
            500,
        ),
        ('{"id":"1","emotions":{"1":"x"}}', 500),
        ('{"id":"1","emotions":{"1":2}}', 400),
    ],
)
def test_update_character_errors(body, status):
    with pytest.raises(PayloadError) as info:
        parse_update_character_request(body)
    assert info.value.status == status


def test_update_character_ok():
    body = (
        '{"id":"1","name":"Test Character","slug":"test-character",'
        '"color":"#FF0000","emotions":{"1":"2","3":"4"}}'
    )
    assert parse_update_character_request(body) == CharacterUpdate(
        id=1,
        name="Test Character",
        slug="test-character",
        color="#FF0000",
        emotions={1: 2, 3: 4},
    )


def test_payload_error_default_status():
    assert PayloadError("bad").status == 400