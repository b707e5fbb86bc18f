"""Unit tests for the post service helpers, schemas and error taxonomy."""

from datetime import datetime, timezone
from unittest import mock

import pytest

from apps.blog.models import is_valid_post_id, isoformat, new_post_id
from apps.blog.schemas import PostCreate, PostUpdate
from apps.blog.services import PostPage, PostService, contains_pattern, parse_positive_int
from apps.shared.errors import ApiError, ErrorKind, STATUS_CODES


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, 7),
        ("3", 3),
        (" 4 ", 4),
        ("0", 7),
        ("-1", 7),
        ("abc", 7),
        ("2.5", 7),
        ("", 7),
        ("9" * 40, 2**31 - 1),
    ],
)
def test_parse_positive_int(value, expected):
    assert parse_positive_int(value, 7) == expected


def test_contains_pattern_escapes_wildcards():
    assert contains_pattern("50%_off\\") == "%50\\%\\_off\\\\%"


@pytest.mark.parametrize("total, limit, pages", [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (3, 2, 2)])
def test_post_page_count(total, limit, pages):
    assert PostPage(total=total, limit=limit).pages == pages


def test_generated_ids_are_valid_and_unique():
    ids = {new_post_id() for _ in range(100)}

    assert len(ids) == 100
    assert all(is_valid_post_id(post_id) for post_id in ids)


@pytest.mark.parametrize("value", ["", "abc", "0123456789abcdef0123456789abcdeg", "0123456789abcdef0123456789abcdef\n"])
def test_invalid_ids(value):
    assert not is_valid_post_id(value)


def test_isoformat_uses_utc_with_z_suffix():
    naive = datetime(2024, 5, 1, 12, 30)
    aware = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)

    assert isoformat(naive) == "2024-05-01T12:30:00.000000Z"
    assert isoformat(aware) == "2024-05-01T12:30:00.000000Z"


def test_post_create_trims_fields():
    data = PostCreate.from_payload({"title": " Title ", "content": " Long enough content ", "author": " Al "})

    assert data.model_dump() == {"title": "Title", "content": "Long enough content", "author": "Al"}


def test_post_update_keeps_only_given_fields():
    data = PostUpdate.from_payload({"content": "Brand new content", "other": 1})

    assert data.model_dump(exclude_unset=True) == {"content": "Brand new content"}


def test_booleans_are_stored_as_text():
    data = PostUpdate.from_payload({"author": True, "title": False})

    assert data.model_dump(exclude_unset=True) == {"title": "false", "author": "true"}


def test_parse_positive_int_clamps_to_maximum():
    assert parse_positive_int("500", 10, maximum=100) == 100
    assert parse_positive_int("100", 10, maximum=100) == 100


def test_schema_errors_carry_validation_kind():
    with pytest.raises(ApiError) as excinfo:
        PostUpdate.from_payload({"title": None, "author": "x"})

    assert excinfo.value.kind is ErrorKind.VALIDATION
    assert excinfo.value.status_code == 400
    assert excinfo.value.errors == [
        "Title is required",
        "Author name must be at least 2 characters long",
    ]


def test_every_error_kind_has_a_status():
    assert set(STATUS_CODES) == set(ErrorKind)
    assert STATUS_CODES[ErrorKind.NOT_FOUND] == 404
    assert STATUS_CODES[ErrorKind.STORE] == 500


@pytest.mark.parametrize("operation", ["get", "update", "delete"])
def test_invalid_id_never_reaches_the_store(operation):
    db = mock.MagicMock()
    service = PostService(db)
    args = ("bad-id", {"title": "Fine title"}) if operation == "update" else ("bad-id",)

    with pytest.raises(ApiError) as excinfo:
        getattr(service, operation)(*args)

    assert excinfo.value.kind is ErrorKind.INVALID_ID
    assert db.mock_calls == []


def test_missing_field_never_reaches_the_store():
    db = mock.MagicMock()

    with pytest.raises(ApiError) as excinfo:
        PostService(db).create({"title": "Only a title"})

    assert excinfo.value.kind is ErrorKind.MISSING_FIELD
    assert db.mock_calls == []
