"""Upload rule tests — pure tests for recipient, photo and naming rules."""

import pytest

from app.core.enforce_upload import (
    build_storage_name,
    check_image_type,
    check_photo_count,
    check_photo_size,
    check_recipient_age,
    check_recipient_name,
    file_extension,
    parse_age,
    photo_reference,
)


# --- Recipient ----------------------------------------------------------------

@pytest.mark.parametrize("name", [None, "", "   "])
def test_blank_name_rejected(name):
    error = check_recipient_name(name)
    assert error["error_code"] == "INVALID_RECIPIENT_NAME"
    assert error["field"] == "recipientName"


def test_overlong_name_rejected():
    assert check_recipient_name("x" * 201) is not None


def test_name_accepted():
    assert check_recipient_name("  Sam ") is None


@pytest.mark.parametrize("age", [None, 0, -3, 151, True])
def test_age_out_of_range_rejected(age):
    error = check_recipient_age(age)
    assert error["error_code"] == "INVALID_RECIPIENT_AGE"
    assert error["field"] == "recipientAge"


@pytest.mark.parametrize("age", [1, 30, 150])
def test_age_bounds_inclusive(age):
    assert check_recipient_age(age) is None


@pytest.mark.parametrize(
    "raw,expected",
    [("30", 30), (" 7 ", 7), (42, 42), ("abc", None), ("3.5", None), ("", None), (None, None)],
)
def test_parse_age(raw, expected):
    assert parse_age(raw) == expected


# --- Photo count --------------------------------------------------------------

@pytest.mark.parametrize("count", [0, 1, 13, 20])
def test_photo_count_out_of_range(count):
    error = check_photo_count(count)
    assert error["error_code"] == "PHOTO_COUNT_OUT_OF_RANGE"


@pytest.mark.parametrize("count", [2, 7, 12])
def test_photo_count_in_range(count):
    assert check_photo_count(count) is None


def test_too_few_message_mentions_minimum():
    assert "at least 2" in check_photo_count(1)["message"]


# --- Image type & size --------------------------------------------------------

@pytest.mark.parametrize(
    "filename,content_type",
    [
        ("a.jpg", "image/jpeg"),
        ("a.JPEG", "image/jpeg"),
        ("a.png", "image/png"),
        ("a.gif", "image/gif"),
        ("a.webp", "image/webp"),
    ],
)
def test_image_types_accepted(filename, content_type):
    assert check_image_type(filename, content_type) is None


@pytest.mark.parametrize(
    "filename,content_type",
    [
        ("notes.txt", "text/plain"),
        ("a.png", "text/plain"),
        ("a.pdf", "image/png"),
        ("noext", "image/png"),
        (None, None),
        ("a.svg", "image/svg+xml"),
    ],
)
def test_non_images_rejected(filename, content_type):
    error = check_image_type(filename, content_type)
    assert error["error_code"] == "UNSUPPORTED_FILE_TYPE"


def test_size_ceiling():
    limit = 10 * 1024 * 1024
    assert check_photo_size("a.png", limit, limit) is None
    error = check_photo_size("a.png", limit + 1, limit)
    assert error["error_code"] == "FILE_TOO_LARGE"
    assert "10 MB" in error["message"]


# --- Naming -------------------------------------------------------------------

def test_storage_name_shape():
    assert build_storage_name("Cake.JPG", "abc123", 1700000000000) == "abc123-1700000000000.jpg"


def test_storage_name_without_extension():
    assert build_storage_name("photo", "tok", 5) == "tok-5"


def test_file_extension_uses_last_suffix():
    assert file_extension("archive.tar.png") == ".png"


def test_photo_reference_under_uploads():
    assert photo_reference("tok-5.png") == "/uploads/tok-5.png"
