"""Upload & Recipient Rules — pure checks shared by the upload handler and the creation form.

Invariants:
    - All functions are PURE: no IO, no async, no DB (clock and randomness passed in)
    - Return error dict on violation, None on success
    - An image must pass BOTH the extension and the declared content-type check
    - Storage names have the shape <random-id>-<unix-millis><.ext>

Design Decisions:
    - Return dicts (not exceptions): the creation form shows them inline, the
      upload handler lifts them into GreetingValidationError
"""

import os

from app.core.domain_types import (
    ALLOWED_IMAGE_CONTENT_TYPES,
    ALLOWED_IMAGE_EXTENSIONS,
    MAX_AGE,
    MAX_NAME_LENGTH,
    MAX_PHOTOS,
    MIN_AGE,
    MIN_PHOTOS,
    UPLOADS_URL_PREFIX,
    PhotoRef,
)


# --- Recipient fields ---------------------------------------------------------

def check_recipient_name(name: str | None) -> dict | None:
    """Name must be non-empty after stripping and at most MAX_NAME_LENGTH chars."""
    if name is None or not name.strip():
        return _error(
            "INVALID_RECIPIENT_NAME", "recipientName",
            "Please enter the recipient's name",
        )
    if len(name.strip()) > MAX_NAME_LENGTH:
        return _error(
            "INVALID_RECIPIENT_NAME", "recipientName",
            f"Recipient name must be {MAX_NAME_LENGTH} characters or fewer",
        )
    return None


def check_recipient_age(age: int | None) -> dict | None:
    """Age must be an integer within MIN_AGE..MAX_AGE."""
    if age is None or isinstance(age, bool) or not isinstance(age, int):
        return _error(
            "INVALID_RECIPIENT_AGE", "recipientAge", "Please enter a valid age",
        )
    if not MIN_AGE <= age <= MAX_AGE:
        return _error(
            "INVALID_RECIPIENT_AGE", "recipientAge",
            f"Please enter a valid age ({MIN_AGE}-{MAX_AGE})",
        )
    return None


def parse_age(raw: str | int | None) -> int | None:
    """Parse the age form field; None when it is not an integer."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    try:
        return int(str(raw).strip(), 10)
    except ValueError:
        return None


# --- Photos -------------------------------------------------------------------

def check_photo_count(count: int) -> dict | None:
    """A greeting needs MIN_PHOTOS..MAX_PHOTOS photos."""
    if count < MIN_PHOTOS:
        return _error(
            "PHOTO_COUNT_OUT_OF_RANGE", "photos",
            f"Please upload at least {MIN_PHOTOS} photos",
        )
    if count > MAX_PHOTOS:
        return _error(
            "PHOTO_COUNT_OUT_OF_RANGE", "photos",
            f"You can upload a maximum of {MAX_PHOTOS} photos",
        )
    return None


def check_image_type(filename: str | None, content_type: str | None) -> dict | None:
    """Accept only jpeg/jpg/png/gif/webp by extension AND declared content type."""
    extension = file_extension(filename or "")
    declared = (content_type or "").split(";")[0].strip().lower()
    if extension not in ALLOWED_IMAGE_EXTENSIONS or declared not in ALLOWED_IMAGE_CONTENT_TYPES:
        return _error(
            "UNSUPPORTED_FILE_TYPE", "photos",
            f"Only image files are allowed: '{filename or ''}'",
        )
    return None


def check_photo_size(filename: str | None, size: int, max_bytes: int) -> dict | None:
    """Reject files above the per-photo ceiling."""
    if size > max_bytes:
        mb = max_bytes // (1024 * 1024)
        return _error(
            "FILE_TOO_LARGE", "photos",
            f"Photo '{filename or ''}' exceeds {mb} MB limit",
        )
    return None


# --- Storage naming -----------------------------------------------------------

def file_extension(filename: str) -> str:
    """Lower-cased extension including the dot, '' when absent."""
    return os.path.splitext(filename)[1].lower()


def build_storage_name(original_filename: str, token: str, now_ms: int) -> str:
    """Unique stored filename: random token, then timestamp, then original extension."""
    return f"{token}-{now_ms}{file_extension(original_filename)}"


def photo_reference(storage_name: str) -> PhotoRef:
    """Public reference path persisted on the greeting."""
    return PhotoRef(f"{UPLOADS_URL_PREFIX}/{storage_name}")


# --- Helper -------------------------------------------------------------------

def _error(code: str, field: str, message: str) -> dict:
    """Construct a standard error dict."""
    return {
        "status": "error",
        "error_code": code,
        "field": field,
        "message": message,
    }
