"""Upload Handler — validates a greeting creation request, stores its photos, persists the greeting.

Invariants:
    - Recipient fields are validated before any photo is read or written
    - Photo count (2-12), type and size are all validated before any photo is written
    - Each stored photo gets a unique <random-id>-<unix-millis><.ext> name
    - Photo references keep the order the files were received in
    - On storage or database failure, every file written for the request is removed
    - Nothing is persisted for a rejected request

Design Decisions:
    - Stream-read with early termination at the size ceiling instead of buffering
      unbounded uploads
    - token_factory / clock injectable so stored names are deterministic under test
"""

import logging
import secrets
import time
from typing import Callable, Protocol

from app.core.enforce_upload import (
    build_storage_name,
    check_image_type,
    check_photo_count,
    check_photo_size,
    check_recipient_age,
    check_recipient_name,
    parse_age,
    photo_reference,
)
from app.core.errors import GreetingValidationError
from app.infrastructure.file_store import LocalFileStore
from app.models.greeting import Greeting
from app.schemas.greeting import GreetingCreate
from app.services.greeting_store import GreetingStore

logger = logging.getLogger(__name__)

_READ_CHUNK_BYTES = 65_536


class IncomingPhoto(Protocol):
    """Shape shared by FastAPI's UploadFile and test doubles."""
    filename: str | None
    content_type: str | None

    async def read(self, size: int = -1) -> bytes: ...


def _random_token() -> str:
    return secrets.token_urlsafe(16)


def _now_ms() -> int:
    return int(time.time() * 1000)


class UploadHandler:
    """Turns a multipart creation request into a stored Greeting."""

    def __init__(
        self,
        store: GreetingStore,
        file_store: LocalFileStore,
        max_photo_bytes: int,
        token_factory: Callable[[], str] = _random_token,
        clock_ms: Callable[[], int] = _now_ms,
    ):
        self.store = store
        self.file_store = file_store
        self.max_photo_bytes = max_photo_bytes
        self.token_factory = token_factory
        self.clock_ms = clock_ms

    async def create_greeting(
        self,
        recipient_name: str | None,
        recipient_age: str | int | None,
        photos: list[IncomingPhoto],
    ) -> Greeting:
        """Validate, store photos, persist. Raises GreetingValidationError on bad input."""
        age = parse_age(recipient_age)
        _raise_if(check_recipient_name(recipient_name))
        _raise_if(check_recipient_age(age))
        _raise_if(check_photo_count(len(photos)))
        for photo in photos:
            _raise_if(check_image_type(photo.filename, photo.content_type))

        contents = [await self._read_bounded(photo) for photo in photos]

        stored_names: list[str] = []
        try:
            for photo, data in zip(photos, contents):
                name = build_storage_name(
                    photo.filename or "", self.token_factory(), self.clock_ms(),
                )
                await self.file_store.save(name, data)
                stored_names.append(name)

            greeting = await self.store.create(GreetingCreate(
                recipient_name=recipient_name,
                recipient_age=age,
                photos=[photo_reference(name) for name in stored_names],
            ))
        except Exception:
            await self._discard(stored_names)
            raise

        logger.info(
            f"Greeting created for {greeting.recipient_name!r}",
            extra={"greeting_id": str(greeting.id), "photo_count": len(stored_names)},
        )
        return greeting

    async def _read_bounded(self, photo: IncomingPhoto) -> bytes:
        """Read a photo fully, failing as soon as it passes the size ceiling."""
        chunks: list[bytes] = []
        total = 0
        while chunk := await photo.read(_READ_CHUNK_BYTES):
            total += len(chunk)
            _raise_if(check_photo_size(photo.filename, total, self.max_photo_bytes))
            chunks.append(chunk)
        return b"".join(chunks)

    async def _discard(self, names: list[str]) -> None:
        for name in names:
            await self.file_store.remove(name)
        if names:
            logger.warning(f"Removed {len(names)} orphaned upload(s) after failure")


def _raise_if(error: dict | None) -> None:
    """Lift a core rule violation into the API error hierarchy."""
    if error is None:
        return
    logger.warning(
        f"Greeting rejected: {error['message']}",
        extra={"error_code": error["error_code"], "field": error["field"]},
    )
    raise GreetingValidationError(
        error["message"], error["field"], error["error_code"],
    )
