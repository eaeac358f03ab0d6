"""Greetings — create a greeting from a multipart upload and fetch it by id.

Invariants:
    - POST /api/greetings re-validates photo count server-side (2-12) regardless of the client
    - Recipient name and age are validated server-side (non-empty name, age 1-150)
    - GET /api/greetings/{id} returns 404 with an error body for unknown or malformed ids
    - Response bodies are camelCase Greeting JSON
"""

import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.core.errors import ResourceNotFoundError
from app.infrastructure.database import get_db
from app.infrastructure.file_store import LocalFileStore
from app.schemas.greeting import GreetingResponse
from app.services.greeting_store import GreetingStore
from app.services.upload_handler import UploadHandler

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/greetings", tags=["greetings"])


def get_file_store() -> LocalFileStore:
    """FastAPI dependency for the uploads directory."""
    return LocalFileStore(get_settings().upload_dir)


@router.post("", response_model=GreetingResponse)
async def create_greeting(
    recipient_name: str | None = Form(None, alias="recipientName"),
    recipient_age: str | None = Form(None, alias="recipientAge"),
    photos: list[UploadFile] | None = File(None),
    db: AsyncSession = Depends(get_db),
    file_store: LocalFileStore = Depends(get_file_store),
):
    """Create a greeting; the client builds the share link from the returned id."""
    handler = UploadHandler(
        GreetingStore(db), file_store, get_settings().max_photo_bytes,
    )
    greeting = await handler.create_greeting(
        recipient_name, recipient_age, photos or [],
    )
    return GreetingResponse.model_validate(greeting)


@router.get("/{greeting_id}", response_model=GreetingResponse)
async def get_greeting(
    greeting_id: str, db: AsyncSession = Depends(get_db),
):
    """Fetch a greeting by id."""
    greeting = await GreetingStore(db).get(greeting_id)
    if greeting is None:
        raise ResourceNotFoundError("Greeting", greeting_id)
    return GreetingResponse.model_validate(greeting)
