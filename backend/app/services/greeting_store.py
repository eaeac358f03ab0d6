"""Greeting Store — create-once / read-many persistence for greetings.

Invariants:
    - create() inserts exactly one row and returns it with its generated id
    - get() returns None for unknown or malformed ids (absence is not an error)
    - No update or delete operations exist
    - SQLAlchemy failures roll back and surface as DatabaseError
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import DatabaseError, ErrorContext
from app.models.greeting import Greeting
from app.schemas.greeting import GreetingCreate

logger = logging.getLogger(__name__)


class GreetingStore:
    """Greeting persistence over an AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, data: GreetingCreate) -> Greeting:
        """Persist a new greeting; photo order is kept as given."""
        greeting = Greeting(
            recipient_name=data.recipient_name,
            recipient_age=data.recipient_age,
            photos=list(data.photos),
        )
        try:
            self.db.add(greeting)
            await self.db.commit()
            await self.db.refresh(greeting)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to insert greeting: {e}", exc_info=True)
            raise DatabaseError("Greeting could not be saved", "insert")
        return greeting

    async def get(self, greeting_id: str) -> Greeting | None:
        """Fetch by id; None when absent."""
        try:
            key = uuid.UUID(str(greeting_id))
        except ValueError:
            return None
        try:
            result = await self.db.execute(
                select(Greeting).where(Greeting.id == key),
            )
        except SQLAlchemyError as e:
            logger.error(
                f"Failed to read greeting: {e}",
                extra={"greeting_id": str(greeting_id)}, exc_info=True,
            )
            raise DatabaseError(
                "Greeting could not be read", "select",
                context=ErrorContext(greeting_id=str(greeting_id)),
            )
        return result.scalar_one_or_none()
