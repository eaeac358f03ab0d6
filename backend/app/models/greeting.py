"""Greeting ORM — the only persistent entity: recipient details plus ordered photo references.

Invariants:
    - id is UUID primary key (uuid4 default; the migration adds server default gen_random_uuid())
    - recipient_name, recipient_age and photos are non-nullable
    - photos order is the carousel display order
    - Rows are written once and never updated or deleted

Design Decisions:
    - photos is a Postgres TEXT[]; SQLite (tests, local dev) falls back to JSON
"""

import uuid

from sqlalchemy import Integer, JSON, Text
from sqlalchemy.dialects.postgresql import ARRAY, UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class Greeting(Base):
    """One created birthday wish."""
    __tablename__ = "greetings"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    recipient_name: Mapped[str] = mapped_column(Text, nullable=False)
    recipient_age: Mapped[int] = mapped_column(Integer, nullable=False)
    photos: Mapped[list[str]] = mapped_column(
        ARRAY(Text).with_variant(JSON(), "sqlite"), nullable=False,
    )
