"""Create greetings table.

Revision ID: 001_greetings
Revises: None
Create Date: 2026-10-19

One row per birthday wish: recipient name, age and the ordered photo
reference paths (TEXT[]). id defaults to gen_random_uuid() server-side.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ARRAY, UUID

revision: str = "001_greetings"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "greetings",
        sa.Column(
            "id", UUID(as_uuid=True), primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("recipient_name", sa.Text, nullable=False),
        sa.Column("recipient_age", sa.Integer, nullable=False),
        sa.Column("photos", ARRAY(sa.Text), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("greetings")
