"""initial roster schema: users, characters, emblems

Revision ID: 3f1a2b4c5d6e
Revises:
Create Date: 2026-10-19 10:12:41.208311

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3f1a2b4c5d6e'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSON_TYPE = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    """Create users, characters and emblems tables."""
    # Check if tables already exist (idempotent)
    conn = op.get_bind()
    inspector = sa.inspect(conn)
    existing_tables = set(inspector.get_table_names())

    if "users" not in existing_tables:
        op.create_table(
            "users",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("username", sa.String(150), nullable=False, unique=True),
            sa.Column("password_hash", sa.String(255), nullable=False),
            sa.Column("role", sa.String(16), nullable=False, server_default="USER"),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )

    if "characters" not in existing_tables:
        op.create_table(
            "characters",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("external_id", sa.String(64), nullable=False, unique=True),
            sa.Column("name", sa.String(255), nullable=False),
            sa.Column("age", sa.Integer(), nullable=True),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column("rank", sa.String(128), nullable=True),
            sa.Column("birth_date", sa.String(32), nullable=True),
            sa.Column("image_url", sa.String(1024), nullable=True),
            sa.Column("weapons", JSON_TYPE, nullable=False),
            sa.Column("unit", JSON_TYPE, nullable=False),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )
        op.create_index("idx_characters_name", "characters", ["name"])

    if "emblems" not in existing_tables:
        op.create_table(
            "emblems",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("unit_id", sa.String(64), nullable=False, unique=True),
            sa.Column("name", sa.String(255), nullable=False),
            sa.Column("emblem_url", sa.String(1024), nullable=True),
            sa.Column("motto", sa.Text(), nullable=True),
            sa.Column("is_elite", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("founded_year", sa.Integer(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )


def downgrade() -> None:
    op.drop_table("emblems")
    op.drop_index("idx_characters_name", table_name="characters")
    op.drop_table("characters")
    op.drop_table("users")
