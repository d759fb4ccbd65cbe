from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.roster.models import Base

JSONType = JSON().with_variant(JSONB(), "postgresql")


class Character(Base):
    __tablename__ = "characters"
    __table_args__ = (
        Index("idx_characters_name", "name"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    # Identifier from the imported dataset; this is what URLs use.
    external_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    age: Mapped[int | None] = mapped_column(Integer, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    rank: Mapped[str | None] = mapped_column(String(128), nullable=True)
    birth_date: Mapped[str | None] = mapped_column(String(32), nullable=True)  # kept as the dataset's ISO string
    image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    weapons: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)

    # Embedded unit summary: {id, name, emblemUrl, motto, isElite, foundedYear}
    unit: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    @property
    def unit_id(self) -> str | None:
        return (self.unit or {}).get("id")

    @property
    def unit_name(self) -> str | None:
        return (self.unit or {}).get("name")
