from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.roster.models import Base


class Emblem(Base):
    """
    Optional authoritative record for a unit.
    When present it overrides whatever copy of the unit the members embed.
    """

    __tablename__ = "emblems"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    unit_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    emblem_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    motto: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_elite: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    founded_year: Mapped[int | None] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
