from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.roster.modules.characters.models import Character
    from app.roster.modules.units.models import Emblem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UnitSummary:
    id: str
    name: str
    emblem_url: str | None = None
    motto: str | None = None
    is_elite: bool = False
    founded_year: int | None = None

    @classmethod
    def from_embedded(cls, unit: Mapping[str, Any]) -> "UnitSummary":
        return cls(
            id=str(unit.get("id")),
            name=unit.get("name") or "",
            emblem_url=unit.get("emblemUrl"),
            motto=unit.get("motto"),
            is_elite=bool(unit.get("isElite", False)),
            founded_year=unit.get("foundedYear"),
        )

    @classmethod
    def from_emblem(cls, emblem: "Emblem") -> "UnitSummary":
        return cls(
            id=emblem.unit_id,
            name=emblem.name,
            emblem_url=emblem.emblem_url,
            motto=emblem.motto,
            is_elite=emblem.is_elite,
            founded_year=emblem.founded_year,
        )


@dataclass(frozen=True)
class UnitDetail:
    unit: UnitSummary
    members: list["Character"]
    enriched: bool


def aggregate_units(characters: Iterable["Character"]) -> list[UnitSummary]:
    """
    Distinct units by id, in first-seen order.
    If members disagree about a unit's data, the last member seen wins.
    """
    units: dict[str, UnitSummary] = {}
    for c in characters:
        embedded = c.unit or {}
        unit_id = embedded.get("id")
        if unit_id is None:
            continue
        units[str(unit_id)] = UnitSummary.from_embedded(embedded)
    return list(units.values())


def resolve_unit(unit_id: str, members: list["Character"], emblem: "Emblem | None") -> UnitDetail | None:
    """Emblem first, then the first member's embedded copy. None when neither exists."""
    if emblem is not None:
        return UnitDetail(unit=UnitSummary.from_emblem(emblem), members=members, enriched=True)
    if members:
        return UnitDetail(unit=UnitSummary.from_embedded(members[0].unit or {}), members=members, enriched=False)
    return None


def unit_members(characters: Iterable["Character"], unit_id: str) -> list["Character"]:
    # Same membership rule as aggregate_units: no embedded id, no unit.
    members = []
    for c in characters:
        embedded_id = (c.unit or {}).get("id")
        if embedded_id is not None and str(embedded_id) == unit_id:
            members.append(c)
    return members


def get_emblem(s: "Session", unit_id: str) -> "Emblem | None":
    from app.roster.modules.units.models import Emblem

    return s.query(Emblem).filter(Emblem.unit_id == unit_id).one_or_none()


def unit_detail(s: "Session", unit_id: str) -> UnitDetail | None:
    from app.roster.modules.characters.service import list_characters

    # The unit lives inside a JSON column, so membership is resolved in Python
    # rather than with a dialect-specific JSON path filter.
    members = unit_members(list_characters(s), unit_id)
    return resolve_unit(unit_id, members, get_emblem(s, unit_id))


def emblem_from_record(record: Mapping[str, Any]) -> "Emblem":
    from app.roster.modules.units.models import Emblem

    return Emblem(
        unit_id=str(record["id"]),
        name=record.get("name") or "",
        emblem_url=record.get("emblemUrl"),
        motto=record.get("motto"),
        is_elite=bool(record.get("isElite", False)),
        founded_year=record.get("foundedYear"),
    )


def count_emblems(s: "Session") -> int:
    from sqlalchemy import func, select

    from app.roster.modules.units.models import Emblem

    return s.execute(select(func.count()).select_from(Emblem)).scalar_one()


def import_emblems(s: "Session", records: Iterable[Mapping[str, Any]]) -> int:
    """Bulk-insert emblem records. Does not commit."""
    emblems = [emblem_from_record(r) for r in records]
    s.add_all(emblems)
    s.flush()
    logger.info("Imported %d emblem records", len(emblems))
    return len(emblems)
