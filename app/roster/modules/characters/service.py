from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.roster.modules.characters.models import Character

logger = logging.getLogger(__name__)

DEFAULT_SORT = "name"

# Query-string sort keys (dataset spelling and attribute spelling) -> Character attribute.
SORT_FIELDS: dict[str, str] = {
    "id": "external_id",
    "external_id": "external_id",
    "name": "name",
    "age": "age",
    "description": "description",
    "isActive": "is_active",
    "is_active": "is_active",
    "rank": "rank",
    "birthDate": "birth_date",
    "birth_date": "birth_date",
    "unit": "unit",
}


@dataclass(frozen=True)
class RosterQuery:
    search: str = ""
    sort: str = DEFAULT_SORT
    order: str = "asc"

    @classmethod
    def from_args(cls, args: Mapping[str, str]) -> "RosterQuery":
        return cls(
            search=(args.get("search") or "").strip(),
            sort=(args.get("sort") or DEFAULT_SORT).strip(),
            order="desc" if (args.get("order") or "").strip().lower() == "desc" else "asc",
        )

    @property
    def descending(self) -> bool:
        return self.order == "desc"


def filter_by_name(characters: Iterable["Character"], search: str) -> list["Character"]:
    """Case-insensitive substring match on name. An empty search keeps everything."""
    if not search:
        return list(characters)
    needle = search.lower()
    return [c for c in characters if needle in (c.name or "").lower()]


def sort_value(character: "Character", field: str) -> Any:
    # Units order by what the user sees (the name), not by their id.
    if field == "unit":
        return (character.unit or {}).get("name")
    return getattr(character, field, None)


def sort_characters(characters: Iterable["Character"], sort: str = DEFAULT_SORT, *, descending: bool = False) -> list["Character"]:
    """
    Stable sort by a roster field. Equal keys keep their input order.
    Missing values go last when ascending and first when descending.
    Unknown fields leave the order untouched.
    """
    field = SORT_FIELDS.get(sort)
    if field is None:
        return list(characters)

    def key(c: "Character") -> tuple[bool, Any]:
        v = sort_value(c, field)
        return (v is None, v)

    return sorted(characters, key=key, reverse=descending)


def query_roster(
    characters: Sequence["Character"],
    search: str = "",
    sort: str = DEFAULT_SORT,
    order: str = "asc",
) -> list["Character"]:
    """
    Filter then sort the full roster. Returns a new list; `characters` is not modified.
    """
    filtered = filter_by_name(characters, search)
    return sort_characters(filtered, sort, descending=(order == "desc"))


def list_characters(s: "Session") -> list["Character"]:
    from app.roster.modules.characters.models import Character

    return s.query(Character).order_by(Character.id.asc()).all()


def get_character(s: "Session", external_id: str) -> "Character | None":
    from app.roster.modules.characters.models import Character

    return s.query(Character).filter(Character.external_id == external_id).one_or_none()


def parse_character_edit(form: Mapping[str, str]) -> tuple[dict[str, Any], list[str]]:
    """Parse the edit form. Returns (payload, errors)."""
    errors: list[str] = []

    name = (form.get("name") or "").strip()
    if not name:
        errors.append("Name is required.")

    raw_age = (form.get("age") or "").strip()
    age: int | None = None
    try:
        age = int(raw_age)
    except ValueError:
        errors.append("Age must be a whole number.")

    payload = {
        "name": name,
        "age": age,
        "description": (form.get("description") or "").strip(),
        "is_active": form.get("isActive") == "true",
    }
    return payload, errors


def update_character(s: "Session", character: "Character", payload: Mapping[str, Any]) -> "Character":
    """Apply an edit. Only name, age, description and the active flag are editable."""
    changes = {}
    for field in ("name", "age", "description", "is_active"):
        if field not in payload:
            continue
        new = payload[field]
        old = getattr(character, field)
        if new != old:
            changes[field] = {"old": old, "new": new}
            setattr(character, field, new)

    character.updated_at = datetime.utcnow()
    logger.info("character.edit id=%s changes=%s", character.external_id, changes)
    return character


def character_from_record(record: Mapping[str, Any]) -> "Character":
    """Build a Character from one entry of the reference dataset (camelCase keys)."""
    from app.roster.modules.characters.models import Character

    return Character(
        external_id=str(record["id"]),
        name=record.get("name") or "",
        age=record.get("age"),
        description=record.get("description"),
        is_active=bool(record.get("isActive", True)),
        rank=record.get("rank"),
        birth_date=record.get("birthDate"),
        image_url=record.get("imageUrl"),
        weapons=list(record.get("weapons") or []),
        unit=dict(record.get("unit") or {}),
    )


def count_characters(s: "Session") -> int:
    from sqlalchemy import func, select

    from app.roster.modules.characters.models import Character

    return s.execute(select(func.count()).select_from(Character)).scalar_one()


def import_characters(s: "Session", records: Iterable[Mapping[str, Any]]) -> int:
    """Bulk-insert dataset records. Does not commit."""
    characters = [character_from_record(r) for r in records]
    s.add_all(characters)
    s.flush()
    return len(characters)
