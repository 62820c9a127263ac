"""Developer/location resolution for compound records.

ACF exposes the same relationship under different field names and shapes
depending on how a compound was edited. Each shape gets one strategy; the
strategies run in a fixed order and the first hit wins.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Sequence, Tuple

from four_seasons_catalog.log import get_logger
from four_seasons_catalog.models import NOT_AVAILABLE


logger = get_logger("cms")


@dataclass(frozen=True)
class RelationRef:
    id: Any = None
    name: Optional[str] = None


@dataclass(frozen=True)
class IdListStrategy:
    """``acf[field]`` is a list of ids; the first one is used."""

    field: str

    def extract(self, acf: Mapping) -> Optional[RelationRef]:
        values = acf.get(self.field)
        if isinstance(values, list) and values:
            return RelationRef(id=values[0])
        return None


@dataclass(frozen=True)
class ScalarIdStrategy:
    field: str

    def extract(self, acf: Mapping) -> Optional[RelationRef]:
        value = acf.get(self.field)
        if isinstance(value, int) and not isinstance(value, bool) and value > 0:
            return RelationRef(id=value)
        return None


@dataclass(frozen=True)
class EmbeddedObjectStrategy:
    """``acf[field]`` is the related object itself; its name needs no lookup."""

    field: str
    id_key: str
    name_key: str

    def extract(self, acf: Mapping) -> Optional[RelationRef]:
        value = acf.get(self.field)
        if isinstance(value, Mapping) and self.id_key in value:
            name = value.get(self.name_key)
            return RelationRef(id=value.get(self.id_key), name=name or None)
        return None


DEVELOPER_STRATEGIES = (
    IdListStrategy("developer_to_developer"),
    ScalarIdStrategy("developer"),
    EmbeddedObjectStrategy("developer", id_key="ID", name_key="post_title"),
)

LOCATION_STRATEGIES = (
    IdListStrategy("location_to_location"),
    ScalarIdStrategy("location"),
    EmbeddedObjectStrategy("location", id_key="term_id", name_key="name"),
)


def extract_relation(acf: Any, strategies: Sequence) -> Optional[RelationRef]:
    if not isinstance(acf, Mapping):
        return None
    for strategy in strategies:
        ref = strategy.extract(acf)
        if ref is not None:
            return ref
    return None


def extract_developer_ref(acf: Any) -> Optional[RelationRef]:
    return extract_relation(acf, DEVELOPER_STRATEGIES)


def extract_location_ref(acf: Any) -> Optional[RelationRef]:
    return extract_relation(acf, LOCATION_STRATEGIES)


def _name_field(record: Mapping) -> Optional[str]:
    value = record.get("name")
    return value if isinstance(value, str) and value else None


def _title_rendered(record: Mapping) -> Optional[str]:
    title = record.get("title")
    if isinstance(title, Mapping):
        value = title.get("rendered")
        if isinstance(value, str) and value:
            return value
    return None


def _acf_name(record: Mapping) -> Optional[str]:
    acf = record.get("acf")
    if isinstance(acf, Mapping):
        value = acf.get("name")
        if isinstance(value, str) and value:
            return value
    return None


DISPLAY_NAME_STRATEGIES: Tuple[Callable[[Mapping], Optional[str]], ...] = (
    _name_field,
    _title_rendered,
    _acf_name,
)


def extract_display_name(record: Any, default: str = NOT_AVAILABLE) -> str:
    if not isinstance(record, Mapping):
        return default
    for strategy in DISPLAY_NAME_STRATEGIES:
        name = strategy(record)
        if name:
            return name
    return default


LookupFn = Callable[[Any], Awaitable[Optional[Mapping]]]


class RelationshipResolver:
    """Adds ``developerName``/``locationName`` to raw compound records.

    ``developer_lookup``/``location_lookup`` fetch a record by id and return
    ``None`` when it cannot be found; any failure degrades to ``"N/A"``.
    """

    def __init__(self, developer_lookup: LookupFn, location_lookup: LookupFn):
        self.developer_lookup = developer_lookup
        self.location_lookup = location_lookup

    async def _resolve_name(
        self, ref: Optional[RelationRef], lookup: LookupFn, kind: str
    ) -> str:
        if ref is None:
            return NOT_AVAILABLE
        if ref.name:
            return ref.name
        if not ref.id:
            return NOT_AVAILABLE
        try:
            record = await lookup(ref.id)
        except Exception as exc:
            logger.warning("Failed to resolve %s %s: %s", kind, ref.id, exc)
            return NOT_AVAILABLE
        return extract_display_name(record)

    async def resolve_names(self, acf: Any) -> Tuple[str, str]:
        developer_name, location_name = await asyncio.gather(
            self._resolve_name(extract_developer_ref(acf), self.developer_lookup, "developer"),
            self._resolve_name(extract_location_ref(acf), self.location_lookup, "location"),
        )
        return developer_name, location_name

    async def resolve_compound(self, compound: Mapping) -> Dict[str, Any]:
        developer_name, location_name = await self.resolve_names(compound.get("acf") or {})
        resolved = dict(compound)
        resolved["developerName"] = developer_name
        resolved["locationName"] = location_name
        return resolved

    async def resolve_many(self, compounds: Sequence[Mapping]) -> list:
        return list(await asyncio.gather(*[self.resolve_compound(c) for c in compounds]))
