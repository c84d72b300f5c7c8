"""
Values returned by the data layer.

Resolution results are returned per call and passed explicitly to the
aggregation step; configuration specs are never annotated with them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from restadmin.runtime.client import EntityPage, Record
from restadmin.specs.entity import (
    EntitySpec,
    FieldSpec,
    ReferencedListSpec,
    ReferenceSpec,
)


@dataclass
class ResolvedReference:
    """Choice map of one reference field: identifier key -> target label."""

    field: ReferenceSpec
    choices: dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.field.name


@dataclass
class ResolvedReferencedList:
    """Target records of one referenced list, filtered for a source record."""

    field: ReferencedListSpec
    items: list[Record] = field(default_factory=list)
    page: EntityPage | None = None

    @property
    def name(self) -> str:
        return self.field.name


@dataclass
class FieldValue:
    """A field spec paired with the transformed value of one record."""

    field: FieldSpec
    value: Any = None
    present: bool = False


@dataclass
class EntityView:
    """Single-record view: ``{fields, entityLabel, entityName, entityId}``."""

    fields: list[FieldValue]
    entity_label: str
    entity_name: str
    entity_id: Any
    values: Record = field(default_factory=dict)


@dataclass
class EditionFields:
    """Fields an edition form shows, keyed by field name."""

    fields: dict[str, FieldSpec]
    entity_label: str
    entity_name: str


@dataclass
class ResolvedPage:
    """One page of enriched records of an entity."""

    entity_name: str
    entity_config: EntitySpec
    raw_items: list[Record]
    current_page: int
    per_page: int
    total_items: int


@dataclass
class ReferencedListValues:
    """Referenced-list items of one record plus the pages they came from."""

    items: dict[str, list[Record]] = field(default_factory=dict)
    responses: dict[str, EntityPage | None] = field(default_factory=dict)
