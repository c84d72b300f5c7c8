"""
List aggregation.

Fetches pages of entity records and grafts resolved references back onto
them. Reference values are looked up in choice maps built once per request,
so a page costs one request per related entity rather than one per row.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from restadmin.runtime.client import EntityPage, Record, RemoteEntityClient
from restadmin.runtime.logging import get_resolver_logger, log_with_context
from restadmin.runtime.results import ResolvedReference
from restadmin.specs.application import ApplicationSpec
from restadmin.specs.entity import EntitySpec, ReferencedListSpec
from restadmin.transformers import apply_value_transformers

logger = get_resolver_logger()


def identifier_key(value: Any) -> str:
    """
    Canonical string form of an identifier.

    Identifiers often cross the wire as strings on one side and numbers on
    the other; ``7``, ``7.0`` and ``"7"`` all map to ``"7"``.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_params(
    entity: EntitySpec,
    page: int,
    per_page: int,
    query: str | None = None,
) -> dict[str, Any]:
    """
    Query params for a list request.

    Later sources win on conflict: extra params, then pagination, then
    search filter.
    """
    params: dict[str, Any] = dict(entity.extra_params)
    if entity.pagination:
        params.update(entity.pagination(page, per_page))
    if query:
        params.update(entity.filter_query(query))
    return params


def fill_references_values_from_collection(
    records: list[Record],
    resolved_references: Mapping[str, ResolvedReference],
    fill_simple_reference: bool = False,
) -> list[Record]:
    """
    Replace reference identifiers with labels, in place.

    - Multiple references become the list of labels of the identifiers
      found in the choice map.
    - A single reference found in the choice map becomes its label when
      ``fill_simple_reference`` is set, otherwise keeps its identifier.
    - A single reference that is empty or unknown is removed.

    Returns the same list, mutated.
    """
    for field_name, resolved in resolved_references.items():
        choices = resolved.choices

        if resolved.field.is_many:
            dropped = 0
            for record in records:
                identifiers = record.get(field_name)
                if identifiers is None:
                    identifiers = []
                elif not isinstance(identifiers, list | tuple):
                    identifiers = [identifiers]

                labels = []
                for identifier in identifiers:
                    key = identifier_key(identifier)
                    if key in choices:
                        labels.append(choices[key])
                    else:
                        dropped += 1
                record[field_name] = labels

            if dropped:
                log_with_context(
                    logger,
                    logging.DEBUG,
                    f"Dropped {dropped} unknown identifier(s) from {field_name}",
                    target=resolved.field.target_entity,
                )
            continue

        for record in records:
            identifier = record.get(field_name)
            if identifier and identifier_key(identifier) in choices:
                if fill_simple_reference:
                    record[field_name] = choices[identifier_key(identifier)]
            else:
                record.pop(field_name, None)

    return records


def filter_referenced_list(
    records: Sequence[Record],
    referenced_list: ReferencedListSpec,
    source_id: Any,
) -> list[Record]:
    """Target records whose back-pointer equals ``source_id``, in order."""
    target_field = referenced_list.target_field
    source_key = identifier_key(source_id)
    return [
        record
        for record in records
        if target_field in record
        and record[target_field] is not None
        and identifier_key(record[target_field]) == source_key
    ]


class ListAggregator:
    """
    Fetches entity pages through the transport and shapes their records.

    Every fetched record goes through its entity's value transformers.
    """

    def __init__(self, config: ApplicationSpec, client: RemoteEntityClient):
        self.config = config
        self.client = client

    async def fetch_page(
        self,
        entity_name: str,
        page: int = 1,
        per_page: int | None = None,
        query: str | None = None,
    ) -> EntityPage:
        """
        Fetch one page of ``entity_name`` with transformed values.

        Raises:
            EntityNotFound: If the entity is not registered
        """
        entity = self.config.get_entity(entity_name)
        per_page = per_page or entity.per_page
        params = build_params(entity, page, per_page, query)

        result = await self.client.fetch_page(
            entity.name, params, interceptor=entity.interceptor
        )
        for record in result.records:
            apply_value_transformers(entity, record)
        return result

    def fill_references_values_from_collection(
        self,
        records: list[Record],
        resolved_references: Mapping[str, ResolvedReference],
        fill_simple_reference: bool = False,
    ) -> list[Record]:
        return fill_references_values_from_collection(
            records, resolved_references, fill_simple_reference
        )

    def filter_referenced_list(
        self,
        records: Sequence[Record],
        referenced_list: ReferencedListSpec,
        source_id: Any,
    ) -> list[Record]:
        return filter_referenced_list(records, referenced_list, source_id)
