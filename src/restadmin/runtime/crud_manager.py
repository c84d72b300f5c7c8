"""
CRUD facade.

Exposes entity-oriented read and write operations over a generic REST
backend. Read paths compose the list aggregator and the reference resolver;
write paths pass straight through to the transport.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from restadmin.errors import EntityNotFound
from restadmin.runtime.client import Record, RemoteEntityClient
from restadmin.runtime.list_aggregator import ListAggregator
from restadmin.runtime.logging import get_crud_logger, log_with_context
from restadmin.runtime.reference_resolver import ReferenceResolver
from restadmin.runtime.results import (
    EditionFields,
    EntityView,
    FieldValue,
    ReferencedListValues,
    ResolvedPage,
)
from restadmin.settings import RestAdminSettings
from restadmin.specs.application import ApplicationSpec
from restadmin.specs.entity import (
    EditionMode,
    EntitySpec,
    FieldSpec,
    ReferencedListSpec,
    ReferenceSpec,
)

logger = get_crud_logger()


class CrudManager:
    """
    Entity-oriented data access for admin views.

    Example:
        async with HttpEntityClient(settings.api_url) as client:
            crud = CrudManager(app_spec, client, settings)
            page = await crud.get_all("cats", page=2)
    """

    def __init__(
        self,
        config: ApplicationSpec,
        client: RemoteEntityClient,
        settings: RestAdminSettings | None = None,
    ):
        self.config = config
        self.client = client
        self.settings = settings or RestAdminSettings()
        self.aggregator = ListAggregator(config, client)
        self.resolver = ReferenceResolver(
            config,
            self.aggregator,
            strict_identifiers=self.settings.strict_identifiers,
        )

    def _require_entity(self, entity_name: str) -> EntitySpec:
        if not self.config.has_entity(entity_name):
            raise EntityNotFound(entity_name)
        return self.config.get_entity(entity_name)

    # =========================================================================
    # Reads
    # =========================================================================

    async def get_one(self, entity_name: str, entity_id: Any) -> EntityView:
        """
        Fetch one record with transformed values.

        Raises:
            EntityNotFound: If the entity is not registered
            RecordNotFound: If the backend has no such record
        """
        entity = self._require_entity(entity_name)

        record = await self.client.fetch_one(
            entity.name,
            entity_id,
            dict(entity.extra_params),
            interceptor=entity.interceptor,
        )

        fields = []
        for field in entity.fields:
            if field.name in record:
                value = field.value_transformer(record[field.name])
                record[field.name] = value
                fields.append(FieldValue(field=field, value=value, present=True))
            else:
                fields.append(FieldValue(field=field))

        return EntityView(
            fields=fields,
            entity_label=entity.display_label,
            entity_name=entity.name,
            entity_id=entity_id,
            values=record,
        )

    async def get_all(
        self,
        entity_name: str,
        page: int | str = 1,
        limit: int | None = None,
        fill_simple_reference: bool = True,
        query: str | None = None,
    ) -> ResolvedPage:
        """
        Fetch one page of an entity with its references resolved.

        Args:
            entity_name: Entity to list
            page: Page number, starting at 1
            limit: Page size, defaults to the entity's ``per_page``
            fill_simple_reference: Replace single references by their label;
                when False they keep their identifier (edition forms)
            query: Search query, merged through the entity's filter builder

        Raises:
            EntityNotFound: If the entity is not registered
            TransportFailure: If the primary page cannot be fetched
            ReferenceResolutionFailure: If a referenced collection cannot be fetched
        """
        entity = self._require_entity(entity_name)
        page = int(page)
        if page < 1:
            raise ValueError(f"Page must be 1 or more, got {page}")
        per_page = limit or entity.per_page

        result = await self.aggregator.fetch_page(
            entity.name, page=page, per_page=per_page, query=query
        )
        references = await self.resolver.resolve_references(entity.name)

        records = self.aggregator.fill_references_values_from_collection(
            result.records, references, fill_simple_reference
        )

        log_with_context(
            logger,
            logging.DEBUG,
            f"Listed {len(records)} {entity.name} record(s)",
            page=page,
            per_page=per_page,
            references=sorted(references),
        )

        return ResolvedPage(
            entity_name=entity.name,
            entity_config=entity,
            raw_items=records,
            current_page=page,
            per_page=per_page,
            total_items=entity.total_items(result),
        )

    async def get_referenced_list_values(
        self, entity_name: str, entity_data: EntityView
    ) -> ReferencedListValues:
        """
        Fetch the referenced lists of one record.

        Returns:
            Filtered items and the raw target page of every referenced list

        Raises:
            EntityNotFound: If the entity is not registered
            ReferenceResolutionFailure: If a target collection cannot be fetched
        """
        entity = self._require_entity(entity_name)
        resolved = await self.resolver.resolve_referenced_lists(
            entity.name, entity_data.entity_id
        )

        return ReferencedListValues(
            items={name: lst.items for name, lst in resolved.items()},
            responses={name: lst.page for name, lst in resolved.items()},
        )

    def get_edition_fields(
        self,
        entity_name: str,
        filter_type: str | EditionMode | Iterable[str | EditionMode] | None = None,
    ) -> EditionFields:
        """
        Fields an edition form shows.

        Args:
            entity_name: Entity to edit
            filter_type: Restrict to one or more edition modes
                (``read-only``, ``editable``)

        Raises:
            EntityNotFound: Immediately, if the entity is not registered
        """
        if filter_type is None:
            filters: list[str] = []
        elif isinstance(filter_type, str):
            filters = [filter_type]
        else:
            filters = list(filter_type)

        entity = self._require_entity(entity_name)

        return EditionFields(
            fields=self.filter_edition_fields(entity.fields, filters),
            entity_label=entity.display_label,
            entity_name=entity.name,
        )

    def get_references(self, entity_name: str) -> list[ReferenceSpec]:
        """References declared on an entity."""
        return self._require_entity(entity_name).get_references()

    def get_referenced_lists(self, entity_name: str) -> list[ReferencedListSpec]:
        """Referenced lists declared on an entity."""
        return self._require_entity(entity_name).get_referenced_lists()

    @staticmethod
    def filter_edition_fields(
        fields: Iterable[FieldSpec], filters: list[str]
    ) -> dict[str, FieldSpec]:
        """
        Keep edition fields, optionally only those in the given modes.

        Fields without an edition mode (or with ``none``) are never kept.
        """
        filtered: dict[str, FieldSpec] = {}
        for field in fields:
            if not field.is_edition_field:
                continue
            if not filters or field.edition in filters:
                filtered[field.name] = field
        return filtered

    # =========================================================================
    # Writes
    # =========================================================================

    async def create_one(self, entity_name: str, record: Mapping[str, Any]) -> Record:
        """
        Create a record.

        Raises:
            EntityNotFound: If the entity is not registered
        """
        entity = self._require_entity(entity_name)
        return await self.client.create(entity.name, record)

    async def update_one(self, entity_name: str, record: Mapping[str, Any]) -> Record:
        """
        Update a record, addressed by its identifier field.

        Raises:
            EntityNotFound: If the entity is not registered
            ValueError: If the record has no identifier
        """
        entity = self._require_entity(entity_name)
        entity_id = record.get(entity.identifier)
        if entity_id is None:
            raise ValueError(
                f"Cannot update {entity.name} without '{entity.identifier}'"
            )
        return await self.client.update(entity.name, entity_id, record)

    async def delete_one(self, entity_name: str, entity_id: Any) -> None:
        """
        Delete a record.

        Raises:
            EntityNotFound: If the entity is not registered
        """
        entity = self._require_entity(entity_name)
        await self.client.delete(entity.name, entity_id)
