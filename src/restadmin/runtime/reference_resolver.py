"""
Reference resolution.

For one source entity, fetches the target collection of every declared
reference (or referenced list) concurrently and turns each into a choice map
(or a filtered item list). The fan-out is fail-fast: the first failing fetch
cancels the others and no partial result is returned.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine, Sequence
from typing import Any, TypeVar

from restadmin.errors import DuplicateIdentifier, ReferenceResolutionFailure
from restadmin.runtime.client import EntityPage, Record
from restadmin.runtime.list_aggregator import (
    ListAggregator,
    filter_referenced_list,
    identifier_key,
)
from restadmin.runtime.logging import get_resolver_logger, log_with_context
from restadmin.runtime.results import ResolvedReference, ResolvedReferencedList
from restadmin.specs.application import ApplicationSpec
from restadmin.specs.entity import EntitySpec, FieldSpec, ReferenceSpec

logger = get_resolver_logger()

SpecT = TypeVar("SpecT", bound=FieldSpec)


class ReferenceResolver:
    """
    Resolves the references and referenced lists of an entity.

    Target fetches go through the list aggregator, so target records are
    transformed the same way a list view would transform them. Targets'
    own references are not resolved.
    """

    def __init__(
        self,
        config: ApplicationSpec,
        aggregator: ListAggregator,
        strict_identifiers: bool = True,
    ):
        """
        Initialize the resolver.

        Args:
            config: Application config
            aggregator: Aggregator used to fetch target pages
            strict_identifiers: Raise DuplicateIdentifier when a target
                collection repeats an identifier; otherwise warn and keep
                the last record
        """
        self.config = config
        self.aggregator = aggregator
        self.strict_identifiers = strict_identifiers

    async def resolve_references(self, entity_name: str) -> dict[str, ResolvedReference]:
        """
        Build the choice map of every reference of ``entity_name``.

        Returns:
            Mapping of source field name -> ResolvedReference

        Raises:
            EntityNotFound: If the entity is not registered
            ReferenceResolutionFailure: If any target fetch fails
        """
        entity = self.config.get_entity(entity_name)
        references = entity.get_references()

        def fetch(reference: ReferenceSpec) -> Coroutine[Any, Any, EntityPage]:
            return self.aggregator.fetch_page(
                reference.target_entity, page=1, per_page=reference.per_page
            )

        pages = await self._fan_out(entity, references, fetch)

        return {
            reference.name: ResolvedReference(
                field=reference,
                choices=self.build_choices(reference, page.records),
            )
            for reference, page in zip(references, pages)
        }

    async def resolve_referenced_lists(
        self, entity_name: str, source_id: Any
    ) -> dict[str, ResolvedReferencedList]:
        """
        Fetch the first page of every referenced-list target of
        ``entity_name`` and keep the records pointing at ``source_id``.

        Raises:
            EntityNotFound: If the entity is not registered
            ReferenceResolutionFailure: If any target fetch fails
        """
        entity = self.config.get_entity(entity_name)
        lists = entity.get_referenced_lists()

        pages = await self._fan_out(
            entity,
            lists,
            lambda referenced_list: self.aggregator.fetch_page(
                referenced_list.target_entity, page=1
            ),
        )

        return {
            referenced_list.name: ResolvedReferencedList(
                field=referenced_list,
                items=filter_referenced_list(page.records, referenced_list, source_id),
                page=page,
            )
            for referenced_list, page in zip(lists, pages)
        }

    def build_choices(
        self, reference: ReferenceSpec, records: Sequence[Record]
    ) -> dict[str, Any]:
        """
        Map target identifiers (canonical string form) to target labels.

        Raises:
            DuplicateIdentifier: On a repeated identifier in strict mode
        """
        target = self.config.get_entity(reference.target_entity)
        choices: dict[str, Any] = {}

        for record in records:
            identifier = record.get(target.identifier)
            if identifier is None:
                continue
            key = identifier_key(identifier)
            if key in choices:
                if self.strict_identifiers:
                    raise DuplicateIdentifier(target.name, identifier)
                log_with_context(
                    logger,
                    logging.WARNING,
                    f"Duplicate identifier {identifier!r} in {target.name}, keeping last",
                    field=reference.name,
                )
            choices[key] = record.get(reference.target_label)

        return choices

    async def _fan_out(
        self,
        entity: EntitySpec,
        specs: Sequence[SpecT],
        fetch: Callable[[SpecT], Coroutine[Any, Any, EntityPage]],
    ) -> list[EntityPage]:
        """Run one fetch per spec concurrently; first failure cancels the rest."""
        if not specs:
            return []

        log_with_context(
            logger,
            logging.DEBUG,
            f"Resolving {len(specs)} relation(s) of {entity.name}",
            targets=[getattr(spec, "target_entity", None) for spec in specs],
        )

        tasks: list[asyncio.Task[EntityPage]] = []
        try:
            async with asyncio.TaskGroup() as group:
                for spec in specs:
                    tasks.append(group.create_task(fetch(spec)))
        except ExceptionGroup as errors:
            first = errors.exceptions[0]
            failed = specs[0]
            for spec, task in zip(specs, tasks):
                if not task.cancelled() and task.exception() is first:
                    failed = spec
                    break
            raise ReferenceResolutionFailure(entity.name, failed.name, str(first)) from first

        return [task.result() for task in tasks]
