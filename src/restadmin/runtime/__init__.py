"""
restadmin runtime.

This module provides:
- Transport (HttpEntityClient over httpx)
- List aggregation (fetching pages, grafting resolved references)
- Reference resolution (choice maps and referenced lists)
- The CrudManager facade used by admin views

Example usage:
    >>> from restadmin.specs import ApplicationSpec
    >>> from restadmin.runtime import CrudManager, HttpEntityClient
    >>>
    >>> app_spec = ApplicationSpec.from_json_file("admin.json")
    >>> async with HttpEntityClient("https://api.example.com") as client:
    ...     page = await CrudManager(app_spec, client).get_all("cats")
"""

from restadmin.runtime.client import EntityPage, HttpEntityClient, RemoteEntityClient
from restadmin.runtime.crud_manager import CrudManager
from restadmin.runtime.list_aggregator import (
    ListAggregator,
    build_params,
    fill_references_values_from_collection,
    filter_referenced_list,
    identifier_key,
)
from restadmin.runtime.reference_resolver import ReferenceResolver
from restadmin.runtime.results import (
    EditionFields,
    EntityView,
    FieldValue,
    ReferencedListValues,
    ResolvedPage,
    ResolvedReference,
    ResolvedReferencedList,
)

__all__ = [
    # Transport
    "EntityPage",
    "HttpEntityClient",
    "RemoteEntityClient",
    # Aggregation
    "ListAggregator",
    "build_params",
    "fill_references_values_from_collection",
    "filter_referenced_list",
    "identifier_key",
    # Resolution
    "ReferenceResolver",
    # Facade
    "CrudManager",
    # Results
    "EditionFields",
    "EntityView",
    "FieldValue",
    "ReferencedListValues",
    "ResolvedPage",
    "ResolvedReference",
    "ResolvedReferencedList",
]
