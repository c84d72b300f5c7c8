"""
Admin configuration types.

This module exports the entity, field and application specification types.
"""

from restadmin.specs.application import ApplicationSpec
from restadmin.specs.entity import (
    AnyFieldSpec,
    EditionMode,
    EntitySpec,
    FieldSpec,
    ReferencedListSpec,
    ReferenceManySpec,
    ReferenceSpec,
    default_filter_query,
    default_pagination,
    total_from_header,
)

__all__ = [
    # Field types
    "AnyFieldSpec",
    "EditionMode",
    "FieldSpec",
    "ReferenceSpec",
    "ReferenceManySpec",
    "ReferencedListSpec",
    # Entity types
    "EntitySpec",
    "default_pagination",
    "default_filter_query",
    "total_from_header",
    # Main spec
    "ApplicationSpec",
]
