"""
restadmin - admin-panel data layer for generic REST APIs.

Turns a REST backend into entity-oriented CRUD operations and resolves
cross-entity references for list views without one request per row.

This package provides:
- specs: Entity, field and application configuration types
- runtime: Transport, list aggregation, reference resolution, CrudManager
- cli: The ``restadmin`` command
"""

__version__ = "0.1.0"

from restadmin.errors import (
    ConfigurationError,
    DuplicateIdentifier,
    EntityNotFound,
    RecordNotFound,
    ReferenceResolutionFailure,
    RestAdminError,
    TransportFailure,
)

__all__ = [
    "ConfigurationError",
    "DuplicateIdentifier",
    "EntityNotFound",
    "RecordNotFound",
    "ReferenceResolutionFailure",
    "RestAdminError",
    "TransportFailure",
]
