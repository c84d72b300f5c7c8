"""
Error types for the restadmin data layer.
"""


class RestAdminError(Exception):
    """Base exception for all restadmin errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class EntityNotFound(RestAdminError):
    """
    Raised when an entity name is not registered in the application config.

    Async operations raise it from the coroutine; the synchronous
    edition-fields lookup raises it immediately.
    """

    def __init__(self, entity_name: str):
        self.entity_name = entity_name
        super().__init__(f"Entity {entity_name} not found.")


class ConfigurationError(RestAdminError):
    """
    Raised when application configuration is inconsistent.

    Examples:
    - Reference pointing at an unregistered entity
    - Two entities sharing a name
    - Unknown value transformer name
    """

    pass


class DuplicateIdentifier(ConfigurationError):
    """Raised when a target collection holds the same identifier twice."""

    def __init__(self, entity_name: str, identifier: object):
        self.entity_name = entity_name
        self.identifier = identifier
        super().__init__(
            f"Entity {entity_name} returned identifier {identifier!r} more than once"
        )


class TransportFailure(RestAdminError):
    """
    Raised when the REST backend cannot be reached or answers with an error.

    The underlying httpx exception is kept as ``__cause__``.
    """

    def __init__(self, entity_name: str, message: str, status_code: int | None = None):
        self.entity_name = entity_name
        self.status_code = status_code
        super().__init__(message)


class RecordNotFound(TransportFailure):
    """Raised when a single record does not exist on the backend."""

    pass


class ReferenceResolutionFailure(RestAdminError):
    """
    Raised when one target fetch of a reference fan-out fails.

    No partial resolution is returned; the failing fetch's exception is
    kept as ``__cause__``.
    """

    def __init__(self, entity_name: str, field_name: str, reason: str):
        self.entity_name = entity_name
        self.field_name = field_name
        super().__init__(
            f"Could not resolve {entity_name}.{field_name}: {reason}"
        )
