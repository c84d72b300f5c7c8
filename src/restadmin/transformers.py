"""
Field value transformers.

A transformer is a pure callable applied to a raw API value before it is
shown (date parsing, label formatting, ...). Transformers can be given to a
field spec directly or by registered name, which is how JSON configs refer
to them.
"""

from __future__ import annotations

from collections.abc import Callable, MutableMapping
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from restadmin.errors import ConfigurationError

if TYPE_CHECKING:
    from restadmin.specs.entity import EntitySpec

ValueTransformer = Callable[[Any], Any]


def identity(value: Any) -> Any:
    """Return the value unchanged."""
    return value


def _none_safe(func: ValueTransformer) -> ValueTransformer:
    """Wrap a transformer so that None passes through untouched."""

    def wrapper(value: Any) -> Any:
        if value is None:
            return None
        return func(value)

    wrapper.__name__ = getattr(func, "__name__", "transformer")
    wrapper.__doc__ = func.__doc__
    return wrapper


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _to_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _to_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def _split_csv(value: Any) -> list[str]:
    if isinstance(value, list | tuple):
        return [str(v) for v in value]
    return [part.strip() for part in str(value).split(",") if part.strip()]


_REGISTRY: dict[str, ValueTransformer] = {
    "identity": identity,
    "str": _none_safe(str),
    "int": _none_safe(int),
    "float": _none_safe(float),
    "bool": _none_safe(_to_bool),
    "date": _none_safe(_to_date),
    "datetime": _none_safe(_to_datetime),
    "upper": _none_safe(lambda v: str(v).upper()),
    "lower": _none_safe(lambda v: str(v).lower()),
    "strip": _none_safe(lambda v: str(v).strip()),
    "csv": _none_safe(_split_csv),
}


def register_transformer(name: str, func: ValueTransformer) -> None:
    """Register a transformer so JSON configs can refer to it by name."""
    _REGISTRY[name] = func


def get_transformer(name: str) -> ValueTransformer:
    """
    Look up a registered transformer.

    Raises:
        ConfigurationError: If no transformer is registered under ``name``
    """
    try:
        return _REGISTRY[name]
    except KeyError:
        known = ", ".join(sorted(_REGISTRY))
        raise ConfigurationError(
            f"Unknown value transformer '{name}' (known: {known})"
        ) from None


def list_transformers() -> list[str]:
    """Names of all registered transformers."""
    return sorted(_REGISTRY)


def apply_value_transformers(
    entity: EntitySpec, record: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """
    Transform every declared field present on a record, in place.

    Fields missing from the record are left missing.
    """
    for field in entity.fields:
        if field.name in record:
            record[field.name] = field.value_transformer(record[field.name])
    return record
