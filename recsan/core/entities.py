"""
Entity helpers for recsan.

The unloaded-relation marker and the projection of typed entities
(dataclasses, pydantic models, named tuples and row objects) onto plain
field-name to value mappings.
"""

import dataclasses
from typing import Any

from pydantic import BaseModel


class NotLoaded:
    """Marker standing in for a related record the persistence layer did not fetch.

    Instances are pruned from nested records during deep sanitization instead
    of being traversed. ``field`` and ``owner`` are optional and only used for
    diagnostics.
    """

    __slots__ = ("field", "owner")

    def __init__(self, field: str | None = None, owner: str | None = None):
        self.field = field
        self.owner = owner

    def __repr__(self) -> str:
        if self.field is None:
            return "<NotLoaded>"
        if self.owner is None:
            return f"<NotLoaded {self.field}>"
        return f"<NotLoaded {self.owner}.{self.field}>"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, NotLoaded)

    def __hash__(self) -> int:
        return hash(NotLoaded)


NOT_LOADED = NotLoaded()


def is_not_loaded(value: Any) -> bool:
    """Check whether a value is the unloaded-relation marker."""
    return isinstance(value, NotLoaded)


def is_entity(value: Any) -> bool:
    """Check whether a value is a typed entity with named fields."""
    if isinstance(value, type):
        return False

    if dataclasses.is_dataclass(value) or isinstance(value, BaseModel):
        return True

    # Named tuples and ORM row objects share the ``_asdict`` protocol
    return callable(getattr(value, "_asdict", None))


def entity_to_dict(entity: Any) -> dict[str, Any]:
    """Project a typed entity onto a plain mapping of its fields.

    The projection is shallow: nested values are returned as-is so the
    sanitizer can dispatch on them.
    """
    if dataclasses.is_dataclass(entity):
        return {
            field.name: getattr(entity, field.name)
            for field in dataclasses.fields(entity)
        }

    if isinstance(entity, BaseModel):
        return {name: getattr(entity, name) for name in type(entity).model_fields}

    return dict(entity._asdict())
