"""
Record sanitizer for recsan.

Dispatches on the shape of its input (sequences, tuples, typed entities,
mappings, scalars) and runs every record through the stage pipeline. The
input is never mutated; a new structure is returned.
"""

from collections.abc import Callable, Mapping, Sequence
from typing import Any

from ..config import Settings, get_settings
from ..utils.exceptions import ConfigurationError, ValidationError
from .encoders import Encoder, as_encoder, resolve_encoder
from .entities import entity_to_dict, is_entity, is_not_loaded
from .options import SanitizeOptions
from .pipeline import Stage, build_pipeline, run_pipeline
from .transforms import Record

_TEXT_TYPES = (str, bytes, bytearray, memoryview)


def _is_record_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(
        value, (tuple, *_TEXT_TYPES)
    )


class Sanitizer:
    """
    Configurable record sanitizer.

    ``stages`` replaces named pipeline stages (``remove``, ``mask``,
    ``filter``, ``recurse``). ``is_unloaded`` recognises the unloaded-relation
    marker of the calling persistence layer. ``encoder`` serializes tuples
    whose size is not 2; when omitted the ``json_encoder`` setting is used.
    Subclasses may override ``sanitize_record``, ``sanitize_tuple`` or
    ``project_entity``.
    """

    def __init__(
        self,
        encoder: Any = None,
        stages: Mapping[str, Stage] | None = None,
        is_unloaded: Callable[[Any], bool] = is_not_loaded,
        strict: bool | None = None,
        settings: Settings | None = None,
    ):
        self._encoder: Encoder | None = (
            as_encoder(encoder) if encoder is not None else None
        )
        self._stages = build_pipeline(stages)
        self._settings = settings
        self._strict = strict
        self.is_unloaded = is_unloaded

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def strict(self) -> bool:
        if self._strict is None:
            self._strict = self.settings.strict_options
        return self._strict

    def sanitize(self, data: Any, options: Any = None, **overrides: Any) -> Any:
        """
        Sanitize records according to the given options.

        Accepts a mapping, a typed entity, a list of records, a key/value
        pair tuple or any other tuple (serialized with the encoder). Other
        values are returned unchanged.

        Examples:
            sanitize({"name": "John", "password": "secret"}, remove=["password"])
            sanitize(user, mask={"password": "********"})
            sanitize(users, only=["name", "email"], deep=False)
        """
        resolved = SanitizeOptions.build(options, **overrides)

        if resolved.filters_conflict and self.strict:
            raise ValidationError(
                "Options 'only' and 'except' cannot be combined in strict mode",
                field_name="except",
                validation_rule="only_excludes_except",
            )

        return self.dispatch(data, resolved)

    def dispatch(self, data: Any, options: SanitizeOptions) -> Any:
        """Sanitize a value of any shape with an already built options bundle."""
        # Entities first: named tuples and row objects are also sequences
        if is_entity(data) or isinstance(data, Mapping):
            return self.sanitize_record(data, options)

        if _is_record_sequence(data):
            return [self.dispatch(item, options) for item in data]

        if isinstance(data, tuple):
            return self.sanitize_tuple(data, options)

        return data

    def sanitize_record(self, record: Any, options: SanitizeOptions) -> Record:
        """Run one record through the remove, mask, filter and recurse stages."""
        return run_pipeline(
            self._stages, self.project_entity(record), options, self
        )

    def project_entity(self, record: Any) -> Record:
        """Flatten a typed entity or mapping into a plain dict."""
        if is_entity(record):
            return entity_to_dict(record)
        return dict(record)

    def sanitize_tuple(self, record: tuple, options: SanitizeOptions) -> Any:
        """Turn a key/value pair into a one-entry dict, or encode other tuples."""
        if len(record) == 2:
            key, value = record
            return {key: self.dispatch(value, options)}

        encoder = self.resolve_encoder(len(record))
        return encoder(list(record))

    def resolve_encoder(self, size: int | None = None) -> Encoder:
        """Return the configured tuple encoder or fail loudly."""
        if self._encoder is not None:
            return self._encoder

        path = self.settings.json_encoder
        if not path:
            raise ConfigurationError(
                "No encoder configured for tuples that are not key/value pairs",
                config_key="json_encoder",
                expected_value="recsan.core.encoders:json_encoder",
                tuple_size=size,
            )

        self._encoder = resolve_encoder(path)
        return self._encoder


def sanitize(
    data: Any, options: Any = None, *, encoder: Any = None, **overrides: Any
) -> Any:
    """Sanitize ``data`` with a default ``Sanitizer``."""
    return Sanitizer(encoder=encoder).sanitize(data, options, **overrides)
