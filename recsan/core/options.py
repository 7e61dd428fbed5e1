"""
Sanitize options for recsan.

A validated, immutable bundle describing how records are shaped: which
fields are masked, removed, kept or excluded, and whether nested values are
sanitized as well.
"""

from collections.abc import Iterable, Mapping
from typing import Any

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.exceptions import ValidationError
from ..utils.logging import get_logger

logger = get_logger(__name__)


class SanitizeOptions(BaseModel):
    """Options bundle threaded unchanged through one sanitize call."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    mask: dict[Any, Any] | None = Field(
        default=None,
        description="Field -> replacement, applied to existing fields only",
    )
    remove: frozenset[Any] | None = Field(
        default=None, description="Fields dropped unconditionally"
    )
    only: frozenset[Any] | None = Field(
        default=None, description="Whitelist of fields to keep"
    )
    except_: frozenset[Any] | None = Field(
        default=None,
        alias="except",
        description="Blacklist of fields to drop, ignored when 'only' is set",
    )
    deep: bool = Field(default=True, description="Sanitize nested values too")

    @field_validator("mask", mode="before")
    @classmethod
    def _coerce_mask_pairs(cls, value: Any) -> Any:
        if value is None or isinstance(value, Mapping):
            return value
        if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
            raise ValueError("mask must be a mapping or (field, replacement) pairs")

        pairs = {}
        for item in value:
            if not isinstance(item, (tuple, list)) or len(item) != 2:
                raise ValueError(
                    f"mask entries must be (field, replacement) pairs, got {item!r}"
                )
            key, replacement = item
            pairs[key] = replacement
        return pairs

    @field_validator("remove", "only", "except_", mode="before")
    @classmethod
    def _coerce_field_names(cls, value: Any) -> Any:
        if value is None:
            return value
        if isinstance(value, (str, bytes)):
            raise ValueError("expected a collection of field names, not a string")
        try:
            return frozenset(value)
        except TypeError as e:
            raise ValueError(f"expected a collection of hashable field names: {e}")

    @property
    def filters_conflict(self) -> bool:
        """True when both 'only' and 'except' are set; 'only' wins."""
        return bool(self.only) and bool(self.except_)

    @classmethod
    def build(cls, options: Any = None, **overrides: Any) -> "SanitizeOptions":
        """Build a validated options bundle.

        ``options`` may be ``None``, a ``SanitizeOptions``, a mapping or an
        iterable of ``(name, value)`` pairs. Keyword ``overrides`` are merged
        on top; ``except_`` and ``except`` are both accepted.
        """
        if isinstance(options, SanitizeOptions) and not overrides:
            return options

        if options is None:
            raw: dict[str, Any] = {}
        elif isinstance(options, SanitizeOptions):
            # Attributes rather than model_dump, which would rewrite mask values
            raw = {
                ("except" if name == "except_" else name): getattr(options, name)
                for name in options.model_fields_set
            }
        elif isinstance(options, Mapping):
            raw = dict(options)
        else:
            try:
                raw = dict(options)
            except (TypeError, ValueError) as e:
                raise ValidationError(
                    f"Options must be a mapping or (name, value) pairs: {e}",
                    field_value=repr(options),
                    validation_rule="options_shape",
                ) from e

        raw.update(overrides)
        if "except_" in raw:
            raw["except"] = raw.pop("except_")

        try:
            built = cls.model_validate(raw)
        except pydantic.ValidationError as e:
            first = e.errors()[0]
            location = ".".join(str(part) for part in first.get("loc", ()))
            raise ValidationError(
                f"Invalid sanitize options: {first.get('msg', str(e))}",
                field_name=location or None,
                field_value=repr(first.get("input")),
                validation_rule=first.get("type"),
            ) from e

        if built.filters_conflict:
            logger.warning(
                "Both 'only' and 'except' given; 'except' is ignored",
                only=sorted(map(repr, built.only)),
                except_=sorted(map(repr, built.except_)),
            )

        return built
