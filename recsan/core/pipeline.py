"""
Single-record sanitization pipeline.

A record flows through four named stages in a fixed order:
``remove -> mask -> filter -> recurse``. Each stage is a callable
``(record, options, sanitizer) -> record`` and can be replaced on a
``Sanitizer`` without touching the others.
"""

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING

from ..utils.exceptions import ConfigurationError
from .options import SanitizeOptions
from .transforms import Record, filter_keys, mask_values, remove_keys

if TYPE_CHECKING:
    from .sanitizer import Sanitizer

Stage = Callable[[Record, SanitizeOptions, "Sanitizer"], Record]

STAGE_ORDER = ("remove", "mask", "filter", "recurse")


def remove_stage(
    record: Record, options: SanitizeOptions, sanitizer: "Sanitizer"
) -> Record:
    return remove_keys(record, options.remove)


def mask_stage(
    record: Record, options: SanitizeOptions, sanitizer: "Sanitizer"
) -> Record:
    return mask_values(record, options.mask)


def filter_stage(
    record: Record, options: SanitizeOptions, sanitizer: "Sanitizer"
) -> Record:
    return filter_keys(record, options.only, options.except_)


def recurse_stage(
    record: Record, options: SanitizeOptions, sanitizer: "Sanitizer"
) -> Record:
    """Sanitize nested values, pruning unloaded relations."""
    if not options.deep:
        return record

    return {
        key: sanitizer.dispatch(value, options)
        for key, value in record.items()
        if not sanitizer.is_unloaded(value)
    }


DEFAULT_STAGES: dict[str, Stage] = {
    "remove": remove_stage,
    "mask": mask_stage,
    "filter": filter_stage,
    "recurse": recurse_stage,
}


def build_pipeline(overrides: Mapping[str, Stage] | None = None) -> tuple[Stage, ...]:
    """Return the stages in execution order, with ``overrides`` swapped in."""
    stages = dict(DEFAULT_STAGES)

    for name, stage in (overrides or {}).items():
        if name not in stages:
            raise ConfigurationError(
                f"Unknown sanitizer stage '{name}'",
                config_key="stages",
                expected_value=", ".join(STAGE_ORDER),
                actual_value=name,
            )
        if not callable(stage):
            raise ConfigurationError(
                f"Sanitizer stage '{name}' is not callable",
                config_key=f"stages.{name}",
                actual_value=type(stage).__name__,
            )
        stages[name] = stage

    return tuple(stages[name] for name in STAGE_ORDER)


def run_pipeline(
    stages: tuple[Stage, ...],
    record: Record,
    options: SanitizeOptions,
    sanitizer: "Sanitizer",
) -> Record:
    """Apply a series of stages to a record."""
    result = record
    for stage in stages:
        result = stage(result, options, sanitizer)
    return result
