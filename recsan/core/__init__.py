"""
Core sanitization logic for recsan.

Pure key transformations, entity projection, options, encoders and the
stage pipeline driven by the ``Sanitizer``.
"""

from . import encoders, entities, options, pipeline, sanitizer, transforms

__all__ = ["encoders", "entities", "options", "pipeline", "sanitizer", "transforms"]
