"""
recsan - record sanitization and shaping.

Masks, removes and filters fields of records (mappings, typed entities,
lists of records, key/value tuples), recursing into nested values.
"""

from . import config, core, utils
from .core.encoders import json_encoder
from .core.entities import NOT_LOADED, NotLoaded, is_not_loaded
from .core.options import SanitizeOptions
from .core.sanitizer import Sanitizer, sanitize
from .utils.exceptions import (
    ConfigurationError,
    InputError,
    RecsanError,
    ValidationError,
)

__version__ = "0.1.0"
__all__ = [
    "NOT_LOADED",
    "ConfigurationError",
    "InputError",
    "NotLoaded",
    "RecsanError",
    "SanitizeOptions",
    "Sanitizer",
    "ValidationError",
    "config",
    "core",
    "is_not_loaded",
    "json_encoder",
    "sanitize",
    "utils",
]
