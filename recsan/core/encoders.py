"""
Encoders for tuples that are not key/value pairs.

An encoder turns the ordered components of such a tuple into text. It is
either a callable ``encode(values) -> str`` or an object exposing an
``encode(values) -> str`` method, such as a ``json.JSONEncoder`` instance.
"""

import json
import pkgutil
from collections.abc import Callable, Sequence
from typing import Any

from ..utils.exceptions import ConfigurationError

Encoder = Callable[[list[Any]], str]


def json_encoder(values: Sequence[Any]) -> str:
    """Encode values as a compact JSON array."""
    return json.dumps(list(values), separators=(",", ":"), ensure_ascii=False)


def as_encoder(candidate: Any) -> Encoder:
    """Normalize an encoder object or callable into a plain callable.

    A class such as ``json.JSONEncoder`` is instantiated without arguments so
    that its bound ``encode`` method is used.
    """
    if isinstance(candidate, type):
        try:
            candidate = candidate()
        except Exception as e:
            raise ConfigurationError(
                f"Encoder class {candidate.__name__} needs constructor arguments: {e}",
                config_key="json_encoder",
                expected_value="callable, encoder instance or no-argument class",
                actual_value=candidate.__name__,
            ) from e

    encode = getattr(candidate, "encode", None)
    if callable(encode) and not isinstance(candidate, (str, bytes)):
        return encode
    if callable(candidate):
        return candidate

    raise ConfigurationError(
        f"Encoder {candidate!r} is neither callable nor has an encode() method",
        config_key="json_encoder",
        expected_value="callable or object with encode()",
        actual_value=type(candidate).__name__,
    )


def resolve_encoder(path: str) -> Encoder:
    """Import an encoder from a ``module:attribute`` or dotted path."""
    try:
        target = pkgutil.resolve_name(path)
    except (ImportError, AttributeError, ValueError) as e:
        raise ConfigurationError(
            f"Cannot import encoder '{path}': {e}",
            config_key="json_encoder",
            expected_value="module:attribute",
            actual_value=path,
        ) from e

    return as_encoder(target)
