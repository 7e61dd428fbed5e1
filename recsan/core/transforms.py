"""
Key transformation functions for recsan.

Pure functions that reshape a single flat record. None of them mutate their
input; each returns a new dict.
"""

from collections.abc import Collection, Mapping
from typing import Any

Record = dict[Any, Any]


def remove_keys(record: Mapping[Any, Any], keys: Collection[Any] | None) -> Record:
    """Drop every key listed in ``keys``."""
    if not keys:
        return dict(record)

    return {key: value for key, value in record.items() if key not in keys}


def mask_values(record: Mapping[Any, Any], mask: Mapping[Any, Any] | None) -> Record:
    """Overwrite the value of each masked field that exists in the record.

    Fields named in ``mask`` but absent from ``record`` are not inserted.
    """
    result = dict(record)
    if not mask:
        return result

    for key, replacement in mask.items():
        if key in result:
            result[key] = replacement

    return result


def filter_keys(
    record: Mapping[Any, Any],
    only: Collection[Any] | None = None,
    except_: Collection[Any] | None = None,
) -> Record:
    """Keep the ``only`` keys, or else drop the ``except_`` keys.

    ``only`` takes precedence: when it is non-empty ``except_`` is ignored.
    """
    if only:
        return {key: value for key, value in record.items() if key in only}

    if except_:
        return {key: value for key, value in record.items() if key not in except_}

    return dict(record)
