"""Safe key folding applied before handing a document to the encoder.

A chain of single-key objects such as ``{"a": {"b": {"c": 1}}}`` is
collapsed into one dotted key (``{"a.b.c": 1}``), which the encoder then
writes as ``a.b.c: 1``. A chain is folded only when:
- it has at least two segments
- every segment is a plain identifier (no dots, no quoting needed)
- the dotted key does not clash with a literal sibling key, nor with a
  dotted literal key at the document root for the same absolute path

The chain stops at the first value that is not a non-empty single-key
object. A multi-key object at the end stays nested under the folded key.
"""

from __future__ import annotations

import re
from typing import Any

IDENTIFIER_SEGMENT = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _collect_chain(key: str, value: dict[str, Any]) -> tuple[list[str], Any]:
    """Follow single-key objects starting at ``key``.

    Returns:
        (segments, end_value) where end_value is the first value that is not a
        single-key object.
    """
    segments = [key]
    current: Any = value
    while isinstance(current, dict) and len(current) == 1:
        next_key, next_value = next(iter(current.items()))
        segments.append(next_key)
        current = next_value
    return segments, current


def _fold_value(value: Any, root_literal_keys: set[str]) -> Any:
    # Objects inside arrays start a fresh path.
    if isinstance(value, dict):
        return _fold_object(value, "", root_literal_keys)
    if isinstance(value, list):
        return [_fold_value(item, root_literal_keys) for item in value]
    return value


def _fold_object(obj: dict[str, Any], path_prefix: str, root_literal_keys: set[str]) -> dict[str, Any]:
    folded: dict[str, Any] = {}

    for key, value in obj.items():
        absolute_key = f"{path_prefix}.{key}" if path_prefix else key

        if isinstance(value, dict) and len(value) == 1:
            segments, end_value = _collect_chain(key, value)
            folded_key = ".".join(segments)
            absolute_path = f"{path_prefix}.{folded_key}" if path_prefix else folded_key

            if (
                all(IDENTIFIER_SEGMENT.match(segment) for segment in segments)
                and folded_key not in obj
                and not (path_prefix and absolute_path in root_literal_keys)
            ):
                if isinstance(end_value, dict) and end_value:
                    folded[folded_key] = _fold_object(end_value, absolute_path, root_literal_keys)
                else:
                    folded[folded_key] = _fold_value(end_value, root_literal_keys)
                continue

        if isinstance(value, dict):
            folded[key] = _fold_object(value, absolute_key, root_literal_keys)
        else:
            folded[key] = _fold_value(value, root_literal_keys)

    return folded


def fold_keys(document: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``document`` with safe single-key chains folded.

    The input is never mutated.
    """
    root_literal_keys = {key for key in document if "." in key}
    return _fold_object(document, "", root_literal_keys)
