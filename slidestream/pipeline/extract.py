"""Recover JSON embedded in free-form model output.

Models are asked for a bare JSON object but often wrap it in prose or code
fences. ``find_json_block`` scans from the first opening bracket, tracks
nesting depth (ignoring brackets inside string literals) and returns the
substring that ends at the matching close bracket.
"""

import json
from typing import Any

from slidestream.exceptions import JSONExtractionError

_PAIRS = {"{": "}", "[": "]"}


def find_json_block(text: str, opener: str = "{") -> str:
    """Return the first balanced ``opener``...close block in ``text``.

    Raises:
        JSONExtractionError: no opener is present or it is never closed.
    """
    if opener not in _PAIRS:
        raise ValueError(f"Unsupported opener: {opener!r}")
    closer = _PAIRS[opener]

    start = text.find(opener) if text else -1
    if start < 0:
        raise JSONExtractionError(f"No '{opener}' found in model output")

    depth = 0
    in_string = False
    escaped = False
    for pos in range(start, len(text)):
        char = text[pos]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == opener:
            depth += 1
        elif char == closer:
            depth -= 1
            if depth == 0:
                return text[start : pos + 1]

    raise JSONExtractionError(f"Unbalanced '{opener}' in model output")


def extract_json_object(text: str) -> dict[str, Any]:
    """Find and decode the first top-level JSON object in ``text``."""
    block = find_json_block(text, "{")
    try:
        data = json.loads(block)
    except json.JSONDecodeError as e:
        raise JSONExtractionError(f"Invalid JSON object: {e}") from e
    if not isinstance(data, dict):
        raise JSONExtractionError("Extracted JSON is not an object")
    return data
