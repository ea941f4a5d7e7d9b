from __future__ import annotations

import json
from decimal import Decimal

from .exceptions import InvalidInputError


def _reject_constant(name: str):
    # json.loads accepts NaN/Infinity by default; they are not JSON.
    raise ValueError(f"non-standard JSON constant {name}")


def is_valid_json(text: object) -> bool:
    """True iff ``text`` parses as a JSON value of any kind. Bytes must be UTF-8."""
    if not isinstance(text, (str, bytes, bytearray)):
        return False
    try:
        if not isinstance(text, str):
            text = bytes(text).decode("utf-8")
        # Decimal keeps integers past int()'s digit limit valid.
        json.loads(text, parse_int=Decimal, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        return False
    return True


def ensure_valid_json(text: object) -> None:
    if not is_valid_json(text):
        raise InvalidInputError("Invalid JSON")
