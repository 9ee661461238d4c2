"""Permissive boolean parsing for capability flags.

Form posts and API payloads deliver flags as ``"1"``, ``"false"``, ``0``
and so on. parse_flag() recognises exactly these forms and nothing else.
"""

from __future__ import annotations

from typing import Any, Optional

TRUTHY_STRINGS = frozenset({"true", "1"})
FALSY_STRINGS = frozenset({"false", "0"})


def parse_flag(value: Any) -> Optional[bool]:
    """Parse a boolean-ish value.

    Returns:
        ``True`` for ``True``, ``1``, ``"1"``, ``"true"``;
        ``False`` for ``False``, ``0``, ``"0"``, ``"false"`` (strings are
        case-insensitive and stripped); ``None`` for anything else, which
        callers treat as "leave unchanged".

    Example::

        parse_flag("TRUE")   # True
        parse_flag(0)        # False
        parse_flag("yes")    # None
        parse_flag(None)     # None
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if value == 1:
            return True
        if value == 0:
            return False
        return None
    if isinstance(value, str):
        text = value.strip().lower()
        if text in TRUTHY_STRINGS:
            return True
        if text in FALSY_STRINGS:
            return False
    return None


__all__ = [
    "FALSY_STRINGS",
    "TRUTHY_STRINGS",
    "parse_flag",
]
