"""printf-style message formatting used by the logger convenience methods.

Placeholders
------------
``%s``
    next argument rendered with :func:`str`.
``%d``
    next argument coerced to a number; non-numeric values render ``NaN``.
``%j``
    next argument serialised as compact JSON.

A placeholder with no argument left, and every other ``%`` sequence, is kept
literally. Arguments that no placeholder consumed are appended, each after a
single space. When the first argument is not a string every argument is
rendered with :func:`rich.pretty.pretty_repr` and joined by spaces.
"""

from __future__ import annotations

import json
import math
import re
from typing import Any

from rich.pretty import pretty_repr

_PLACEHOLDER = re.compile(r"%[sdj]")


def format_message(*args: Any) -> str:
    """Render ``args`` into a single message body.

    Examples
    --------
    >>> format_message("x=%d", 5)
    'x=5'
    >>> format_message("%s is %j", "cfg", {"a": 1}, "extra", 2)
    'cfg is {"a":1} extra 2'
    >>> format_message("%s and %s", "one")
    'one and %s'
    >>> format_message({"a": 1}, 2)
    "{'a': 1} 2"
    """
    if not args:
        return ""
    template = args[0]
    if not isinstance(template, str):
        return " ".join(pretty_repr(arg) for arg in args)

    remaining = list(args[1:])
    position = 0

    def _substitute(match: re.Match[str]) -> str:
        nonlocal position
        if position >= len(remaining):
            return match.group(0)
        value = remaining[position]
        position += 1
        code = match.group(0)[1]
        if code == "s":
            return str(value)
        if code == "d":
            return _as_number(value)
        return _as_json(value)

    rendered = _PLACEHOLDER.sub(_substitute, template)
    for value in remaining[position:]:
        rendered += " " + str(value)
    return rendered


def _as_number(value: Any) -> str:
    """Coerce ``value`` the way a ``%d`` placeholder expects.

    >>> _as_number("12"), _as_number(3.0), _as_number(2.5), _as_number("x"), _as_number(True)
    ('12', '3', '2.5', 'NaN', '1')
    """
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return "0"
        try:
            return str(int(text))
        except ValueError:
            pass
        try:
            value = float(text)
        except ValueError:
            return "NaN"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return "NaN"


def _as_json(value: Any) -> str:
    try:
        return json.dumps(value, separators=(",", ":"), default=str)
    except ValueError:
        # json raises ValueError for reference cycles.
        return "[Circular]"


__all__ = ["format_message"]
