"""Syslog severity and facility tables.

Purpose
-------
Provide the fixed numeric tables used to compute a frame's priority and the
lookup helpers that turn caller input into those numbers.

Contents
--------
* :class:`Severity` and :class:`Facility` integer enums.
* :func:`resolve_severity` / :func:`resolve_facility` - accept a member, a raw
  integer, or a case-sensitive name.
* :func:`compute_priority` - ``facility * 8 + severity``.

System Role
-----------
Numbers outside the enumerated range are passed through verbatim. Unknown
*names* fall back to the default and log a warning.
"""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Union

LOGGER = logging.getLogger(__name__)


class Severity(IntEnum):
    """Message urgency, 0 (most severe) to 7 (least severe)."""

    emerg = 0
    alert = 1
    crit = 2
    err = 3
    warn = 4
    notice = 5
    info = 6
    debug = 7


class Facility(IntEnum):
    """Subsystem classification transmitted in the priority header."""

    kern = 0
    user = 1
    mail = 2
    daemon = 3
    auth = 4
    syslog = 5
    lpr = 6
    news = 7
    uucp = 8
    local0 = 16
    local1 = 17
    local2 = 18
    local3 = 19
    local4 = 20
    local5 = 21
    local6 = 22
    local7 = 23


SeverityLike = Union[Severity, int, str, None]
FacilityLike = Union[Facility, int, str, None]


def resolve_severity(value: SeverityLike, default: Severity = Severity.notice) -> int:
    """Return the numeric severity for ``value``.

    Examples
    --------
    >>> resolve_severity("err"), resolve_severity(3), resolve_severity(None)
    (3, 3, 5)
    >>> resolve_severity(42)
    42
    """
    return _resolve(Severity, value, default)


def resolve_facility(value: FacilityLike, default: Facility = Facility.user) -> int:
    """Return the numeric facility for ``value``.

    Examples
    --------
    >>> resolve_facility("local0"), resolve_facility(None), resolve_facility(0)
    (16, 1, 0)
    """
    return _resolve(Facility, value, default)


def compute_priority(facility: int, severity: int) -> int:
    """Combine ``facility`` and ``severity`` into the header priority.

    >>> compute_priority(Facility.local7, Severity.debug)
    191
    """
    return int(facility) * 8 + int(severity)


def _resolve(table: type[IntEnum], value: object, default: IntEnum) -> int:
    if value is None:
        return int(default)
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return int(value)
    if isinstance(value, str):
        try:
            return int(table[value])
        except KeyError:
            LOGGER.warning("Unknown %s name %r, using %s", table.__name__.lower(), value, default.name)
            return int(default)
    LOGGER.warning("Unsupported %s value %r, using %s", table.__name__.lower(), value, default.name)
    return int(default)


__all__ = [
    "Facility",
    "FacilityLike",
    "Severity",
    "SeverityLike",
    "compute_priority",
    "resolve_facility",
    "resolve_severity",
]
