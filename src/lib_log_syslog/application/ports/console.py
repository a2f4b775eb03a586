"""Console port describing local diagnostic output.

Purpose
-------
Let the dispatcher echo delivery failures to a human-facing stream without
depending on a concrete terminal library.

Contents
--------
* :class:`ConsolePort` - runtime-checkable protocol with a single ``emit``
  method.

System Role
-----------
The ``quiet`` endpoint flag silences this channel only; error listeners and
per-send callbacks are always notified.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from lib_log_syslog.domain.errors import SyslogTransportError


@runtime_checkable
class ConsolePort(Protocol):
    """Render a transport failure for the operator."""

    def emit(self, error: SyslogTransportError) -> None:
        """Print ``error`` to the diagnostic stream."""


__all__ = ["ConsolePort"]
