"""Rich-powered diagnostic console implementing :class:`ConsolePort`.

Purpose
-------
Echo syslog delivery failures to stderr so operators notice a missing
collector even when nobody listens for the dispatcher's error events.

Contents
--------
* :data:`_STYLE_MAP` - default style per error kind.
* :class:`RichConsoleAdapter` - adapter wired by :class:`lib_log_syslog.SysLogger`.

System Role
-----------
Only channel affected by the ``quiet`` endpoint flag; the dispatcher skips it
entirely when ``quiet`` is set.
"""

from __future__ import annotations

from typing import Mapping

from rich.console import Console

from lib_log_syslog.application.ports.console import ConsolePort
from lib_log_syslog.domain.errors import SyslogConnectError, SyslogTransportError, SyslogWriteError

#: Default Rich styles keyed by error class.
_STYLE_MAP: Mapping[type[SyslogTransportError], str] = {
    SyslogConnectError: "bold red",
    SyslogWriteError: "yellow",
}


class RichConsoleAdapter(ConsolePort):
    """Print transport failures using Rich formatting."""

    def __init__(self, *, console: Console | None = None, no_color: bool = False) -> None:
        """Configure the adapter; defaults to a stderr console."""
        if console is not None:
            self._console = console
        else:
            self._console = Console(stderr=True, no_color=no_color)
        self._no_color = no_color

    def emit(self, error: SyslogTransportError) -> None:
        """Print ``error`` on one line.

        Examples
        --------
        >>> from io import StringIO
        >>> console = Console(file=StringIO(), record=True)
        >>> adapter = RichConsoleAdapter(console=console)
        >>> adapter.emit(SyslogConnectError("refused", host="h", port=514, protocol="tcp"))
        >>> 'h:514' in console.export_text()
        True
        """
        style = "" if self._no_color else _STYLE_MAP.get(type(error), "red")
        self._console.print(self._format_line(error), style=style, highlight=False, markup=False)

    @staticmethod
    def _format_line(error: SyslogTransportError) -> str:
        """Return the diagnostic line for ``error``.

        >>> RichConsoleAdapter._format_line(SyslogWriteError("broken pipe", host="h", port=601, protocol="tcp"))
        'syslog tcp h:601 SyslogWriteError: broken pipe'
        """
        return f"syslog {error.protocol} {error.destination} {type(error).__name__}: {error}"


__all__ = ["RichConsoleAdapter"]
