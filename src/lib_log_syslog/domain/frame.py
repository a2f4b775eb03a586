"""Syslog frame encoder.

Purpose
-------
Render a message plus its severity, facility and process identity into the
exact bytes written to the collector.

Wire profile
------------
``<priority>YYYY-MM-DD HH:MM:SS hostname tag[pid]: message``

The timestamp is UTC with zero-padded fields. This is a simplified profile:
it does **not** use the RFC 3164 ``Mmm dd hh:mm:ss`` header, so collectors that
parse strict RFC 3164 will treat the date as part of the hostname field.
Stream frames are terminated by exactly one ``\\n``; datagram frames are sent
as-is.

System Role
-----------
Pure and deterministic for fixed inputs; used by
:class:`lib_log_syslog.application.dispatcher.TransportDispatcher` for every
send.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime, timezone

from .config import EndpointConfig, TransportProtocol
from .levels import compute_priority


@dataclass(slots=True, frozen=True)
class Frame:
    """Fully rendered syslog record.

    Attributes
    ----------
    text:
        Rendered record including the trailing newline for stream frames.
    priority:
        ``facility * 8 + severity`` as written in the header.
    """

    text: str
    priority: int

    @property
    def data(self) -> bytes:
        """Return the UTF-8 bytes put on the wire."""
        return self.text.encode("utf-8")


def format_timestamp(now: datetime) -> str:
    """Render ``now`` as ``YYYY-MM-DD HH:MM:SS`` in UTC.

    Naive datetimes are taken to be UTC already.

    >>> format_timestamp(datetime(2024, 3, 5, 7, 8, 9, tzinfo=timezone.utc))
    '2024-03-05 07:08:09'
    """
    if now.tzinfo is not None and now.tzinfo.utcoffset(now) is not None:
        now = now.astimezone(timezone.utc)
    return f"{now.year:04d}-{now.month:02d}-{now.day:02d} {now.hour:02d}:{now.minute:02d}:{now.second:02d}"


def encode(
    config: EndpointConfig,
    severity: int,
    tag: str,
    body: str,
    now: datetime,
    *,
    pid: int | None = None,
) -> Frame:
    """Build the :class:`Frame` for ``body``.

    Examples
    --------
    >>> cfg = EndpointConfig(tag="app", facility=1)
    >>> when = datetime(2024, 3, 5, 7, 8, 9, tzinfo=timezone.utc)
    >>> encode(cfg, 3, "app", "boom", when, pid=42).text
    '<11>2024-03-05 07:08:09 localhost app[42]: boom\\n'
    >>> encode(cfg.replace(protocol=TransportProtocol.UDP), 3, "app", "boom", when, pid=42).text
    '<11>2024-03-05 07:08:09 localhost app[42]: boom'
    """
    priority = compute_priority(config.facility, severity)
    process_id = os.getpid() if pid is None else pid
    text = f"<{priority}>{format_timestamp(now)} {config.hostname} {tag}[{process_id}]: {body}"
    if config.stream and not body.endswith("\n"):
        text += "\n"
    return Frame(text=text, priority=priority)


__all__ = ["Frame", "encode", "format_timestamp"]
