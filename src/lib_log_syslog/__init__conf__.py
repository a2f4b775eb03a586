"""Static package metadata surfaced by the CLI banner."""

from __future__ import annotations

name = "lib_log_syslog"
title = "Syslog client with TCP and UDP transports"
version = "0.1.0"
shell_command = "lib_log_syslog"


def info_lines() -> list[str]:
    """Return the banner lines shown by ``lib_log_syslog info``."""
    fields = [
        ("name", name),
        ("title", title),
        ("version", version),
        ("shell_command", shell_command),
    ]
    pad = max(len(label) for label, _ in fields)
    return [f"Info for {name}:", ""] + [f"    {label:<{pad}} = {value}" for label, value in fields]


def summary_info() -> str:
    """Return the metadata banner, newline terminated."""
    return "\n".join(info_lines()) + "\n"


__all__ = ["info_lines", "summary_info"]
