"""Optional process-wide default :class:`SysLogger`.

Purpose
-------
Offer zero-setup logging for scripts: :func:`default_logger` lazily builds one
shared instance from the ``SYSLOG_*`` environment variables (see
:mod:`lib_log_syslog.config`) and returns the same object on every call.

System Role
-----------
Pure convenience registry on top of the explicitly owned :class:`SysLogger`.
Reconfiguring the returned instance changes it for every caller in the
process; tests and libraries that need isolation construct their own
:class:`SysLogger` instead.
"""

from __future__ import annotations

from typing import Mapping

from lib_log_syslog.config import settings_from_env
from lib_log_syslog.syslogger import SysLogger

from ._state import clear_default_logger, get_or_create_default_logger, is_initialised, set_default_logger


def default_logger(environ: Mapping[str, str] | None = None) -> SysLogger:
    """Return the shared logger, creating it on first use.

    ``environ`` is only consulted when the instance is created.
    """
    return get_or_create_default_logger(lambda: SysLogger(**settings_from_env(environ).as_kwargs()))


__all__ = [
    "clear_default_logger",
    "default_logger",
    "is_initialised",
    "set_default_logger",
]
