"""Process-wide default logger container and access helpers."""

from __future__ import annotations

from threading import RLock
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from lib_log_syslog.syslogger import SysLogger


_DEFAULT: "SysLogger | None" = None
_STATE_LOCK = RLock()


def set_default_logger(logger: "SysLogger") -> None:
    """Install ``logger`` as the shared default instance."""

    with _STATE_LOCK:
        global _DEFAULT
        _DEFAULT = logger


def clear_default_logger() -> None:
    """Forget the default instance; the next access builds a fresh one."""

    with _STATE_LOCK:
        global _DEFAULT
        _DEFAULT = None


def current_default_logger() -> "SysLogger | None":
    with _STATE_LOCK:
        return _DEFAULT


def get_or_create_default_logger(factory: Callable[[], "SysLogger"]) -> "SysLogger":
    """Return the default instance, building it with ``factory`` under the lock."""

    with _STATE_LOCK:
        global _DEFAULT
        if _DEFAULT is None:
            _DEFAULT = factory()
        return _DEFAULT


def is_initialised() -> bool:
    """Return ``True`` when a default logger exists."""

    with _STATE_LOCK:
        return _DEFAULT is not None


__all__ = [
    "clear_default_logger",
    "current_default_logger",
    "get_or_create_default_logger",
    "is_initialised",
    "set_default_logger",
]
