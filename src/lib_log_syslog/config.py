"""Environment-driven configuration for the default logger and the CLI.

Purpose
-------
Read endpoint settings from ``SYSLOG_*`` environment variables and,
optionally, from the nearest ``.env`` file.

Contents
--------
* :data:`DOTENV_ENV_VAR` - toggle enabling ``.env`` loading.
* :func:`enable_dotenv` / :func:`should_use_dotenv` - ``.env`` handling.
* :class:`SyslogSettings` and :func:`settings_from_env`.

Precedence
----------
Explicit call arguments > process environment > ``.env`` entries > defaults.
``.env`` values never override variables that are already set.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from dotenv import find_dotenv, load_dotenv

DOTENV_ENV_VAR = "SYSLOG_USE_DOTENV"

ENV_TAG = "SYSLOG_TAG"
ENV_FACILITY = "SYSLOG_FACILITY"
ENV_HOSTNAME = "SYSLOG_HOSTNAME"
ENV_HOST = "SYSLOG_HOST"
ENV_PROTOCOL = "SYSLOG_PROTOCOL"
ENV_QUIET = "SYSLOG_QUIET"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}

_DOTENV_LOADED: Path | None = None


@dataclass(slots=True, frozen=True)
class SyslogSettings:
    """Raw endpoint settings as accepted by :meth:`SysLogger.set`."""

    tag: str | None = None
    facility: str | int | None = None
    hostname: str | None = None
    syslog_host: str | None = None
    protocol: str | None = None
    quiet: bool = False

    def as_kwargs(self) -> dict[str, object]:
        return {
            "tag": self.tag,
            "facility": self.facility,
            "hostname": self.hostname,
            "syslog_host": self.syslog_host,
            "protocol": self.protocol,
            "quiet": self.quiet,
        }


def enable_dotenv(start: Path | None = None) -> Path | None:
    """Load the nearest ``.env`` without overriding existing variables.

    Parameters
    ----------
    start:
        Directory to search from; defaults to the working directory. Parent
        directories are searched as well.

    Returns
    -------
    Path | None
        The loaded file, or ``None`` when no ``.env`` was found.
    """
    global _DOTENV_LOADED
    if start is None:
        found = find_dotenv(usecwd=True)
        candidate = Path(found) if found else None
    else:
        candidate = _search_upwards(Path(start))
    if candidate is None:
        return None
    resolved = candidate.resolve()
    load_dotenv(resolved, override=False)
    _DOTENV_LOADED = resolved
    return resolved


def should_use_dotenv(*, explicit: bool | None = None, env_value: str | None = None) -> bool:
    """Decide whether ``.env`` loading is requested.

    A CLI flag wins over the environment toggle.

    >>> should_use_dotenv(explicit=False, env_value="1")
    False
    >>> should_use_dotenv(env_value="yes")
    True
    """
    if explicit is not None:
        return explicit
    if env_value is None:
        return False
    return env_value.strip().lower() in _TRUTHY


def settings_from_env(environ: Mapping[str, str] | None = None) -> SyslogSettings:
    """Build :class:`SyslogSettings` from ``SYSLOG_*`` variables."""
    env = os.environ if environ is None else environ
    return SyslogSettings(
        tag=env.get(ENV_TAG) or None,
        facility=_facility_value(env.get(ENV_FACILITY)),
        hostname=env.get(ENV_HOSTNAME) or None,
        syslog_host=env.get(ENV_HOST) or None,
        protocol=env.get(ENV_PROTOCOL) or None,
        quiet=_env_bool(env.get(ENV_QUIET)),
    )


def _facility_value(raw: str | None) -> str | int | None:
    if not raw:
        return None
    text = raw.strip()
    return int(text) if text.isdigit() else text


def _env_bool(raw: str | None, default: bool = False) -> bool:
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ValueError(f"{ENV_QUIET} must be a boolean flag, got {raw!r}")


def _search_upwards(start: Path) -> Path | None:
    for directory in (start, *start.parents):
        candidate = directory / ".env"
        if candidate.is_file():
            return candidate
    return None


def _reset_dotenv_state_for_testing() -> None:
    global _DOTENV_LOADED
    _DOTENV_LOADED = None


def loaded_dotenv() -> Path | None:
    """Return the ``.env`` path loaded by :func:`enable_dotenv`, if any."""
    return _DOTENV_LOADED


__all__ = [
    "DOTENV_ENV_VAR",
    "ENV_FACILITY",
    "ENV_HOST",
    "ENV_HOSTNAME",
    "ENV_PROTOCOL",
    "ENV_QUIET",
    "ENV_TAG",
    "SyslogSettings",
    "enable_dotenv",
    "loaded_dotenv",
    "settings_from_env",
    "should_use_dotenv",
]
