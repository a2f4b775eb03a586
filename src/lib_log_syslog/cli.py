"""Command line adapter for sending one-off syslog messages.

Purpose
-------
Provide ``lib_log_syslog send`` for shell scripts and smoke tests, plus the
``info`` metadata banner.

Contents
--------
* :func:`cli` - Click group with the global ``--traceback`` and ``--use-dotenv``
  toggles.
* :func:`cli_info` / :func:`cli_send` - subcommands.
* :func:`main` - entry point routed through :mod:`lib_cli_exit_tools`.

System Role
-----------
Presentation layer only: settings come from flags, then ``SYSLOG_*``
environment variables (optionally loaded from ``.env``), and the actual work
is a single :meth:`SysLogger.send` followed by :meth:`SysLogger.close`.
"""

from __future__ import annotations

import os
from typing import Sequence

import click
import lib_cli_exit_tools

from . import __init__conf__
from . import config as syslog_config
from .domain import Severity, SyslogTransportError
from .syslogger import SysLogger

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_SEVERITY_CHOICES = [member.name for member in Severity] + [str(member.value) for member in Severity]


@click.group(invoke_without_command=True, context_settings=CLICK_CONTEXT_SETTINGS)
@click.version_option(version=__init__conf__.version, prog_name=__init__conf__.shell_command, message="%(version)s")
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors.",
)
@click.option(
    "--use-dotenv/--no-use-dotenv",
    default=False,
    help=f"Load SYSLOG_* variables from the nearest .env (also enabled by {syslog_config.DOTENV_ENV_VAR}=1).",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool, use_dotenv: bool) -> None:
    """Send messages to a syslog collector over TCP or UDP."""

    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback

    explicit: bool | None = None
    if ctx.get_parameter_source("use_dotenv") is not click.core.ParameterSource.DEFAULT:
        explicit = use_dotenv
    if syslog_config.should_use_dotenv(explicit=explicit, env_value=os.getenv(syslog_config.DOTENV_ENV_VAR)):
        syslog_config.enable_dotenv()

    if ctx.invoked_subcommand is None:
        click.echo(__init__conf__.summary_info(), nl=False)


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print the package metadata banner."""

    click.echo(__init__conf__.summary_info(), nl=False)


@cli.command("send", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("message", nargs=-1, required=True)
@click.option("--severity", "-s", type=click.Choice(_SEVERITY_CHOICES), default="notice", show_default=True)
@click.option("--tag", "-t", default=None, help="Program tag (default: SYSLOG_TAG or the script name).")
@click.option("--facility", "-f", default=None, help="Facility name or number (default: SYSLOG_FACILITY or user).")
@click.option("--hostname", default=None, help="Hostname written into the frame (default: localhost).")
@click.option("--host", "-H", "syslog_host", default=None, help="Collector as HOST or HOST:PORT (default: localhost:514).")
@click.option("--protocol", "-p", type=click.Choice(["tcp", "udp"]), default=None, help="Transport (default: tcp).")
@click.option("--quiet/--no-quiet", default=None, help="Suppress the diagnostic line on delivery failure.")
def cli_send(
    message: tuple[str, ...],
    severity: str,
    tag: str | None,
    facility: str | None,
    hostname: str | None,
    syslog_host: str | None,
    protocol: str | None,
    quiet: bool | None,
) -> None:
    """Send MESSAGE once and wait for the transport to finish."""

    settings = syslog_config.settings_from_env()
    try:
        logger = SysLogger(
            tag=tag or settings.tag,
            facility=_facility_option(facility) if facility else settings.facility,
            hostname=hostname or settings.hostname,
            syslog_host=syslog_host or settings.syslog_host,
            protocol=protocol or settings.protocol,
            quiet=settings.quiet if quiet is None else quiet,
        )
    except ValueError as exc:
        raise click.UsageError(str(exc)) from exc
    level: str | int = int(severity) if severity.isdigit() else severity
    outcomes: list[SyslogTransportError | None] = []
    logger.send(" ".join(message), level, on_done=outcomes.append)
    logger.close()
    if not outcomes:
        raise click.ClickException(f"Timed out sending to {logger.config.destination}")
    if outcomes[0] is not None:
        raise click.ClickException(str(outcomes[0]))
    click.echo(f"sent to {logger.config.protocol.value}://{logger.config.destination}")


def _facility_option(value: str) -> str | int:
    return int(value) if value.isdigit() else value


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and return its exit code.

    Traceback preferences changed by ``--traceback`` are restored afterwards
    so embedding applications keep their own settings.
    """

    previous = (
        getattr(lib_cli_exit_tools.config, "traceback", False),
        getattr(lib_cli_exit_tools.config, "traceback_force_color", False),
    )
    try:
        return lib_cli_exit_tools.run_cli(
            cli,
            argv=list(argv) if argv is not None else None,
            prog_name=__init__conf__.shell_command,
        )
    finally:
        lib_cli_exit_tools.config.traceback, lib_cli_exit_tools.config.traceback_force_color = previous


__all__ = ["cli", "cli_info", "cli_send", "main"]
