"""
customzsh — CLI entrypoint.

Usage:
    customzsh                  install / reconcile
    customzsh --uninstall      remove the framework, restore ~/.zshrc
    customzsh --json           print the run report as JSON
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from customzsh import __version__
from customzsh.adapters.registry import default_registry
from customzsh.core.models.report import InstallReport, StepResult, UninstallReport
from customzsh.core.observability.logging_config import setup_logging

_MARKERS = {
    "performed": ("✓", "green"),
    "skipped": ("⊘", "yellow"),
    "failed": ("✗", "red"),
}


def _configure_logging(verbose: bool, quiet: bool, debug: bool) -> None:
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("CUSTOMZSH_LOG_LEVEL", "WARNING")

    setup_logging(
        level=level,
        log_file=os.environ.get("CUSTOMZSH_LOG_FILE"),
        log_file_level=os.environ.get("CUSTOMZSH_LOG_FILE_LEVEL"),
    )


def _echo_step(result: StepResult) -> None:
    marker, colour = _MARKERS.get(result.status, ("?", "white"))
    click.secho(f"   {marker} {result.step}", fg=colour, nl=False)
    click.echo(f" — {result.message}" if result.message else "")


def _echo_install(report: InstallReport, quiet: bool) -> None:
    if not quiet:
        for result in report.steps:
            _echo_step(result)
        click.echo()

    if report.outcome == "bootstrapped":
        click.secho(f"📝 Default configuration written to {report.config_path}", fg="cyan", bold=True)
        click.echo("   Edit it, then run customzsh again.")
    elif report.outcome == "aborted":
        click.secho(f"❌ Install aborted at {report.aborted_step}: {report.reason}", fg="red", bold=True)
    else:
        click.secho("✅ Install complete", fg="green", bold=True)
        if report.tool is not None and not report.tool.ok:
            click.secho(f"⚠️  eza not installed: {report.tool.error}", fg="yellow")
        if not quiet:
            click.echo("   Open a new terminal (or run `exec zsh`) to use it.")


def _echo_uninstall(report: UninstallReport, quiet: bool) -> None:
    if not quiet:
        for result in report.steps:
            _echo_step(result)
        click.echo()

    if report.ok:
        click.secho("✅ Uninstall complete", fg="green", bold=True)
    else:
        click.secho("❌ Uninstall finished with errors", fg="red", bold=True)


@click.command()
@click.version_option(version=__version__, prog_name="customzsh")
@click.option("--uninstall", is_flag=True, help="Remove Oh My Zsh and restore the original ~/.zshrc.")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to config.yml (default: ~/.config/customzsh/config.yml).",
)
@click.option(
    "--home",
    "home",
    type=click.Path(file_okay=False),
    default=None,
    help="Operate on this home directory instead of the current user's.",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output the report as JSON.")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
def cli(
    uninstall: bool,
    config_path: str | None,
    home: str | None,
    as_json: bool,
    verbose: bool,
    quiet: bool,
    debug: bool,
) -> None:
    """Install and configure zsh with Oh My Zsh, plugins and eza."""
    _configure_logging(verbose, quiet, debug)

    from customzsh.core.config.loader import default_config_path
    from customzsh.core.config.paths import InstallPaths

    home_dir = Path(home).expanduser() if home else None
    paths = InstallPaths.for_home(home_dir)
    registry = default_registry()

    if uninstall:
        from customzsh.core.use_cases.uninstall import run_uninstall

        report = run_uninstall(paths, registry)
        if as_json:
            click.echo(json.dumps(report.to_dict(), indent=2))
        else:
            _echo_uninstall(report, quiet)
        sys.exit(report.exit_code)

    from customzsh.core.use_cases.install import run_install

    cfg = Path(config_path).expanduser() if config_path else default_config_path(home_dir)
    result = run_install(cfg, paths, registry)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        _echo_install(result, quiet)
    sys.exit(result.exit_code)


if __name__ == "__main__":
    cli()
