"""
Install use case — the top-level orchestrator.

Runs the install steps in a fixed order:

    1. dependencies      read-only capability check
    2. config            load, or bootstrap a default and stop
    3. prerequisites     zsh / git / curl through the package manager
    4. tool              eza fallback resolver (non-fatal)
    5. framework         Oh My Zsh unattended installer
    6. plugins           clone each external plugin (fatal)
    7. rc-file           back up once, write the rendered ~/.zshrc (fatal)
    8. default-shell     chsh to zsh (fatal)

Every step probes before acting, so a second run against an installed
home performs nothing. A fatal StepError stops the run and is turned
into an ``aborted`` report; nothing already done is rolled back.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from customzsh.adapters.registry import AdapterRegistry, default_registry
from customzsh.adapters.shell.runner import is_root as _is_root
from customzsh.core.config.loader import bootstrap_configuration, load_configuration
from customzsh.core.config.paths import InstallPaths
from customzsh.core.errors import ConfigError, ConfigMalformed, ConfigMissing, StepError
from customzsh.core.models.config import Configuration
from customzsh.core.models.report import InstallReport, StepResult, ToolResolution
from customzsh.core.observability.logging_config import log_step_result, log_step_start
from customzsh.core.services import framework
from customzsh.core.services.dependencies import ensure_dependencies, required_capabilities
from customzsh.core.services.plugins import install_plugins
from customzsh.core.services.tool_resolver import HostProfile, detect_host, resolve_tool

logger = logging.getLogger(__name__)

DEPENDENCIES_STEP = "dependencies"
CONFIG_STEP = "config"
TOOL_STEP = "tool"
PLUGINS_STEP = "plugins"


def _record(report: InstallReport, results: list[StepResult]) -> None:
    for result in results:
        log_step_result(logger, result)
        report.steps.append(result)


def _abort(report: InstallReport, step: str, reason: str) -> InstallReport:
    result = StepResult.failed(step, reason, fatal=True)
    _record(report, [result])
    report.outcome = "aborted"
    report.aborted_step = step
    report.reason = reason
    return report


def _abort_step(report: InstallReport, error: StepError) -> InstallReport:
    _record(report, list(error.completed))
    return _abort(report, error.step, error.reason)


def _peek_configuration(path: Path) -> Configuration | None:
    """Configuration if it already loads, else None (step 2 reports why)."""
    try:
        return load_configuration(path)
    except ConfigError:
        return None


def _tool_step(resolution: ToolResolution) -> StepResult:
    if resolution.status == "present":
        label = f"eza {resolution.version}" if resolution.version else "eza"
        return StepResult.skipped(TOOL_STEP, f"{label} already installed")
    if resolution.status == "installed":
        return StepResult.performed(
            TOOL_STEP, f"eza {resolution.version} via {resolution.strategy}",
        )
    return StepResult.failed(TOOL_STEP, resolution.error)


def run_install(
    config_path: Path,
    paths: InstallPaths,
    registry: AdapterRegistry | None = None,
    host: HostProfile | None = None,
    is_root: Callable[[], bool] = _is_root,
    login_shell: Callable[[], str] = framework.current_login_shell,
) -> InstallReport:
    """Install or reconcile the zsh environment under ``paths.home``.

    Args:
        config_path: Location of config.yml (bootstrapped when missing).
        paths: Resolved install paths.
        registry: Adapter registry; the real one when omitted.
        host: Pre-detected host profile (tests); detected when omitted.
        is_root: Whether privilege elevation is implicit.
        login_shell: Returns the user's current login shell.

    Returns:
        InstallReport. Never raises for step failures.
    """
    if registry is None:
        registry = default_registry()

    report = InstallReport(config_path=str(config_path))
    logger.info("Installing into %s (config %s)", paths.home, config_path)

    # ── 1. Dependencies ─────────────────────────────────────────
    log_step_start(logger, DEPENDENCIES_STEP)
    required = required_capabilities(_peek_configuration(config_path))
    try:
        deps = ensure_dependencies(required, registry, is_root=is_root)
    except StepError as e:
        return _abort_step(report, e)
    # read-only check, never "performed"
    _record(report, [StepResult.skipped(DEPENDENCIES_STEP, f"all present: {', '.join(deps.checked)}")])

    # ── 2. Configuration ────────────────────────────────────────
    log_step_start(logger, CONFIG_STEP)
    try:
        config = load_configuration(config_path)
    except ConfigMissing:
        try:
            bootstrap_configuration(config_path)
        except OSError as e:
            return _abort(report, CONFIG_STEP, f"cannot write default configuration: {e}")
        _record(report, [StepResult.performed(
            CONFIG_STEP, f"wrote default configuration to {config_path}; edit it and re-run",
        )])
        report.outcome = "bootstrapped"
        return report
    except ConfigMalformed as e:
        return _abort(report, CONFIG_STEP, str(e))
    _record(report, [StepResult.skipped(CONFIG_STEP, f"loaded {config_path}")])

    if host is None:
        host = detect_host(registry)

    try:
        # ── 3. Prerequisites ────────────────────────────────────
        log_step_start(logger, framework.PREREQUISITES_STEP)
        _record(report, [framework.install_prerequisites(registry, host.primary_pm)])

        # ── 4. Auxiliary tool (non-fatal) ───────────────────────
        log_step_start(logger, TOOL_STEP)
        report.tool = resolve_tool(config, registry, host=host)
        _record(report, [_tool_step(report.tool)])

        # ── 5. Framework ────────────────────────────────────────
        log_step_start(logger, framework.FRAMEWORK_STEP)
        _record(report, [framework.install_framework(paths, registry)])

        # ── 6. Plugins ──────────────────────────────────────────
        log_step_start(logger, PLUGINS_STEP)
        plugin_results = install_plugins(config, paths, registry)
        _record(report, plugin_results or [
            StepResult.skipped(PLUGINS_STEP, "no external plugins configured"),
        ])

        # ── 7. rc file ──────────────────────────────────────────
        log_step_start(logger, framework.RC_FILE_STEP)
        _record(report, framework.reconcile_rc_file(config, paths, registry))

        # ── 8. Default shell ────────────────────────────────────
        log_step_start(logger, framework.SHELL_STEP)
        _record(report, [framework.change_default_shell(registry, login_shell=login_shell)])

    except StepError as e:
        return _abort_step(report, e)

    report.outcome = "succeeded"
    logger.info("Install finished: %s", report.statuses())
    return report
