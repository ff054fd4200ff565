"""
Uninstall use case — remove the framework, restore the user's rc file.

Best-effort and repeatable: each step is recorded, a failed step does
not stop the next one, and a second run reports "nothing to remove" /
"nothing to restore". Only the framework root and the rc/backup pair
are touched; packages, the login shell and eza are left alone.
"""

from __future__ import annotations

import logging

from customzsh.adapters.registry import AdapterRegistry, default_registry
from customzsh.core.config.paths import InstallPaths
from customzsh.core.models.report import StepResult, UninstallReport
from customzsh.core.models.state import ComponentState
from customzsh.core.observability.logging_config import log_step_result, log_step_start
from customzsh.core.services import probe as probes
from customzsh.core.services.backup import RESTORE_STEP, restore_if_present

logger = logging.getLogger(__name__)

REMOVE_STEP = "remove-framework"


def remove_framework(paths: InstallPaths, registry: AdapterRegistry) -> StepResult:
    root = paths.framework_root
    if probes.probe(probes.directory("framework", root), registry) is ComponentState.ABSENT:
        return StepResult.skipped(REMOVE_STEP, "nothing to remove")

    receipt = registry.dispatch(
        "filesystem", "remove_tree", action_id="uninstall:remove", path=str(root),
    )
    if receipt.failed:
        return StepResult.failed(REMOVE_STEP, receipt.error or f"cannot remove {root}")
    return StepResult.performed(REMOVE_STEP, f"removed {root}")


def run_uninstall(
    paths: InstallPaths,
    registry: AdapterRegistry | None = None,
) -> UninstallReport:
    """Reverse the framework install. Never raises."""
    if registry is None:
        registry = default_registry()

    report = UninstallReport()
    logger.info("Uninstalling from %s", paths.home)

    log_step_start(logger, REMOVE_STEP)
    result = remove_framework(paths, registry)
    log_step_result(logger, result)
    report.steps.append(result)

    log_step_start(logger, RESTORE_STEP)
    result = restore_if_present(paths.backup_record, registry)
    log_step_result(logger, result)
    report.steps.append(result)

    return report
