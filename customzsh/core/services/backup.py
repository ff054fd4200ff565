"""
Backup/restore manager for the single tracked user file.

Install side: move the original aside exactly once. The backup path is
never overwritten, so a second install keeps the first backup intact.
Uninstall side: move the backup back over whatever is at the original
path, or report that there is nothing to restore.
"""

from __future__ import annotations

import logging

from customzsh.adapters.registry import AdapterRegistry
from customzsh.core.errors import MoveFailed
from customzsh.core.models.report import StepResult
from customzsh.core.models.state import BackupRecord, ComponentState
from customzsh.core.services import probe as probes

logger = logging.getLogger(__name__)

BACKUP_STEP = "backup"
RESTORE_STEP = "restore"


def ensure_backup(record: BackupRecord, registry: AdapterRegistry) -> StepResult:
    """Move original → backup when the original exists and no backup does.

    Raises:
        MoveFailed: The move itself failed.
    """
    state = probes.snapshot(
        [
            probes.file("original", record.original_path),
            probes.file("backup", record.backup_path),
        ],
        registry,
    )

    if state.is_present("backup"):
        return StepResult.skipped(BACKUP_STEP, f"already backed up at {record.backup_path}")
    if not state.is_present("original"):
        return StepResult.skipped(BACKUP_STEP, f"nothing to back up at {record.original_path}")

    receipt = registry.dispatch(
        "filesystem", "move", action_id="backup:move",
        path=record.original_path, dest=record.backup_path,
    )
    if not receipt.ok:
        raise MoveFailed(BACKUP_STEP, receipt.error or "move failed")

    logger.info("Backed up %s → %s", record.original_path, record.backup_path)
    return StepResult.performed(BACKUP_STEP, f"{record.original_path} → {record.backup_path}")


def restore_if_present(record: BackupRecord, registry: AdapterRegistry) -> StepResult:
    """Move backup → original, overwriting the original. Never raises."""
    if probes.probe(probes.file("backup", record.backup_path), registry) is ComponentState.ABSENT:
        return StepResult.skipped(RESTORE_STEP, "nothing to restore")

    receipt = registry.dispatch(
        "filesystem", "move", action_id="restore:move",
        path=record.backup_path, dest=record.original_path,
    )
    if not receipt.ok:
        return StepResult.failed(RESTORE_STEP, receipt.error or "move failed")

    logger.info("Restored %s from %s", record.original_path, record.backup_path)
    return StepResult.performed(RESTORE_STEP, f"restored {record.original_path}")
