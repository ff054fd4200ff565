"""
Domain models for customzsh.

All models are re-exported here for convenient access:

    from customzsh.core.models import Configuration, Receipt, InstallReport
"""

from customzsh.core.models.action import Action, Receipt
from customzsh.core.models.config import LATEST, Configuration
from customzsh.core.models.report import (
    InstallReport,
    StepResult,
    StrategyAttempt,
    ToolResolution,
    UninstallReport,
)
from customzsh.core.models.state import (
    BackupRecord,
    ComponentDescriptor,
    ComponentKind,
    ComponentState,
    InstallationState,
    PluginRecord,
)

__all__ = [
    # action.py
    "Action",
    "BackupRecord",
    "ComponentDescriptor",
    "ComponentKind",
    "ComponentState",
    # config.py
    "Configuration",
    "InstallReport",
    "InstallationState",
    "LATEST",
    "PluginRecord",
    "Receipt",
    # report.py
    "StepResult",
    "StrategyAttempt",
    "ToolResolution",
    "UninstallReport",
]
