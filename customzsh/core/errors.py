"""
Error taxonomy.

Adapters never raise; they return failed receipts. Services translate
a failed receipt into one of these exceptions when the failure is
fatal for their step, and the install orchestrator turns the exception
into an ``aborted`` report naming the step.
"""

from __future__ import annotations


class CustomZshError(Exception):
    """Base class for all customzsh errors."""


# ── Configuration ───────────────────────────────────────────────


class ConfigError(CustomZshError):
    """Raised when the user configuration cannot be used."""


class ConfigMissing(ConfigError):
    """The configuration file does not exist (triggers bootstrap)."""

    def __init__(self, path: object):
        self.path = path
        super().__init__(f"Config file not found: {path}")


class ConfigMalformed(ConfigError):
    """The configuration file exists but cannot be parsed or validated."""


# ── Step failures ───────────────────────────────────────────────


class StepError(CustomZshError):
    """A fatal failure inside one orchestrator step."""

    def __init__(self, step: str, reason: str):
        self.step = step
        self.reason = reason
        self.completed: list = []    # sub-step results finished before the failure
        super().__init__(f"{step}: {reason}")


class MissingDependency(StepError):
    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__(
            "dependencies",
            f"missing required capabilities: {', '.join(self.missing)}",
        )


class FetchFailed(StepError):
    """A network or source-control fetch failed."""


class CopyFailed(StepError):
    pass


class MoveFailed(StepError):
    pass


class PrivilegedOperationFailed(StepError):
    """A command run with privilege elevation failed."""


# ── Auxiliary tool ──────────────────────────────────────────────


class ToolInstallFailed(CustomZshError):
    """Installing the auxiliary tool failed (discovery or every strategy).

    ``attempts`` holds the StrategyAttempt records made before giving up.
    """

    def __init__(self, reason: str, attempts: list | None = None):
        self.reason = reason
        self.attempts = list(attempts or [])
        tried = ", ".join(a.name for a in self.attempts) or "none"
        super().__init__(f"tool install failed (tried: {tried}): {reason}")
