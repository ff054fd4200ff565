"""
Run reports — what the orchestrator and uninstaller did.

Every step produces exactly one StepResult. Reports aggregate them and
render to plain dicts for ``--json`` output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

StepStatus = Literal["performed", "skipped", "failed"]


@dataclass
class StepResult:
    """Outcome of one step (or one sub-step such as a single plugin)."""

    step: str
    status: StepStatus
    message: str = ""
    fatal: bool = False

    @classmethod
    def performed(cls, step: str, message: str = "") -> StepResult:
        return cls(step=step, status="performed", message=message)

    @classmethod
    def skipped(cls, step: str, message: str = "") -> StepResult:
        return cls(step=step, status="skipped", message=message)

    @classmethod
    def failed(cls, step: str, message: str, fatal: bool = False) -> StepResult:
        return cls(step=step, status="failed", message=message, fatal=fatal)

    def to_dict(self) -> dict:
        return {
            "step": self.step,
            "status": self.status,
            "message": self.message,
            "fatal": self.fatal,
        }


@dataclass
class StrategyAttempt:
    name: str
    ok: bool
    error: str = ""


@dataclass
class ToolResolution:
    """Outcome of the auxiliary-tool fallback resolver."""

    status: Literal["present", "installed", "failed"]
    strategy: str | None = None
    version: str | None = None
    attempts: list[StrategyAttempt] = field(default_factory=list)
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.status != "failed"

    @property
    def attempted(self) -> list[str]:
        return [a.name for a in self.attempts]

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "strategy": self.strategy,
            "version": self.version,
            "attempts": [
                {"name": a.name, "ok": a.ok, "error": a.error} for a in self.attempts
            ],
            "error": self.error,
        }


@dataclass
class InstallReport:
    """Result of one install run.

    ``outcome`` is ``succeeded`` or ``aborted``; ``bootstrapped`` marks
    the successful early exit after writing a default configuration.
    """

    outcome: Literal["succeeded", "aborted", "bootstrapped"] = "succeeded"
    steps: list[StepResult] = field(default_factory=list)
    aborted_step: str | None = None
    reason: str = ""
    config_path: str | None = None
    tool: ToolResolution | None = None

    @property
    def ok(self) -> bool:
        return self.outcome != "aborted"

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1

    def step(self, name: str) -> StepResult | None:
        for result in self.steps:
            if result.step == name:
                return result
        return None

    def statuses(self) -> dict[str, str]:
        return {r.step: r.status for r in self.steps}

    def to_dict(self) -> dict:
        return {
            "outcome": self.outcome,
            "aborted_step": self.aborted_step,
            "reason": self.reason,
            "config_path": self.config_path,
            "steps": [r.to_dict() for r in self.steps],
            "tool": self.tool.to_dict() if self.tool else None,
        }


@dataclass
class UninstallReport:
    """Result of one uninstall run. Best-effort: failures are recorded."""

    steps: list[StepResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not any(r.status == "failed" for r in self.steps)

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1

    def step(self, name: str) -> StepResult | None:
        for result in self.steps:
            if result.step == name:
                return result
        return None

    def to_dict(self) -> dict:
        return {
            "status": "ok" if self.ok else "failed",
            "steps": [r.to_dict() for r in self.steps],
        }
