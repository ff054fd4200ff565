"""
Package-manager adapter — install packages through the host's manager.

Translates ``(manager, packages)`` into the concrete command line and
runs it with privilege elevation where the manager needs it.

Action params:
    manager (str): One of apt, dnf, pacman, zypper, brew.
    packages (list[str]): Package names (``install``).
    timeout (int): Timeout in seconds (default: 600).
"""

from __future__ import annotations

import logging
import shutil

from customzsh.adapters.base import Adapter, ExecutionContext
from customzsh.adapters.shell.runner import DEFAULT_TIMEOUT, run_subprocess
from customzsh.core.models.action import Receipt

logger = logging.getLogger(__name__)

SUPPORTED_MANAGERS = ("apt", "dnf", "pacman", "zypper", "brew")

# brew refuses to run as root
_NO_SUDO = frozenset({"brew"})


def build_install_cmd(packages: list[str], pm: str) -> list[str]:
    """Build a package-install command for a list of packages."""
    if pm == "apt":
        return ["apt-get", "install", "-y"] + packages
    if pm == "dnf":
        return ["dnf", "install", "-y"] + packages
    if pm == "zypper":
        return ["zypper", "--non-interactive", "install"] + packages
    if pm == "pacman":
        return ["pacman", "-S", "--noconfirm", "--needed"] + packages
    if pm == "brew":
        return ["brew", "install"] + packages
    raise ValueError(f"No install command for package manager '{pm}'")


def build_refresh_cmd(pm: str) -> list[str] | None:
    """Build the index-refresh command, or None when the manager has none."""
    if pm == "apt":
        return ["apt-get", "update"]
    if pm == "pacman":
        return ["pacman", "-Sy"]
    if pm == "zypper":
        return ["zypper", "--non-interactive", "refresh"]
    if pm == "brew":
        return ["brew", "update"]
    return None


class PackageManagerAdapter(Adapter):
    """Install packages or refresh package indexes."""

    operations = frozenset({"install", "refresh"})
    required_params = {"install": ("manager", "packages"), "refresh": ("manager",)}

    @property
    def name(self) -> str:
        return "packages"

    def is_available(self) -> bool:
        return any(shutil.which(pm) for pm in SUPPORTED_MANAGERS)

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        ok, msg = super().validate(context)
        if not ok:
            return ok, msg
        manager = context.params["manager"]
        if manager not in SUPPORTED_MANAGERS:
            return False, f"Unsupported package manager '{manager}'"
        if context.operation == "install" and not context.params["packages"]:
            return False, "No packages given"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        manager = context.params["manager"]
        if context.operation == "refresh":
            cmd = build_refresh_cmd(manager)
            if cmd is None:
                return Receipt.skip(
                    adapter=self.name,
                    action_id=context.action.id,
                    reason=f"{manager} has no separate refresh step",
                )
        else:
            cmd = build_install_cmd(list(context.params["packages"]), manager)

        result = run_subprocess(
            cmd,
            needs_sudo=manager not in _NO_SUDO,
            timeout=context.params.get("timeout", DEFAULT_TIMEOUT),
        )
        if result["ok"]:
            return Receipt.success(
                adapter=self.name,
                action_id=context.action.id,
                output=result.get("stdout", "").strip(),
                metadata={"manager": manager, "command": cmd},
            )
        return Receipt.failure(
            adapter=self.name,
            action_id=context.action.id,
            error=result["error"],
            metadata={
                "manager": manager,
                "command": cmd,
                "needs_sudo": result.get("needs_sudo", False),
            },
        )
