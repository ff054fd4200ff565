"""
Framework steps — shell prerequisites, Oh My Zsh, the rc file, login shell.

Each function is one orchestrator step: it probes first, returns a
``skipped`` StepResult when there is nothing to do, and raises a
StepError subclass when its action fails.
"""

from __future__ import annotations

import getpass
import logging
import os
import pwd
from collections.abc import Callable
from pathlib import Path

from customzsh.adapters.registry import AdapterRegistry
from customzsh.core.config.paths import InstallPaths
from customzsh.core.data import render_zshrc
from customzsh.core.errors import CopyFailed, FetchFailed, PrivilegedOperationFailed
from customzsh.core.models.config import Configuration
from customzsh.core.models.report import StepResult
from customzsh.core.models.state import ComponentState
from customzsh.core.services import probe as probes
from customzsh.core.services.backup import ensure_backup

logger = logging.getLogger(__name__)

PREREQUISITES_STEP = "prerequisites"
FRAMEWORK_STEP = "framework"
RC_FILE_STEP = "rc-file"
SHELL_STEP = "default-shell"

INSTALLER_URL = "https://raw.githubusercontent.com/ohmyzsh/ohmyzsh/master/tools/install.sh"

# command-not-found only exists as a separate package on Debian/Ubuntu
_PREREQUISITES: dict[str, list[str]] = {
    "apt": ["zsh", "zsh-doc", "git", "curl", "command-not-found"],
}
_DEFAULT_PREREQUISITES = ["zsh", "git", "curl"]


def prerequisite_packages(pm: str) -> list[str]:
    return list(_PREREQUISITES.get(pm, _DEFAULT_PREREQUISITES))


# ── Step 3: prerequisites ───────────────────────────────────────


def install_prerequisites(registry: AdapterRegistry, primary_pm: str | None) -> StepResult:
    """Install zsh (and friends) unless zsh is already on PATH.

    Raises:
        PrivilegedOperationFailed: No package manager, or the install failed.
    """
    if probes.probe(probes.binary("zsh", "zsh"), registry) is ComponentState.PRESENT:
        return StepResult.skipped(PREREQUISITES_STEP, "zsh already installed")

    if primary_pm is None:
        raise PrivilegedOperationFailed(
            PREREQUISITES_STEP, "zsh is missing and no supported package manager was found",
        )

    packages = prerequisite_packages(primary_pm)
    refresh = registry.dispatch(
        "packages", "refresh", action_id="prerequisites:refresh", manager=primary_pm,
    )
    if refresh.failed:
        logger.warning("%s index refresh failed: %s", primary_pm, refresh.error)
    receipt = registry.dispatch(
        "packages", "install", action_id="prerequisites:install",
        manager=primary_pm, packages=packages,
    )
    if not receipt.ok:
        reason = f"{primary_pm} install {' '.join(packages)} failed: {receipt.error}"
        if refresh.failed:
            reason += f" (index refresh also failed: {refresh.error})"
        raise PrivilegedOperationFailed(PREREQUISITES_STEP, reason)
    return StepResult.performed(PREREQUISITES_STEP, f"installed {', '.join(packages)}")


# ── Step 5: framework ───────────────────────────────────────────


def install_framework(paths: InstallPaths, registry: AdapterRegistry) -> StepResult:
    """Run the upstream unattended installer unless the root exists.

    The installer writes its own ~/.zshrc when none exists; that file
    is ours, not the user's, so it is removed again to keep the
    backup/restore pair meaningful.

    Raises:
        FetchFailed: Downloading or running the installer failed.
    """
    state = probes.snapshot(
        [
            probes.directory("framework", paths.framework_root),
            probes.file("rc", paths.rc_file),
        ],
        registry,
    )
    if state.is_present("framework"):
        return StepResult.skipped(FRAMEWORK_STEP, f"already present at {paths.framework_root}")

    script = registry.dispatch("http", "get_text", action_id="framework:download", url=INSTALLER_URL)
    if not script.ok:
        raise FetchFailed(FRAMEWORK_STEP, f"downloading the installer failed: {script.error}")

    receipt = registry.dispatch(
        "command", "run", action_id="framework:install",
        cmd=["sh", "-s", "--", "--unattended"],
        input=script.output,
        env={
            "HOME": str(paths.home),
            "ZSH": str(paths.framework_root),
            "RUNZSH": "no",
            "CHSH": "no",
            "KEEP_ZSHRC": "yes",
        },
    )
    if not receipt.ok:
        raise FetchFailed(FRAMEWORK_STEP, f"installer failed: {receipt.error}")

    if not state.is_present("rc"):
        registry.dispatch("filesystem", "remove_tree", action_id="framework:drop-rc",
                          path=str(paths.rc_file))

    return StepResult.performed(FRAMEWORK_STEP, f"installed into {paths.framework_root}")


# ── Step 7: rc file ─────────────────────────────────────────────


def reconcile_rc_file(
    config: Configuration,
    paths: InstallPaths,
    registry: AdapterRegistry,
) -> list[StepResult]:
    """Replace ~/.zshrc with the rendered template, backing up once.

    Returns the backup sub-step (when one ran) followed by this step.

    Raises:
        MoveFailed: The backup move failed.
        CopyFailed: Writing the rendered template failed.
    """
    rendered = render_zshrc(config)
    current = probes.probe(probes.content(RC_FILE_STEP, paths.rc_file, rendered), registry)
    if current is ComponentState.PRESENT:
        return [StepResult.skipped(RC_FILE_STEP, "already up to date")]

    results = [ensure_backup(paths.backup_record, registry)]

    receipt = registry.dispatch(
        "filesystem", "write", action_id="rc-file:write",
        path=str(paths.rc_file), content=rendered,
    )
    if not receipt.ok:
        raise CopyFailed(RC_FILE_STEP, f"writing {paths.rc_file} failed: {receipt.error}")

    results.append(StepResult.performed(RC_FILE_STEP, f"wrote {paths.rc_file}"))
    return results


# ── Step 8: default shell ───────────────────────────────────────


def current_login_shell() -> str:
    """Login shell from the password database, falling back to $SHELL."""
    try:
        return pwd.getpwuid(os.getuid()).pw_shell
    except KeyError:
        return os.environ.get("SHELL", "")


def change_default_shell(
    registry: AdapterRegistry,
    login_shell: Callable[[], str] = current_login_shell,
    user: str | None = None,
) -> StepResult:
    """Make zsh the login shell.

    Raises:
        PrivilegedOperationFailed: zsh missing or chsh failed.
    """
    if Path(login_shell()).name == "zsh":
        return StepResult.skipped(SHELL_STEP, "zsh is already the login shell")

    which = registry.dispatch("command", "which", action_id="default-shell:which", binary="zsh")
    zsh_path = which.metadata.get("path") if which.ok else None
    if not zsh_path:
        raise PrivilegedOperationFailed(SHELL_STEP, "zsh not found on PATH")

    user = user or getpass.getuser()
    receipt = registry.dispatch(
        "command", "run", action_id="default-shell:chsh",
        cmd=["chsh", "-s", zsh_path, user], sudo=True,
    )
    if not receipt.ok:
        raise PrivilegedOperationFailed(SHELL_STEP, f"chsh failed: {receipt.error}")
    return StepResult.performed(SHELL_STEP, f"login shell set to {zsh_path}")
