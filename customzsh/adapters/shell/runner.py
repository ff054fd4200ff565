"""
Core subprocess runner.

The SINGLE PLACE where ``subprocess.run`` is called by the adapters.
Privilege elevation, environment overrides, timeouts and error
capture are centralised here.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import time
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 600


def is_root() -> bool:
    """Whether the current process already has root privileges."""
    geteuid = getattr(os, "geteuid", None)
    return geteuid is not None and geteuid() == 0


def run_subprocess(
    cmd: list[str],
    *,
    needs_sudo: bool = False,
    timeout: int = DEFAULT_TIMEOUT,
    env_overrides: dict[str, str] | None = None,
    cwd: str | None = None,
    input_text: str | None = None,
) -> dict[str, Any]:
    """Run a subprocess command with privilege elevation and env support.

    sudo prompts (if any) go to the controlling terminal; nothing is
    piped to it.

    Args:
        cmd: Command list for ``subprocess.run()``.
        needs_sudo: Whether the command requires root.
        timeout: Seconds before ``TimeoutExpired``.
        env_overrides: Extra env vars for the child process.
        cwd: Working directory for the command.
        input_text: Data written to the child's stdin.

    Returns:
        ``{"ok": True, "stdout": "...", "elapsed_ms": N}`` on success,
        ``{"ok": False, "error": "...", ...}`` on failure.
    """
    if needs_sudo and not is_root():
        if shutil.which("sudo") is None:
            return {
                "ok": False,
                "needs_sudo": True,
                "error": "This step requires root and sudo is not available.",
            }
        cmd = ["sudo"] + cmd

    env = os.environ.copy()
    if env_overrides:
        env.update(env_overrides)

    logger.debug("Running: %s", " ".join(cmd))
    start = time.monotonic()
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
            input=input_text,
            env=env,
            cwd=cwd,
        )
        elapsed_ms = int((time.monotonic() - start) * 1000)

        if result.returncode == 0:
            return {
                "ok": True,
                "stdout": result.stdout[-2000:] if result.stdout else "",
                "elapsed_ms": elapsed_ms,
            }

        stderr = result.stderr[-2000:] if result.stderr else ""

        if needs_sudo and (
            "incorrect password" in stderr.lower()
            or "sorry" in stderr.lower()
        ):
            return {
                "ok": False,
                "needs_sudo": True,
                "error": f"Privilege elevation failed: {stderr.strip()}",
                "stderr": stderr,
            }

        return {
            "ok": False,
            "error": stderr.strip() or f"Command failed (exit {result.returncode})",
            "returncode": result.returncode,
            "stderr": stderr,
            "stdout": result.stdout[-2000:] if result.stdout else "",
            "elapsed_ms": elapsed_ms,
        }

    except subprocess.TimeoutExpired:
        return {"ok": False, "error": f"Command timed out ({timeout}s)"}
    except FileNotFoundError:
        return {"ok": False, "error": f"Command not found: {cmd[0]}"}
    except OSError as e:
        logger.exception("Subprocess error: %s", cmd)
        return {"ok": False, "error": str(e)}
