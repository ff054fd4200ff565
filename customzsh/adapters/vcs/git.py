"""
Git adapter — source-control fetch.

Clones remote repositories into local directories. Uses the git CLI,
never raw API calls.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

from customzsh.adapters.base import Adapter, ExecutionContext
from customzsh.core.models.action import Receipt

logger = logging.getLogger(__name__)


class GitAdapter(Adapter):
    """Git source-control operations.

    Action params:
        url (str): Remote repository URL (``clone``).
        dest (str): Target directory (``clone``).
        depth (int): Shallow clone depth (``clone``, default: full history).
        timeout (int): Timeout in seconds (default: 300).
    """

    operations = frozenset({"clone"})
    required_params = {"clone": ("url", "dest")}

    @property
    def name(self) -> str:
        return "git"

    def is_available(self) -> bool:
        return shutil.which("git") is not None

    def execute(self, context: ExecutionContext) -> Receipt:
        try:
            return self._clone(context)
        except subprocess.TimeoutExpired as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"git timed out after {e.timeout}s",
            )
        except (OSError, RuntimeError) as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Git error: {e}",
            )

    # ── Operations ──────────────────────────────────────────────

    def _clone(self, ctx: ExecutionContext) -> Receipt:
        url = ctx.params["url"]
        dest = Path(ctx.params["dest"]).expanduser()
        depth = ctx.params.get("depth")
        timeout = ctx.params.get("timeout", 300)

        args = ["clone", "--quiet"]
        if depth:
            args += ["--depth", str(depth)]
        args += [url, str(dest)]

        dest.parent.mkdir(parents=True, exist_ok=True)
        self._git(args, timeout=timeout)
        return Receipt.success(
            adapter=self.name,
            action_id=ctx.action.id,
            output=f"Cloned {url} → {dest}",
            metadata={"url": url, "dest": str(dest)},
        )

    # ── Helpers ─────────────────────────────────────────────────

    def _git(self, args: list[str], cwd: str | None = None, timeout: int = 30) -> str:
        """Run a git command and return stdout."""
        result = subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
        if result.returncode != 0:
            raise RuntimeError(result.stderr.strip() or f"git {args[0]} failed")
        return result.stdout
