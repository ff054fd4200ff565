"""
Command adapter — run programs and look them up on the search path.

Action params:
    run:   cmd (list[str]), sudo (bool), env (dict), timeout (int),
           cwd (str), input (str)
    which: binary (str)
"""

from __future__ import annotations

import logging
import shutil

from customzsh.adapters.base import Adapter, ExecutionContext
from customzsh.adapters.shell.runner import DEFAULT_TIMEOUT, run_subprocess
from customzsh.core.models.action import Receipt

logger = logging.getLogger(__name__)


class CommandAdapter(Adapter):
    """Execute commands and capture output."""

    operations = frozenset({"run", "which"})
    required_params = {"run": ("cmd",), "which": ("binary",)}

    @property
    def name(self) -> str:
        return "command"

    def is_available(self) -> bool:
        return shutil.which("sh") is not None

    def execute(self, context: ExecutionContext) -> Receipt:
        if context.operation == "which":
            return self._which(context)
        return self._run(context)

    def _which(self, ctx: ExecutionContext) -> Receipt:
        binary = ctx.params["binary"]
        path = shutil.which(binary)
        return Receipt.success(
            adapter=self.name,
            action_id=ctx.action.id,
            output=path or "",
            metadata={"binary": binary, "found": path is not None, "path": path},
        )

    def _run(self, ctx: ExecutionContext) -> Receipt:
        cmd = list(ctx.params["cmd"])
        result = run_subprocess(
            cmd,
            needs_sudo=ctx.params.get("sudo", False),
            timeout=ctx.params.get("timeout", DEFAULT_TIMEOUT),
            env_overrides=ctx.params.get("env"),
            cwd=ctx.params.get("cwd"),
            input_text=ctx.params.get("input"),
        )
        if result["ok"]:
            return Receipt.success(
                adapter=self.name,
                action_id=ctx.action.id,
                output=result.get("stdout", "").strip(),
                metadata={"command": cmd},
            )
        return Receipt.failure(
            adapter=self.name,
            action_id=ctx.action.id,
            error=result["error"],
            metadata={
                "command": cmd,
                "needs_sudo": result.get("needs_sudo", False),
                "stdout": result.get("stdout", ""),
            },
        )
