"""
Filesystem adapter — the six file operations the installer needs.

Action params:
    path (str): Target path (all operations).
    content (str): Text to write (``write``).
    dest (str): Destination path (``copy``, ``move``).

Any OSError becomes a failed receipt.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from customzsh.adapters.base import Adapter, ExecutionContext
from customzsh.core.models.action import Receipt

logger = logging.getLogger(__name__)


class FilesystemAdapter(Adapter):
    """exists / read / write / copy / move / remove_tree on the real disk."""

    operations = frozenset({"exists", "read", "write", "copy", "move", "remove_tree"})
    required_params = {
        "exists": ("path",),
        "read": ("path",),
        "write": ("path", "content"),
        "copy": ("path", "dest"),
        "move": ("path", "dest"),
        "remove_tree": ("path",),
    }

    @property
    def name(self) -> str:
        return "filesystem"

    def is_available(self) -> bool:
        return True

    def execute(self, context: ExecutionContext) -> Receipt:
        target = Path(context.params["path"]).expanduser()
        handler = getattr(self, f"_{context.operation}")
        try:
            return handler(context, target)
        except OSError as e:
            return self._fail(context, f"Filesystem error: {e}", path=str(target))

    # ── Receipts ────────────────────────────────────────────────

    def _ok(self, ctx: ExecutionContext, output: str = "", **metadata) -> Receipt:
        return Receipt.success(adapter=self.name, action_id=ctx.action.id,
                               output=output, metadata=metadata)

    def _fail(self, ctx: ExecutionContext, error: str, **metadata) -> Receipt:
        return Receipt.failure(adapter=self.name, action_id=ctx.action.id,
                               error=error, metadata=metadata)

    # ── Operations ──────────────────────────────────────────────

    def _exists(self, ctx: ExecutionContext, target: Path) -> Receipt:
        exists = target.exists()
        return self._ok(ctx, str(exists), exists=exists, is_dir=exists and target.is_dir())

    def _read(self, ctx: ExecutionContext, target: Path) -> Receipt:
        if not target.is_file():
            return self._fail(ctx, f"File not found: {target}")
        return self._ok(ctx, target.read_text(encoding="utf-8"), path=str(target))

    def _write(self, ctx: ExecutionContext, target: Path) -> Receipt:
        content = ctx.params["content"]
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        logger.debug("Wrote %d bytes to %s", len(content), target)
        return self._ok(ctx, f"Wrote {target}", size=len(content))

    def _copy(self, ctx: ExecutionContext, target: Path) -> Receipt:
        dest = Path(ctx.params["dest"]).expanduser()
        if not target.is_file():
            return self._fail(ctx, f"File not found: {target}")
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(target, dest)
        return self._ok(ctx, f"Copied {target} → {dest}")

    def _move(self, ctx: ExecutionContext, target: Path) -> Receipt:
        dest = Path(ctx.params["dest"]).expanduser()
        if not target.exists():
            return self._fail(ctx, f"Path not found: {target}")
        # a file at dest is replaced; a directory never is
        if dest.is_file() or dest.is_symlink():
            dest.unlink()
        shutil.move(str(target), str(dest))
        return self._ok(ctx, f"Moved {target} → {dest}")

    def _remove_tree(self, ctx: ExecutionContext, target: Path) -> Receipt:
        if not (target.exists() or target.is_symlink()):
            return Receipt.skip(adapter=self.name, action_id=ctx.action.id,
                                reason=f"Nothing to remove at {target}")
        if target.is_dir() and not target.is_symlink():
            shutil.rmtree(target)
        else:
            target.unlink()
        return self._ok(ctx, f"Removed {target}")
