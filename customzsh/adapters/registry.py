"""
Adapter registry — the only way services reach an adapter.

Services call ``registry.dispatch("git", "clone", url=..., dest=...)``.
The registry looks the adapter up, validates the params, runs it and
hands back a Receipt. Whatever goes wrong (unknown adapter, bad params,
an adapter that raises anyway) comes back as a failed Receipt.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from customzsh.adapters.base import Adapter, ExecutionContext
from customzsh.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)

_MARKS = {"ok": "✓", "failed": "✗", "skipped": "⊘"}


class AdapterRegistry:
    """Adapters by name, plus validate-then-execute dispatch."""

    def __init__(self) -> None:
        self._adapters: dict[str, Adapter] = {}

    def register(self, adapter: Adapter) -> None:
        """Add ``adapter``; a later registration under the same name wins."""
        if adapter.name in self._adapters:
            logger.debug("Replacing adapter %s", adapter.name)
        self._adapters[adapter.name] = adapter

    def unregister(self, name: str) -> None:
        self._adapters.pop(name, None)

    def get(self, name: str) -> Adapter | None:
        return self._adapters.get(name)

    def list_adapters(self) -> list[str]:
        return list(self._adapters)

    def execute_action(self, action: Action) -> Receipt:
        """Validate and run ``action``. Never raises."""
        started = time.monotonic()

        adapter = self._adapters.get(action.adapter)
        if adapter is None:
            return Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"No adapter registered for '{action.adapter}'",
            )

        context = ExecutionContext(action=action, params=action.params)
        try:
            valid, reason = adapter.validate(context)
            receipt = adapter.execute(context) if valid else Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"Validation failed: {reason}",
            )
        except Exception as e:
            logger.error("Adapter %s raised on %s: %s", action.adapter, action.id, e)
            receipt = Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"Unexpected error: {e}",
            )

        receipt.duration_ms = int((time.monotonic() - started) * 1000)
        logger.debug("%s %s (%s) %dms", _MARKS[receipt.status], action.label, action.id,
                     receipt.duration_ms)
        return receipt

    def dispatch(
        self,
        adapter: str,
        operation: str,
        action_id: str | None = None,
        **params: Any,
    ) -> Receipt:
        """Build the Action from keyword params and execute it."""
        return self.execute_action(Action(
            id=action_id or f"{adapter}:{operation}",
            adapter=adapter,
            operation=operation,
            params=params,
        ))


def default_registry() -> AdapterRegistry:
    """Registry wired to the real filesystem, shell, git, HTTPS and package managers."""
    from customzsh.adapters.net.http import HttpAdapter
    from customzsh.adapters.packages.manager import PackageManagerAdapter
    from customzsh.adapters.shell.command import CommandAdapter
    from customzsh.adapters.shell.filesystem import FilesystemAdapter
    from customzsh.adapters.vcs.git import GitAdapter

    registry = AdapterRegistry()
    for adapter in (
        FilesystemAdapter(),
        CommandAdapter(),
        GitAdapter(),
        HttpAdapter(),
        PackageManagerAdapter(),
    ):
        registry.register(adapter)
    return registry
