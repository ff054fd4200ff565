"""
Action and Receipt — the adapter call contract.

Services describe one external call as an Action and get a Receipt
back. Adapters report every outcome through the Receipt; they never
raise into the service layer.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

ReceiptStatus = Literal["ok", "skipped", "failed"]


class Action(BaseModel):
    """One call: ``<adapter>.<operation>(**params)``."""

    id: str                         # e.g. "plugins:clone:zsh-autosuggestions"
    adapter: str
    operation: str = ""
    params: dict[str, Any] = Field(default_factory=dict)

    @property
    def label(self) -> str:
        return f"{self.adapter}:{self.operation}"


class Receipt(BaseModel):
    """What an adapter did.

    ``output`` carries the useful payload (file content, command
    stdout, response body); ``metadata`` carries structured facts such
    as ``found``/``path`` from ``which`` or ``data`` from ``get_json``.
    """

    adapter: str
    action_id: str
    status: ReceiptStatus = "ok"
    output: str = ""
    error: str | None = None
    duration_ms: int = 0
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @property
    def skipped(self) -> bool:
        return self.status == "skipped"

    @classmethod
    def success(cls, adapter: str, action_id: str, output: str = "", **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, output=output, **kwargs)

    @classmethod
    def failure(cls, adapter: str, action_id: str, error: str, **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, status="failed", error=error, **kwargs)

    @classmethod
    def skip(cls, adapter: str, action_id: str, reason: str = "", **kwargs: Any) -> Receipt:
        """Nothing to do; ``reason`` lands in ``output``."""
        return cls(adapter=adapter, action_id=action_id, status="skipped", output=reason, **kwargs)
