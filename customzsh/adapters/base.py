"""
Adapter base — the protocol contract between services and the outside world.

Every external collaborator (filesystem, package manager, git, HTTPS,
plain commands) sits behind this interface. Services only talk to
adapters through the registry, never directly to tools.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

from customzsh.core.models.action import Action, Receipt


class ExecutionContext(BaseModel):
    """Everything an adapter needs to execute an action."""

    action: Action
    params: dict[str, Any] = Field(default_factory=dict)

    @property
    def operation(self) -> str:
        return self.action.operation


class Adapter(ABC):
    """Abstract base class for all adapters.

    Adapters perform external side effects and return receipts.
    They NEVER raise exceptions — failures are captured in the Receipt.

    To create a new adapter:
        1. Subclass Adapter
        2. Implement name, operations, is_available, execute
        3. Register it in the AdapterRegistry
    """

    #: Verbs this adapter understands. Checked by ``validate``.
    operations: frozenset[str] = frozenset()

    #: Params each verb requires. Checked by ``validate``.
    required_params: dict[str, tuple[str, ...]] = {}

    @property
    @abstractmethod
    def name(self) -> str:
        """The adapter identifier (e.g., 'filesystem', 'git', 'http')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this adapter's underlying tool is available.

        Should be fast and never raise.
        """

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        """Validate that the action can be executed.

        Returns:
            (is_valid, error_message). error_message is empty if valid.
        """
        operation = context.operation
        if not operation:
            return False, "Missing operation"
        if self.operations and operation not in self.operations:
            return False, (
                f"Unknown operation '{operation}'. "
                f"Valid: {', '.join(sorted(self.operations))}"
            )
        for param in self.required_params.get(operation, ()):
            if param not in context.params:
                return False, f"Missing required param: '{param}' for {operation}"
        return True, ""

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt:
        """Execute the action and return a receipt.

        MUST never raise exceptions. All failures are captured
        in the Receipt with status='failed'.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
