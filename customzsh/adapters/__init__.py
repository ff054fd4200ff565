"""Adapters — bindings for the external collaborators.

Public re-exports for convenient access.
"""

from customzsh.adapters.base import Adapter, ExecutionContext
from customzsh.adapters.registry import AdapterRegistry, default_registry

__all__ = [
    "Adapter",
    "AdapterRegistry",
    "ExecutionContext",
    "default_registry",
]
