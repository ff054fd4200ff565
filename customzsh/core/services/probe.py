"""
State prober — classify sub-components as present or absent.

The filesystem is the only state store. ``probe`` is a pure query
against the adapter registry, so tests can hand it an in-memory
filesystem instead of the real home directory.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from customzsh.adapters.registry import AdapterRegistry
from customzsh.core.models.state import (
    ComponentDescriptor,
    ComponentKind,
    ComponentState,
    InstallationState,
)

logger = logging.getLogger(__name__)


def _present(flag: bool) -> ComponentState:
    return ComponentState.PRESENT if flag else ComponentState.ABSENT


def probe(descriptor: ComponentDescriptor, registry: AdapterRegistry) -> ComponentState:
    """Return PRESENT or ABSENT for one descriptor.

    A failed receipt (adapter error, unreadable file) counts as ABSENT:
    the caller will then try to act and surface the real error.
    """
    action_id = f"probe:{descriptor.label}"

    if descriptor.kind is ComponentKind.BINARY:
        receipt = registry.dispatch(
            "command", "which", action_id=action_id, binary=descriptor.path,
        )
        state = _present(receipt.ok and bool(receipt.metadata.get("found")))

    elif descriptor.kind is ComponentKind.CONTENT:
        receipt = registry.dispatch(
            "filesystem", "read", action_id=action_id, path=descriptor.path,
        )
        state = _present(receipt.ok and receipt.output == descriptor.expected)

    else:
        receipt = registry.dispatch(
            "filesystem", "exists", action_id=action_id, path=descriptor.path,
        )
        state = _present(receipt.ok and bool(receipt.metadata.get("exists")))

    logger.debug("probe %s (%s %s) → %s", descriptor.label, descriptor.kind.value,
                 descriptor.path, state.value)
    return state


def snapshot(
    descriptors: Iterable[ComponentDescriptor],
    registry: AdapterRegistry,
) -> InstallationState:
    """Probe every descriptor into one InstallationState."""
    return InstallationState(
        components={d.label: probe(d, registry) for d in descriptors},
    )


def directory(label: str, path: object) -> ComponentDescriptor:
    return ComponentDescriptor(label=label, path=str(path), kind=ComponentKind.DIRECTORY)


def file(label: str, path: object) -> ComponentDescriptor:
    return ComponentDescriptor(label=label, path=str(path), kind=ComponentKind.FILE)


def binary(label: str, name: str) -> ComponentDescriptor:
    return ComponentDescriptor(label=label, path=name, kind=ComponentKind.BINARY)


def content(label: str, path: object, expected: str) -> ComponentDescriptor:
    return ComponentDescriptor(
        label=label, path=str(path), kind=ComponentKind.CONTENT, expected=expected,
    )
