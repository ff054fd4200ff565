"""
Dependency validator — confirm external capabilities before any mutation.

Read-only probe. Runs first in every install so a doomed run never
leaves the home directory half-configured.

Capabilities are checked through the adapter registry: the adapter
that provides a capability must be registered and available, and any
extra binaries it shells out to must resolve on the search path.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from customzsh.adapters.registry import AdapterRegistry
from customzsh.adapters.shell.runner import is_root as _is_root
from customzsh.core.errors import MissingDependency
from customzsh.core.models.config import Configuration

logger = logging.getLogger(__name__)

SOURCE_CONTROL = "source-control"
HTTPS_FETCH = "https-fetch"
PRIVILEGE_ELEVATION = "privilege-elevation"
JSON_EXTRACTOR = "json-extractor"


@dataclass(frozen=True)
class Capability:
    name: str
    adapter: str
    operation: str | None = None          # adapter must support this verb
    binaries: tuple[str, ...] = ()        # all must resolve via `command which`
    satisfied_by_root: bool = False
    hint: str = ""


CAPABILITIES: dict[str, Capability] = {
    SOURCE_CONTROL: Capability(
        SOURCE_CONTROL, adapter="git", operation="clone",
        hint="install git",
    ),
    HTTPS_FETCH: Capability(
        HTTPS_FETCH, adapter="http", operation="get_text",
        hint="Python must be built with SSL support",
    ),
    PRIVILEGE_ELEVATION: Capability(
        PRIVILEGE_ELEVATION, adapter="command", binaries=("sudo",),
        satisfied_by_root=True, hint="install sudo or run as root",
    ),
    JSON_EXTRACTOR: Capability(
        JSON_EXTRACTOR, adapter="http", operation="get_json",
    ),
}


@dataclass
class DependencyReport:
    checked: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.missing

    def describe_missing(self) -> list[str]:
        out = []
        for name in self.missing:
            hint = CAPABILITIES[name].hint if name in CAPABILITIES else ""
            out.append(f"{name} ({hint})" if hint else name)
        return out


def required_capabilities(config: Configuration | None = None) -> list[str]:
    """Capabilities an install run needs.

    The JSON extractor is only needed to discover the latest tool
    release. Without a configuration yet (first run) it is assumed.
    """
    required = [SOURCE_CONTROL, HTTPS_FETCH, PRIVILEGE_ELEVATION]
    if config is None or config.wants_latest_tool:
        required.append(JSON_EXTRACTOR)
    return required


def _probe(cap: Capability, registry: AdapterRegistry, is_root: bool) -> bool:
    adapter = registry.get(cap.adapter)
    if adapter is None:
        return False
    try:
        if not adapter.is_available():
            return False
    except Exception:
        return False
    if cap.operation and adapter.operations and cap.operation not in adapter.operations:
        return False
    if cap.satisfied_by_root and is_root:
        return True
    for binary in cap.binaries:
        receipt = registry.dispatch(
            "command", "which", action_id=f"dependencies:which:{binary}", binary=binary,
        )
        if not (receipt.ok and receipt.metadata.get("found")):
            return False
    return True


def check_dependencies(
    required: Iterable[str],
    registry: AdapterRegistry,
    is_root: Callable[[], bool] = _is_root,
) -> DependencyReport:
    """Probe each required capability. No side effects."""
    report = DependencyReport()
    root = is_root()
    for name in required:
        report.checked.append(name)
        cap = CAPABILITIES.get(name)
        if cap is None or not _probe(cap, registry, root):
            logger.debug("Capability missing: %s", name)
            report.missing.append(name)
    return report


def ensure_dependencies(
    required: Iterable[str],
    registry: AdapterRegistry,
    is_root: Callable[[], bool] = _is_root,
) -> DependencyReport:
    """Like ``check_dependencies`` but raises ``MissingDependency``."""
    report = check_dependencies(required, registry, is_root=is_root)
    if not report.ok:
        raise MissingDependency(report.describe_missing())
    return report
