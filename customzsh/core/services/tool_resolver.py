"""
Tool fallback resolver — install eza across heterogeneous hosts.

Resolution order:
  1. Short-circuit: the requested version is already installed
     (``latest``: the binary is on PATH at all).
  2. ``latest`` only: discover the current release tag from GitHub.
  3. Walk the ordered strategy list until one succeeds:

       apt host:    apt-default → apt-gierens → apt-ppa → cargo
       other hosts: <pm>        → cargo
       no pm:       cargo

     ``apt-gierens`` adds the signed deb.gierens.de repository;
     ``apt-ppa`` adds the eza-community PPA. This order decides which
     signing key ends up trusted on a host; keep it.

Exhausting the list is NOT fatal to the install run: eza is an
enhancement. ``resolve_tool`` always returns a ToolResolution.

Version equality is substring containment of the requested tag in
``eza --version`` output, not semantic-version comparison.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from customzsh.adapters.registry import AdapterRegistry
from customzsh.core.errors import ToolInstallFailed
from customzsh.core.models.action import Receipt
from customzsh.core.models.config import Configuration
from customzsh.core.models.report import StrategyAttempt, ToolResolution

logger = logging.getLogger(__name__)

TOOL = "eza"
TOOL_REPO = "eza-community/eza"
RELEASES_URL = f"https://api.github.com/repos/{TOOL_REPO}/releases/latest"

# Probed in this order; the first one found is the host's primary manager
PACKAGE_MANAGERS = ("apt", "dnf", "pacman", "zypper", "brew")

# ── Third-party apt repositories ────────────────────────────────

GIERENS_KEY_URL = "https://raw.githubusercontent.com/eza-community/eza/main/deb.asc"
GIERENS_KEYRING = "/etc/apt/keyrings/gierens.gpg"
GIERENS_LIST = "/etc/apt/sources.list.d/gierens.list"
GIERENS_SOURCE = f"deb [signed-by={GIERENS_KEYRING}] http://deb.gierens.de stable main\n"

EZA_PPA = "ppa:eza-community/eza"

_VERSION_RE = re.compile(r"v?(\d+\.\d+\.\d+)")


@dataclass(frozen=True)
class HostProfile:
    """Packaging capabilities detected on this host."""

    primary_pm: str | None = None
    has_cargo: bool = False


@dataclass(frozen=True)
class FallbackStrategy:
    """One named attempt: run ``action`` if ``precondition`` holds."""

    name: str
    precondition: Callable[[], bool]
    action: Callable[[], Receipt]


# ── Probes ──────────────────────────────────────────────────────


def _which(registry: AdapterRegistry, binary: str) -> bool:
    receipt = registry.dispatch(
        "command", "which", action_id=f"tool:which:{binary}", binary=binary,
    )
    return receipt.ok and bool(receipt.metadata.get("found"))


def detect_host(registry: AdapterRegistry) -> HostProfile:
    """Detect the primary package manager by capability, not OS name."""
    primary = next((pm for pm in PACKAGE_MANAGERS if _which(registry, pm)), None)
    host = HostProfile(primary_pm=primary, has_cargo=_which(registry, "cargo"))
    logger.debug("Host profile: %s", host)
    return host


def installed_version_output(registry: AdapterRegistry) -> str | None:
    """Raw ``eza --version`` output, or None when eza is not runnable."""
    if not _which(registry, TOOL):
        return None
    receipt = registry.dispatch(
        "command", "run", action_id="tool:version", cmd=[TOOL, "--version"], timeout=10,
    )
    return receipt.output if receipt.ok else None


def version_matches(output: str, requested: str) -> bool:
    """Containment test between version output and the requested tag.

    ``v0.18.0`` also matches output that prints ``0.18.0``.
    """
    if requested in output:
        return True
    return requested.startswith("v") and requested[1:] in output


def parse_version(output: str | None) -> str | None:
    if not output:
        return None
    match = _VERSION_RE.search(output)
    return f"v{match.group(1)}" if match else None


def discover_latest_version(registry: AdapterRegistry) -> str:
    """Latest release tag from the GitHub API.

    Raises:
        ToolInstallFailed: Request failed, or ``tag_name`` missing/null.
    """
    receipt = registry.dispatch(
        "http", "get_json", action_id="tool:discover",
        url=RELEASES_URL,
        headers={"Accept": "application/vnd.github+json"},
    )
    if not receipt.ok:
        raise ToolInstallFailed(f"version discovery failed: {receipt.error}")
    data = receipt.metadata.get("data")
    tag = data.get("tag_name") if isinstance(data, dict) else None
    if not isinstance(tag, str) or not tag.strip():
        raise ToolInstallFailed("version discovery failed: no tag_name in release metadata")
    return tag.strip()


# ── Strategy actions ────────────────────────────────────────────


def _chain(registry: AdapterRegistry, name: str, steps: list[tuple[str, str, dict[str, Any]]]) -> Receipt:
    """Run adapter calls in order; return the first failure or the last receipt."""
    receipt = Receipt.skip(adapter="tool", action_id=name, reason="empty chain")
    for i, (adapter, operation, params) in enumerate(steps):
        receipt = registry.dispatch(adapter, operation, action_id=f"tool:{name}:{i}", **params)
        if receipt.failed:
            return receipt
    return receipt


def _pm_install(pm: str) -> tuple[str, str, dict[str, Any]]:
    return ("packages", "install", {"manager": pm, "packages": [TOOL]})


def _apt_refresh() -> tuple[str, str, dict[str, Any]]:
    return ("packages", "refresh", {"manager": "apt"})


def _apt_gierens(registry: AdapterRegistry) -> Receipt:
    key = registry.dispatch("http", "get_text", action_id="tool:apt-gierens:key", url=GIERENS_KEY_URL)
    if not key.ok:
        return key
    return _chain(registry, "apt-gierens", [
        ("command", "run", {"cmd": ["install", "-d", "-m", "0755", "/etc/apt/keyrings"], "sudo": True}),
        ("command", "run", {"cmd": ["gpg", "--dearmor", "--yes", "-o", GIERENS_KEYRING],
                            "sudo": True, "input": key.output}),
        ("command", "run", {"cmd": ["tee", GIERENS_LIST], "sudo": True, "input": GIERENS_SOURCE}),
        ("command", "run", {"cmd": ["chmod", "644", GIERENS_KEYRING, GIERENS_LIST], "sudo": True}),
        _apt_refresh(),
        _pm_install("apt"),
    ])


def _apt_ppa(registry: AdapterRegistry) -> Receipt:
    steps: list[tuple[str, str, dict[str, Any]]] = []
    if not _which(registry, "add-apt-repository"):
        steps.append(("packages", "install",
                      {"manager": "apt", "packages": ["software-properties-common"]}))
    steps += [
        ("command", "run", {"cmd": ["add-apt-repository", "-y", EZA_PPA], "sudo": True}),
        _apt_refresh(),
        _pm_install("apt"),
    ]
    return _chain(registry, "apt-ppa", steps)


def _cargo_install(registry: AdapterRegistry, version: str | None) -> Receipt:
    cmd = ["cargo", "install", TOOL]
    if version:
        cmd += ["--version", version.lstrip("v")]
    return registry.dispatch("command", "run", action_id="tool:cargo", cmd=cmd, timeout=1800)


def build_strategies(
    host: HostProfile,
    registry: AdapterRegistry,
    version: str | None = None,
) -> list[FallbackStrategy]:
    """Ordered strategy list for this host.

    ``version`` pins the source build; package managers install whatever
    their repositories carry.
    """
    strategies: list[FallbackStrategy] = []
    pm = host.primary_pm

    if pm == "apt":
        strategies += [
            FallbackStrategy(
                "apt-default",
                precondition=lambda: True,
                action=lambda: _chain(registry, "apt-default", [_apt_refresh(), _pm_install("apt")]),
            ),
            FallbackStrategy(
                "apt-gierens",
                precondition=lambda: _which(registry, "gpg"),
                action=lambda: _apt_gierens(registry),
            ),
            FallbackStrategy(
                "apt-ppa",
                precondition=lambda: True,
                action=lambda: _apt_ppa(registry),
            ),
        ]
    elif pm is not None:
        strategies.append(
            FallbackStrategy(
                pm,
                precondition=lambda: True,
                action=lambda: _chain(registry, pm, [_pm_install(pm)]),
            )
        )

    strategies.append(
        FallbackStrategy(
            "cargo",
            precondition=lambda: host.has_cargo,
            action=lambda: _cargo_install(registry, version),
        )
    )
    return strategies


# ── Resolution ──────────────────────────────────────────────────


def run_strategies(
    strategies: list[FallbackStrategy],
    verify: Callable[[], str | None] | None = None,
) -> tuple[str, list[StrategyAttempt]]:
    """Try each strategy in order until one succeeds.

    ``verify`` runs after a successful action and returns an error when
    the result is still unacceptable (wrong version); that strategy then
    counts as failed and the next one is tried.

    Returns:
        (winning strategy name, attempts so far)

    Raises:
        ToolInstallFailed: Every strategy failed or was inapplicable.
    """
    attempts: list[StrategyAttempt] = []
    for strategy in strategies:
        if not strategy.precondition():
            logger.debug("Strategy %s not applicable on this host", strategy.name)
            continue
        logger.info("Installing %s via %s", TOOL, strategy.name)
        receipt = strategy.action()
        error = receipt.error or ""
        if receipt.ok:
            error = verify() if verify is not None else None
            if not error:
                attempts.append(StrategyAttempt(strategy.name, ok=True))
                return strategy.name, attempts
        logger.warning("%s install via %s failed: %s", TOOL, strategy.name, error)
        attempts.append(StrategyAttempt(strategy.name, ok=False, error=error))

    raise ToolInstallFailed("every install strategy failed", attempts)


def _check_pinned(registry: AdapterRegistry, requested: str) -> str | None:
    """Error text unless the eza now on PATH reports ``requested``."""
    output = installed_version_output(registry)
    if output is not None and version_matches(output, requested):
        return None
    found = parse_version(output) or "nothing"
    return f"installed {found}, wanted {requested}"


def resolve_tool(
    config: Configuration,
    registry: AdapterRegistry,
    host: HostProfile | None = None,
) -> ToolResolution:
    """Make sure eza is installed. Never raises."""
    requested = config.tool_version
    current = installed_version_output(registry)

    if current is not None:
        if config.wants_latest_tool:
            return ToolResolution(status="present", version=parse_version(current))
        if version_matches(current, requested):
            return ToolResolution(status="present", version=requested)
        logger.info("%s is installed but not at %s; reinstalling", TOOL, requested)

    try:
        target = discover_latest_version(registry) if config.wants_latest_tool else requested
    except ToolInstallFailed as e:
        return ToolResolution(
            status="failed",
            attempts=[StrategyAttempt("discover-version", ok=False, error=e.reason)],
            error=e.reason,
        )
    logger.info("Target %s version: %s", TOOL, target)

    if host is None:
        host = detect_host(registry)
    strategies = build_strategies(host, registry, version=target)
    verify = None if config.wants_latest_tool else lambda: _check_pinned(registry, requested)

    try:
        winner, attempts = run_strategies(strategies, verify=verify)
    except ToolInstallFailed as e:
        return ToolResolution(
            status="failed",
            attempts=e.attempts,
            error=str(e),
        )

    resolved = parse_version(installed_version_output(registry)) or target
    return ToolResolution(
        status="installed", strategy=winner, version=resolved, attempts=attempts,
    )
