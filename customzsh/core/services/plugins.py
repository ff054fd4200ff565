"""
Plugin installer — reconcile configured external plugins with the disk.

Plugins are processed in configured order, one at a time. A present
target directory is skipped; an absent one is cloned. The first failed
clone aborts the whole run: a missing plugin breaks the shell in a way
the user would not notice until much later. Earlier clones are left
in place.
"""

from __future__ import annotations

import logging

from customzsh.adapters.registry import AdapterRegistry
from customzsh.core.config.paths import InstallPaths
from customzsh.core.errors import FetchFailed
from customzsh.core.models.config import Configuration
from customzsh.core.models.report import StepResult
from customzsh.core.models.state import ComponentState, PluginRecord
from customzsh.core.services import probe as probes

logger = logging.getLogger(__name__)

PLUGIN_HOST = "github.com"


def plugin_records(config: Configuration, paths: InstallPaths) -> list[PluginRecord]:
    """One record per configured identifier, duplicates included."""
    return [
        PluginRecord(
            identifier=ident,
            target_directory=str(paths.plugins_dir / ident.rsplit("/", 1)[-1]),
            host=PLUGIN_HOST,
        )
        for ident in config.external_plugins
    ]


def install_plugin(record: PluginRecord, registry: AdapterRegistry) -> StepResult:
    step = f"plugin:{record.name}"
    state = probes.probe(probes.directory(step, record.target_directory), registry)
    if state is ComponentState.PRESENT:
        return StepResult.skipped(step, f"already present at {record.target_directory}")

    logger.info("Cloning %s into %s", record.url, record.target_directory)
    receipt = registry.dispatch(
        "git", "clone", action_id=f"plugins:clone:{record.name}",
        url=record.url, dest=record.target_directory, depth=1,
    )
    if not receipt.ok:
        raise FetchFailed(step, f"cloning {record.url} failed: {receipt.error}")
    return StepResult.performed(step, f"cloned {record.identifier}")


def install_plugins(
    config: Configuration,
    paths: InstallPaths,
    registry: AdapterRegistry,
) -> list[StepResult]:
    """Install every configured external plugin, in order.

    Raises:
        FetchFailed: On the first clone that fails. ``completed`` on the
            exception holds the results of the plugins before it.
    """
    results: list[StepResult] = []
    for record in plugin_records(config, paths):
        try:
            results.append(install_plugin(record, registry))
        except FetchFailed as e:
            e.completed = results
            raise
    return results
