"""
Configuration loader — reads config.yml into a Configuration.

Reads YAML, validates against the pydantic model and returns a frozen
value. Loading is a pure read: the file is never modified.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

import yaml
from pydantic import ValidationError

from customzsh.core.data import CONFIG_TEMPLATE
from customzsh.core.errors import ConfigMalformed, ConfigMissing
from customzsh.core.models.config import Configuration

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = "customzsh"
CONFIG_FILE = "config.yml"


def default_config_path(home: Path | None = None) -> Path:
    """``$XDG_CONFIG_HOME/customzsh/config.yml``, or under ``~/.config``.

    An explicit ``home`` ignores ``$XDG_CONFIG_HOME``.
    """
    xdg = os.environ.get("XDG_CONFIG_HOME") if home is None else None
    home = home or Path.home()
    base = Path(xdg) if xdg else home / ".config"
    return base / CONFIG_DIR_NAME / CONFIG_FILE


def load_configuration(path: Path) -> Configuration:
    """Load and validate the user configuration.

    Raises:
        ConfigMissing: The file does not exist.
        ConfigMalformed: The file cannot be read, parsed or validated.
    """
    if not path.exists():
        raise ConfigMissing(path)
    if not path.is_file():
        raise ConfigMalformed(f"Config path is not a file: {path}")

    logger.debug("Loading configuration from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigMalformed(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigMalformed(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigMalformed(
            f"Expected a YAML mapping in {path}, got {type(data).__name__}"
        )

    try:
        config = Configuration.model_validate(data)
    except ValidationError as e:
        raise ConfigMalformed(f"Invalid configuration in {path}: {e}") from e

    logger.info(
        "Loaded configuration: theme=%s, %d external plugins, tool=%s",
        config.theme,
        len(config.external_plugins),
        config.tool_version,
    )
    return config


def bootstrap_configuration(path: Path, template: Path = CONFIG_TEMPLATE) -> Path:
    """Write the default configuration to ``path``.

    Only called when the file is missing; never overwrites.
    """
    if path.exists():
        raise FileExistsError(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(template, path)
    logger.info("Wrote default configuration to %s", path)
    return path
