"""
Shipped templates.

The templates live in ``customzsh/core/data/templates/`` and are
installed as package data:

    config.yml.example   default user configuration (bootstrap)
    zshrc.template       the managed ~/.zshrc

``zshrc.template`` uses ``__PLACEHOLDER__`` substitution:

    __ZSH_THEME__     the configured theme
    __ZSH_PLUGINS__   one plugin name per line, builtin first
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from customzsh.core.models.config import Configuration

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"

CONFIG_TEMPLATE = TEMPLATES_DIR / "config.yml.example"
ZSHRC_TEMPLATE = TEMPLATES_DIR / "zshrc.template"


@lru_cache(maxsize=None)
def read_template(path: Path) -> str:
    """Read a shipped template once per process."""
    logger.debug("Loading template %s", path)
    return path.read_text(encoding="utf-8")


def render_zshrc(config: Configuration, template: str | None = None) -> str:
    """Render the managed rc file for ``config``.

    Deterministic: the same configuration always renders byte-identical
    output, which is what makes the content comparison idempotent.
    """
    text = template if template is not None else read_template(ZSHRC_TEMPLATE)
    plugins = "\n".join(f"  {name}" for name in config.plugin_names)
    return (
        text
        .replace("__ZSH_THEME__", config.theme)
        .replace("__ZSH_PLUGINS__", plugins)
    )
