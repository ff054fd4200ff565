"""
Configuration model — what the user wants installed.

Loaded from config.yml once per run and passed explicitly to every
component. Frozen: nothing mutates it after load.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

LATEST = "latest"


class Configuration(BaseModel):
    """User-selected theme, plugin sets and tool version.

    ``external_plugins`` are ``owner/repo`` identifiers fetched from the
    remote host. ``builtin_plugins`` ship with the framework and only
    end up in the rendered plugin list. ``tool_version`` is either
    ``"latest"`` or a release tag such as ``"v0.18.0"``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    theme: str = Field(min_length=1)
    external_plugins: tuple[str, ...]
    builtin_plugins: tuple[str, ...]
    tool_version: str = Field(min_length=1)

    @field_validator("external_plugins")
    @classmethod
    def _check_identifiers(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        for ident in value:
            owner, _, repo = ident.partition("/")
            if not owner or not repo or "/" in repo:
                raise ValueError(f"plugin identifier must be 'owner/repo', got {ident!r}")
        return value

    @field_validator("tool_version")
    @classmethod
    def _strip_version(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("tool_version must not be blank")
        return value

    @property
    def wants_latest_tool(self) -> bool:
        return self.tool_version == LATEST

    @property
    def plugin_names(self) -> list[str]:
        """Builtin plugin names followed by external ones, as the shell sees them."""
        names = list(self.builtin_plugins)
        for ident in self.external_plugins:
            name = ident.rsplit("/", 1)[-1]
            if name not in names:
                names.append(name)
        return names
