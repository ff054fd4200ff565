"""
Installation state models.

There is no state file: the filesystem IS the state. These models
describe what to look at (descriptors) and what was seen (snapshots).
Snapshots are recomputed on every run and never persisted.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ComponentState(str, Enum):
    ABSENT = "absent"
    PRESENT = "present"


class ComponentKind(str, Enum):
    """How a descriptor's path is checked."""

    DIRECTORY = "directory"     # path exists
    FILE = "file"               # path exists
    BINARY = "binary"           # name resolves on the search path
    CONTENT = "content"         # file content equals ``expected``


class ComponentDescriptor(BaseModel):
    """A sub-component to probe: a path plus what it represents."""

    model_config = ConfigDict(frozen=True)

    label: str
    path: str
    kind: ComponentKind = ComponentKind.DIRECTORY
    expected: str | None = None    # only for CONTENT


class InstallationState(BaseModel):
    """Per-component snapshot computed by the state prober."""

    components: dict[str, ComponentState] = Field(default_factory=dict)

    def get(self, label: str) -> ComponentState:
        return self.components.get(label, ComponentState.ABSENT)

    def is_present(self, label: str) -> bool:
        return self.get(label) is ComponentState.PRESENT


class BackupRecord(BaseModel):
    """The single tracked backup/original pair."""

    model_config = ConfigDict(frozen=True)

    original_path: str
    backup_path: str


class PluginRecord(BaseModel):
    """An external plugin and the directory it is cloned into.

    The directory's existence is the only install signal.
    """

    model_config = ConfigDict(frozen=True)

    identifier: str
    target_directory: str
    host: str = "github.com"

    @property
    def name(self) -> str:
        return self.identifier.rsplit("/", 1)[-1]

    @property
    def url(self) -> str:
        return f"https://{self.host}/{self.identifier}.git"
