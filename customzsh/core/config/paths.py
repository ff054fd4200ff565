"""
Install paths — every location customzsh reads or writes.

Built once at startup from the home directory (and ``$ZSH_CUSTOM``)
and passed explicitly to every service. Nothing else reads the
process environment to find paths.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from customzsh.core.models.state import BackupRecord

FRAMEWORK_DIR = ".oh-my-zsh"
RC_FILE = ".zshrc"
BACKUP_SUFFIX = ".pre-customzsh"


class InstallPaths(BaseModel):
    """Resolved paths under one home directory."""

    model_config = ConfigDict(frozen=True)

    home: Path
    framework_root: Path
    custom_dir: Path
    rc_file: Path
    backup_file: Path

    @property
    def plugins_dir(self) -> Path:
        return self.custom_dir / "plugins"

    @property
    def backup_record(self) -> BackupRecord:
        return BackupRecord(
            original_path=str(self.rc_file),
            backup_path=str(self.backup_file),
        )

    @classmethod
    def for_home(cls, home: Path | None = None, zsh_custom: str | None = None) -> InstallPaths:
        """Resolve paths for ``home``.

        ``zsh_custom`` defaults to ``$ZSH_CUSTOM``; when unset the custom
        directory lives inside the framework root.
        """
        home = (home or Path.home()).expanduser()
        framework_root = home / FRAMEWORK_DIR
        if zsh_custom is None:
            zsh_custom = os.environ.get("ZSH_CUSTOM")
        custom_dir = Path(zsh_custom).expanduser() if zsh_custom else framework_root / "custom"
        rc_file = home / RC_FILE
        return cls(
            home=home,
            framework_root=framework_root,
            custom_dir=custom_dir,
            rc_file=rc_file,
            backup_file=rc_file.with_name(rc_file.name + BACKUP_SUFFIX),
        )
