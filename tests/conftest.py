"""
Shared test fixtures and configuration.
"""

import textwrap
from pathlib import Path

import pytest

from customzsh.core.config.paths import InstallPaths
from customzsh.core.models.config import Configuration
from tests.fakes import FakeHost

CONFIG_YAML = textwrap.dedent("""\
    theme: robbyrussell
    external_plugins:
      - zsh-users/zsh-syntax-highlighting
      - zsh-users/zsh-autosuggestions
    builtin_plugins:
      - git
      - z
    tool_version: v0.18.0
""")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's own environment out of path resolution."""
    for var in ("ZSH_CUSTOM", "XDG_CONFIG_HOME", "CUSTOMZSH_LOG_LEVEL", "CUSTOMZSH_LOG_FILE"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def home(tmp_path: Path) -> Path:
    home = tmp_path / "home"
    home.mkdir()
    return home


@pytest.fixture
def paths(home: Path) -> InstallPaths:
    return InstallPaths.for_home(home)


@pytest.fixture
def config() -> Configuration:
    return Configuration(
        theme="robbyrussell",
        external_plugins=("zsh-users/zsh-syntax-highlighting", "zsh-users/zsh-autosuggestions"),
        builtin_plugins=("git", "z"),
        tool_version="v0.18.0",
    )


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.yml"
    path.write_text(CONFIG_YAML)
    return path


@pytest.fixture
def host() -> FakeHost:
    """Debian-like host with sudo, git and curl but no zsh yet."""
    return FakeHost().with_binaries("apt", "sudo", "git", "curl", "gpg")
