"""
Tests for the plugin installer.
"""

import pytest

from customzsh.core.config.paths import InstallPaths
from customzsh.core.errors import FetchFailed
from customzsh.core.models.config import Configuration
from customzsh.core.services.plugins import install_plugins, plugin_records
from tests.fakes import FakeHost


def _config(*plugins: str) -> Configuration:
    return Configuration(theme="t", external_plugins=plugins, builtin_plugins=(),
                         tool_version="latest")


class TestPluginRecords:
    def test_target_directory_is_last_segment(self, paths: InstallPaths):
        records = plugin_records(_config("zsh-users/zsh-autosuggestions"), paths)
        assert records[0].target_directory == str(paths.plugins_dir / "zsh-autosuggestions")
        assert records[0].url == "https://github.com/zsh-users/zsh-autosuggestions.git"

    def test_duplicates_kept(self, paths: InstallPaths):
        assert len(plugin_records(_config("a/x", "a/x"), paths)) == 2


class TestInstallPlugins:
    def test_clones_absent_in_order(self, host: FakeHost, paths: InstallPaths):
        results = install_plugins(_config("a/one", "b/two"), paths, host.registry())
        assert [r.status for r in results] == ["performed", "performed"]
        assert [url for url, _ in host.git.clones] == [
            "https://github.com/a/one.git",
            "https://github.com/b/two.git",
        ]
        assert host.fs.exists(paths.plugins_dir / "two")

    def test_present_is_skipped(self, host: FakeHost, paths: InstallPaths):
        host.fs.add_dir(paths.plugins_dir / "one")
        results = install_plugins(_config("a/one"), paths, host.registry())
        assert results[0].status == "skipped"
        assert host.git.clones == []

    def test_duplicate_skips_second_time(self, host: FakeHost, paths: InstallPaths):
        results = install_plugins(_config("a/one", "a/one"), paths, host.registry())
        assert [r.status for r in results] == ["performed", "skipped"]
        assert len(host.git.clones) == 1

    def test_first_failure_aborts(self, host: FakeHost, paths: InstallPaths):
        host.git.failing["https://github.com/b/two.git"] = "repository not found"
        with pytest.raises(FetchFailed) as exc:
            install_plugins(_config("a/one", "b/two", "c/three"), paths, host.registry())
        assert exc.value.step == "plugin:two"
        assert "repository not found" in exc.value.reason
        assert [r.step for r in exc.value.completed] == ["plugin:one"]
        # the earlier clone stays, the later one is never tried
        assert host.fs.exists(paths.plugins_dir / "one")
        assert len(host.git.clones) == 2

    def test_no_plugins(self, host: FakeHost, paths: InstallPaths):
        assert install_plugins(_config(), paths, host.registry()) == []
