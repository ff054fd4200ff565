"""
Tests for the framework steps: prerequisites, Oh My Zsh, rc file, login shell.
"""

import logging
import pwd

import pytest

from customzsh.core.config.paths import InstallPaths
from customzsh.core.data import render_zshrc
from customzsh.core.errors import CopyFailed, FetchFailed, PrivilegedOperationFailed
from customzsh.core.models.config import Configuration
from customzsh.core.services.framework import (
    INSTALLER_URL,
    change_default_shell,
    current_login_shell,
    install_framework,
    install_prerequisites,
    prerequisite_packages,
    reconcile_rc_file,
)
from tests.fakes import FakeHost


class TestPrerequisites:
    def test_skipped_when_zsh_present(self, host: FakeHost):
        host.with_binaries("zsh")
        result = install_prerequisites(host.registry(), "apt")
        assert result.status == "skipped"
        assert host.packages.calls == []

    def test_installs_through_primary_manager(self, host: FakeHost):
        result = install_prerequisites(host.registry(), "apt")
        assert result.status == "performed"
        assert ("install", "apt", tuple(prerequisite_packages("apt"))) in host.packages.calls
        assert "command-not-found" in host.packages.installed
        assert "zsh" in host.binaries

    def test_non_apt_package_set(self):
        assert "command-not-found" not in prerequisite_packages("dnf")
        assert "zsh" in prerequisite_packages("pacman")

    def test_no_package_manager(self, host: FakeHost):
        with pytest.raises(PrivilegedOperationFailed, match="no supported package manager"):
            install_prerequisites(host.registry(), None)

    def test_install_failure(self, host: FakeHost):
        host.packages.fail("apt", "zsh")
        with pytest.raises(PrivilegedOperationFailed) as exc:
            install_prerequisites(host.registry(), "apt")
        assert exc.value.step == "prerequisites"

    def test_refresh_failure_is_logged(self, host: FakeHost, caplog):
        host.packages.fail("apt", "refresh")
        with caplog.at_level(logging.WARNING, logger="customzsh.core.services.framework"):
            result = install_prerequisites(host.registry(), "apt")
        assert result.status == "performed"
        assert "apt index refresh failed: sudo: a password is required" in caplog.text

    def test_refresh_failure_named_in_install_failure(self, host: FakeHost):
        host.packages.fail("apt", "refresh")
        host.packages.fail("apt", "zsh")
        with pytest.raises(PrivilegedOperationFailed) as exc:
            install_prerequisites(host.registry(), "apt")
        assert "Unable to locate package zsh" in exc.value.reason
        assert "index refresh also failed" in exc.value.reason


class TestFramework:
    def test_skipped_when_root_exists(self, host: FakeHost, paths: InstallPaths):
        host.fs.add_dir(paths.framework_root)
        result = install_framework(paths, host.registry())
        assert result.status == "skipped"
        assert host.http.requests == []

    def test_runs_unattended_installer(self, host: FakeHost, paths: InstallPaths):
        host.http.text[INSTALLER_URL] = "#!/bin/sh\necho install\n"
        result = install_framework(paths, host.registry())
        assert result.status == "performed"
        run = host.command.runs[0]
        assert run["cmd"] == ["sh", "-s", "--", "--unattended"]
        assert run["input"] == "#!/bin/sh\necho install\n"
        assert run["env"]["RUNZSH"] == "no"
        assert run["env"]["CHSH"] == "no"
        assert run["env"]["KEEP_ZSHRC"] == "yes"
        assert run["env"]["ZSH"] == str(paths.framework_root)
        assert host.fs.exists(paths.framework_root)

    def test_installer_rc_dropped_when_user_had_none(self, host: FakeHost, paths: InstallPaths):
        host.http.text[INSTALLER_URL] = "script"
        host.installer_writes_rc = True
        install_framework(paths, host.registry())
        assert not host.fs.exists(paths.rc_file)

    def test_user_rc_kept(self, host: FakeHost, paths: InstallPaths):
        host.http.text[INSTALLER_URL] = "script"
        host.installer_writes_rc = True
        host.fs.add_file(paths.rc_file, "mine")
        install_framework(paths, host.registry())
        assert host.fs.read(paths.rc_file) == "mine"

    def test_download_failure(self, host: FakeHost, paths: InstallPaths):
        with pytest.raises(FetchFailed, match="downloading the installer"):
            install_framework(paths, host.registry())

    def test_installer_failure(self, host: FakeHost, paths: InstallPaths):
        host.http.text[INSTALLER_URL] = "script"
        host.command.fail("sh -s", "curl: (6) Could not resolve host")
        with pytest.raises(FetchFailed, match="Could not resolve host"):
            install_framework(paths, host.registry())


class TestRcFile:
    def test_writes_and_backs_up(self, host: FakeHost, paths: InstallPaths, config: Configuration):
        host.fs.add_file(paths.rc_file, "user rc")
        results = reconcile_rc_file(config, paths, host.registry())
        assert [(r.step, r.status) for r in results] == [("backup", "performed"), ("rc-file", "performed")]
        assert host.fs.read(paths.rc_file) == render_zshrc(config)
        assert host.fs.read(paths.backup_file) == "user rc"

    def test_up_to_date_is_skipped(self, host: FakeHost, paths: InstallPaths, config: Configuration):
        host.fs.add_file(paths.rc_file, render_zshrc(config))
        results = reconcile_rc_file(config, paths, host.registry())
        assert [r.status for r in results] == ["skipped"]
        assert not host.fs.exists(paths.backup_file)

    def test_changed_config_keeps_first_backup(self, host: FakeHost, paths: InstallPaths,
                                               config: Configuration):
        host.fs.add_file(paths.rc_file, "user rc")
        registry = host.registry()
        reconcile_rc_file(config, paths, registry)
        changed = config.model_copy(update={"theme": "agnoster"})
        results = reconcile_rc_file(changed, paths, registry)
        assert results[0].status == "skipped"
        assert host.fs.read(paths.backup_file) == "user rc"
        assert 'ZSH_THEME="agnoster"' in host.fs.read(paths.rc_file)

    def test_write_failure(self, host: FakeHost, paths: InstallPaths, config: Configuration):
        host.fs.fail("write", "No space left on device")
        with pytest.raises(CopyFailed, match="No space left"):
            reconcile_rc_file(config, paths, host.registry())


class TestDefaultShell:
    def test_already_zsh(self, host: FakeHost):
        result = change_default_shell(host.registry(), login_shell=lambda: "/usr/bin/zsh")
        assert result.status == "skipped"
        assert host.command.runs == []

    def test_changes_shell(self, host: FakeHost):
        host.with_binaries("zsh")
        result = change_default_shell(host.registry(), login_shell=lambda: "/bin/bash", user="alice")
        assert result.status == "performed"
        run = host.command.runs[0]
        assert run["cmd"] == ["chsh", "-s", "/usr/bin/zsh", "alice"]
        assert run["sudo"] is True

    def test_zsh_missing(self, host: FakeHost):
        with pytest.raises(PrivilegedOperationFailed, match="not found"):
            change_default_shell(host.registry(), login_shell=lambda: "/bin/bash", user="alice")

    def test_chsh_failure(self, host: FakeHost):
        host.with_binaries("zsh")
        host.command.fail("chsh", "chsh: PAM: Authentication failure")
        with pytest.raises(PrivilegedOperationFailed, match="Authentication failure"):
            change_default_shell(host.registry(), login_shell=lambda: "/bin/bash", user="alice")


class TestLoginShell:
    def test_reads_password_database(self, monkeypatch: pytest.MonkeyPatch):
        entry = pwd.struct_passwd(("alice", "x", 1000, 1000, "", "/home/alice", "/usr/bin/fish"))
        monkeypatch.setattr(pwd, "getpwuid", lambda uid: entry)
        assert current_login_shell() == "/usr/bin/fish"

    def test_unknown_uid_falls_back_to_env(self, monkeypatch: pytest.MonkeyPatch):
        def missing(uid):
            raise KeyError(uid)

        monkeypatch.setattr(pwd, "getpwuid", missing)
        monkeypatch.setenv("SHELL", "/bin/dash")
        assert current_login_shell() == "/bin/dash"
