"""
Tests for adapter protocol, registry, and the real adapters.
"""

from pathlib import Path

import pytest

from customzsh.adapters.base import Adapter, ExecutionContext
from customzsh.adapters.net.http import HttpAdapter
from customzsh.adapters.packages.manager import (
    PackageManagerAdapter,
    build_install_cmd,
    build_refresh_cmd,
)
from customzsh.adapters.registry import AdapterRegistry, default_registry
from customzsh.adapters.shell.command import CommandAdapter
from customzsh.adapters.shell.filesystem import FilesystemAdapter
from customzsh.core.models.action import Action, Receipt

# ── Protocol Tests ───────────────────────────────────────────────────


class _Recorder(Adapter):
    operations = frozenset({"clone", "boom"})
    required_params = {"clone": ("url", "dest")}

    def __init__(self) -> None:
        self.calls: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return "recorder"

    def is_available(self) -> bool:
        return True

    def execute(self, context: ExecutionContext) -> Receipt:
        self.calls.append(context)
        if context.operation == "boom":
            raise RuntimeError("kaboom")
        return Receipt.success(adapter=self.name, action_id=context.action.id, output="done")


class TestExecutionContext:
    def test_operation_from_action(self):
        ctx = ExecutionContext(action=Action(id="a", adapter="git", operation="clone"))
        assert ctx.operation == "clone"

    def test_validate_missing_operation(self):
        ctx = ExecutionContext(action=Action(id="a", adapter="recorder"))
        assert _Recorder().validate(ctx) == (False, "Missing operation")


class TestReceipt:
    def test_constructors(self):
        assert Receipt.success(adapter="a", action_id="x").ok
        assert Receipt.failure(adapter="a", action_id="x", error="e").failed
        skipped = Receipt.skip(adapter="a", action_id="x", reason="already there")
        assert skipped.skipped
        assert skipped.output == "already there"
        assert not skipped.ok


# ── Registry Tests ───────────────────────────────────────────────────


class TestAdapterRegistry:
    @pytest.fixture
    def recorder(self) -> _Recorder:
        return _Recorder()

    @pytest.fixture
    def registry(self, recorder: _Recorder) -> AdapterRegistry:
        registry = AdapterRegistry()
        registry.register(recorder)
        return registry

    def test_register_and_get(self, registry: AdapterRegistry, recorder: _Recorder):
        assert registry.get("recorder") is recorder
        assert registry.list_adapters() == ["recorder"]

    def test_unregister(self, registry: AdapterRegistry):
        registry.unregister("recorder")
        assert registry.get("recorder") is None

    def test_dispatch_unknown_adapter_fails(self, registry: AdapterRegistry):
        receipt = registry.dispatch("nope", "run")
        assert receipt.failed
        assert "No adapter registered" in receipt.error

    def test_dispatch_builds_action(self, registry: AdapterRegistry, recorder: _Recorder):
        receipt = registry.dispatch("recorder", "clone", action_id="c1", url="u", dest="d")
        assert receipt.ok
        ctx = recorder.calls[0]
        assert ctx.action.id == "c1"
        assert ctx.operation == "clone"
        assert ctx.params == {"url": "u", "dest": "d"}

    def test_default_action_id(self, registry: AdapterRegistry, recorder: _Recorder):
        registry.dispatch("recorder", "clone", url="u", dest="d")
        assert recorder.calls[0].action.id == "recorder:clone"

    def test_exception_becomes_failed_receipt(self, registry: AdapterRegistry):
        receipt = registry.dispatch("recorder", "boom")
        assert receipt.failed
        assert "kaboom" in receipt.error

    def test_unknown_operation_never_executes(self, registry: AdapterRegistry, recorder: _Recorder):
        receipt = registry.dispatch("recorder", "fizzle")
        assert receipt.failed
        assert "Unknown operation" in receipt.error
        assert recorder.calls == []

    def test_missing_param(self, registry: AdapterRegistry, recorder: _Recorder):
        receipt = registry.dispatch("recorder", "clone", url="u")
        assert receipt.failed
        assert "'dest'" in receipt.error
        assert recorder.calls == []

    def test_default_registry_wiring(self):
        names = set(default_registry().list_adapters())
        assert names == {"filesystem", "command", "git", "http", "packages"}


# ── Filesystem Adapter Tests ─────────────────────────────────────────


class TestFilesystemAdapter:
    @pytest.fixture
    def registry(self) -> AdapterRegistry:
        registry = AdapterRegistry()
        registry.register(FilesystemAdapter())
        return registry

    def test_exists(self, registry: AdapterRegistry, tmp_path: Path):
        assert registry.dispatch("filesystem", "exists", path=str(tmp_path)).metadata["exists"]
        missing = registry.dispatch("filesystem", "exists", path=str(tmp_path / "nope"))
        assert missing.metadata["exists"] is False

    def test_write_then_read(self, registry: AdapterRegistry, tmp_path: Path):
        target = tmp_path / "a" / "b.txt"
        assert registry.dispatch("filesystem", "write", path=str(target), content="hi").ok
        assert registry.dispatch("filesystem", "read", path=str(target)).output == "hi"

    def test_read_missing_fails(self, registry: AdapterRegistry, tmp_path: Path):
        assert registry.dispatch("filesystem", "read", path=str(tmp_path / "x")).failed

    def test_move_replaces_existing_file(self, registry: AdapterRegistry, tmp_path: Path):
        src, dest = tmp_path / "src", tmp_path / "dest"
        src.write_text("new")
        dest.write_text("old")
        assert registry.dispatch("filesystem", "move", path=str(src), dest=str(dest)).ok
        assert dest.read_text() == "new"
        assert not src.exists()

    def test_copy(self, registry: AdapterRegistry, tmp_path: Path):
        src = tmp_path / "src"
        src.write_text("x")
        registry.dispatch("filesystem", "copy", path=str(src), dest=str(tmp_path / "c"))
        assert (tmp_path / "c").read_text() == "x"
        assert src.exists()

    def test_remove_tree(self, registry: AdapterRegistry, tmp_path: Path):
        root = tmp_path / "root"
        (root / "sub").mkdir(parents=True)
        (root / "sub" / "f").write_text("x")
        assert registry.dispatch("filesystem", "remove_tree", path=str(root)).ok
        assert not root.exists()

    def test_remove_tree_absent_is_skipped(self, registry: AdapterRegistry, tmp_path: Path):
        receipt = registry.dispatch("filesystem", "remove_tree", path=str(tmp_path / "gone"))
        assert receipt.status == "skipped"


# ── Command / HTTP / Packages ────────────────────────────────────────


class TestCommandAdapter:
    def test_which_missing_binary(self):
        registry = AdapterRegistry()
        registry.register(CommandAdapter())
        receipt = registry.dispatch("command", "which", binary="definitely-not-a-real-binary-xyz")
        assert receipt.ok
        assert receipt.metadata["found"] is False


class TestHttpAdapter:
    def test_refuses_plain_http(self):
        registry = AdapterRegistry()
        registry.register(HttpAdapter())
        receipt = registry.dispatch("http", "get_text", url="http://example.com/x")
        assert receipt.failed
        assert "non-HTTPS" in receipt.error


class TestPackageCommands:
    @pytest.mark.parametrize("pm, expected", [
        ("apt", ["apt-get", "install", "-y", "zsh"]),
        ("dnf", ["dnf", "install", "-y", "zsh"]),
        ("pacman", ["pacman", "-S", "--noconfirm", "--needed", "zsh"]),
        ("zypper", ["zypper", "--non-interactive", "install", "zsh"]),
        ("brew", ["brew", "install", "zsh"]),
    ])
    def test_install_cmd(self, pm, expected):
        assert build_install_cmd(["zsh"], pm) == expected

    def test_unknown_manager_raises(self):
        with pytest.raises(ValueError):
            build_install_cmd(["zsh"], "emerge")

    def test_dnf_has_no_refresh(self):
        assert build_refresh_cmd("dnf") is None
        assert build_refresh_cmd("apt") == ["apt-get", "update"]

    def test_validate_rejects_unsupported_manager(self):
        registry = AdapterRegistry()
        registry.register(PackageManagerAdapter())
        receipt = registry.dispatch("packages", "install", manager="emerge", packages=["zsh"])
        assert receipt.failed
        assert "Unsupported" in receipt.error
