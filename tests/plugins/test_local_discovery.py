"""Tests for single-file plugin discovery from a local directory."""

from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

from elabfront.frontend import run
from elabfront.plugins.manager import PluginManager, default_plugin_manager

HELLO_PLUGIN = '''\
import pluggy

from elabfront.elab.log import log_output

hookimpl = pluggy.HookimplMarker("elabfront")


class HelloPlugin:
    @hookimpl
    def register_command_elaborators(self):
        def elab_hello(stx, ctx, state):
            return log_output("hello from disk", stx.pos, ctx, state)

        return {"#hello": elab_hello}


class NotAPlugin:
    pass
'''

TWO_PLUGINS = '''\
import pluggy

from elabfront.elab.log import log_output

hookimpl = pluggy.HookimplMarker("elabfront")


class PingPlugin:
    @hookimpl
    def register_command_elaborators(self):
        return {"#ping": lambda stx, ctx, state: log_output("ping", stx.pos, ctx, state)}


class PongPlugin:
    @hookimpl
    def register_command_elaborators(self):
        return {"#pong": lambda stx, ctx, state: log_output("pong", stx.pos, ctx, state)}


class WrongSignature:
    @hookimpl
    def post_run(self, bogus):
        pass
'''


@pytest.fixture
def plugin_dir(tmp_path: Path) -> Iterator[Path]:
    directory = tmp_path / "plugins"
    directory.mkdir()
    yield directory
    for name in list(sys.modules):
        if name.startswith("elabfront_local_plugin_"):
            del sys.modules[name]


class TestLocalDiscovery:
    def test_loads_plugin_class(self, plugin_dir):
        (plugin_dir / "hello.py").write_text(HELLO_PLUGIN, encoding="utf-8")
        pm = default_plugin_manager(local_dir=plugin_dir, discover=True)
        assert "elabfront_local_plugin_hello.HelloPlugin" in pm.list_plugin_names()
        result = run("#hello", plugins=pm)
        assert [o.text for o in result.outputs] == ["hello from disk"]

    def test_skips_private_files(self, plugin_dir):
        (plugin_dir / "_private.py").write_text(HELLO_PLUGIN, encoding="utf-8")
        pm = PluginManager()
        pm.discover_and_load(local_dir=plugin_dir)
        assert pm.list_plugin_names() == []

    def test_broken_plugin_is_a_warning(self, plugin_dir, caplog):
        (plugin_dir / "broken.py").write_text("def oops(:\n", encoding="utf-8")
        pm = PluginManager()
        pm.discover_and_load(local_dir=plugin_dir)
        assert pm.list_plugin_names() == []
        assert "Failed to load local plugin" in caplog.text
        assert "elabfront_local_plugin_broken" not in sys.modules

    def test_missing_directory_is_ignored(self, tmp_path):
        pm = PluginManager()
        pm.discover_and_load(local_dir=tmp_path / "nope")
        assert pm.list_plugin_names() == []

    def test_every_class_in_a_file_registers(self, plugin_dir, caplog):
        (plugin_dir / "pair.py").write_text(TWO_PLUGINS, encoding="utf-8")
        pm = default_plugin_manager(local_dir=plugin_dir, discover=True)
        names = pm.list_plugin_names()
        assert "elabfront_local_plugin_pair.PingPlugin" in names
        assert "elabfront_local_plugin_pair.PongPlugin" in names
        assert "elabfront_local_plugin_pair.WrongSignature" not in names
        assert "Cannot register plugin WrongSignature" in caplog.text
        result = run("#ping\n#pong", plugins=pm)
        assert [o.text for o in result.outputs] == ["ping", "pong"]
