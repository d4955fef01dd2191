"""Shared pytest fixtures for elabfront tests."""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from click.testing import CliRunner

from elabfront.domain.environment import mk_empty_environment
from elabfront.domain.messages import FileMap
from elabfront.domain.state import CommandContext, ElaborationState, ParserContext
from elabfront.elab.prelude import INIT_DECLS
from elabfront.frontend.telemetry import disable_telemetry
from elabfront.parser import mk_parser_context
from elabfront.plugins.manager import PluginManager, default_plugin_manager


@pytest.fixture(autouse=True)
def _reset_ambient(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Undo process-wide side effects of the CLI (logging handlers, telemetry)."""
    monkeypatch.delenv("ELABFRONT_CONFIG", raising=False)
    root = logging.getLogger()
    handlers = root.handlers[:]
    root_level = root.level
    elab_level = logging.getLogger("elabfront").level
    try:
        yield
    finally:
        disable_telemetry()
        root.handlers[:] = handlers
        root.setLevel(root_level)
        logging.getLogger("elabfront").setLevel(elab_level)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run from an empty temp directory so no stray elabfront.toml is found."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def plugins() -> PluginManager:
    """Plugin manager with only the core plugin."""
    return default_plugin_manager()


@pytest.fixture
def parser_ctx() -> Callable[[str], ParserContext]:
    """Factory: parser context over *source* with an empty environment."""

    def _make(source: str, file_name: str = "<input>") -> ParserContext:
        return mk_parser_context(mk_empty_environment(), source, file_name)

    return _make


@pytest.fixture
def init_state() -> ElaborationState:
    """Elaboration state whose environment holds the Init declarations."""
    env = mk_empty_environment(0)
    for info in INIT_DECLS:
        env = env.add_decl(info)
    return ElaborationState(env=env)


@pytest.fixture
def command_ctx() -> Callable[..., CommandContext]:
    """Factory: command context for *state* over *source*."""

    def _make(state: ElaborationState, source: str = "", max_rec_depth: int = 512) -> CommandContext:
        return CommandContext(
            file_name="<input>",
            file_map=FileMap.of_source(source),
            cmd_pos=state.cmd_pos,
            env=state.env,
            max_rec_depth=max_rec_depth,
        )

    return _make


@pytest.fixture
def int_digit_limit() -> Iterator[int]:
    """Pin the interpreter's int/str conversion limit to its default."""
    previous = sys.get_int_max_str_digits()
    sys.set_int_max_str_digits(4300)
    yield 4300
    sys.set_int_max_str_digits(previous)
