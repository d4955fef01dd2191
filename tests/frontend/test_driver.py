"""Tests for the command driver loop."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from elabfront.domain.exceptions import Silent
from elabfront.domain.messages import MessageLog
from elabfront.domain.state import CommandContext, ElaborationState, ParserContext, ParserState
from elabfront.domain.syntax import EndOfInput, ExitDirective, HashCommand
from elabfront.elab import Elaborator
from elabfront.elab.log import error_at, log_output
from elabfront.frontend.driver import CommandDriver, get_cmd_context
from elabfront.parser import parse_command


def _scripted_parser(script: list) -> Callable:
    """Parser returning *script* entries in order, each 5 characters apart."""
    calls = iter(script)

    def _parse(ctx: ParserContext, state: ParserState, log: MessageLog):
        stx = next(calls)
        return stx, ParserState(pos=state.pos + 5), log

    return _parse


class _RecordingElaborator:
    def __init__(self, behaviour: Callable | None = None) -> None:
        self.calls: list[tuple[str, int]] = []
        self._behaviour = behaviour

    def elab_command(self, stx, ctx: CommandContext, state: ElaborationState) -> ElaborationState:
        self.calls.append((stx.kind, ctx.cmd_pos))
        if self._behaviour is not None:
            return self._behaviour(stx, ctx, state)
        return log_output(stx.kind, None, ctx, state)


class _Observer:
    def __init__(self) -> None:
        self.commands: list[dict] = []

    def notify_command(self, **kwargs) -> None:
        self.commands.append(kwargs)

    def notify_run(self, **kwargs) -> None:
        pass


@pytest.fixture
def ctx(parser_ctx) -> ParserContext:
    return parser_ctx("x" * 100)


class TestProcessCommand:
    def test_updates_cmd_pos_before_parsing(self, ctx, init_state):
        elaborator = _RecordingElaborator()
        driver = CommandDriver(ctx, elaborator, parse=_scripted_parser([HashCommand(pos=7, name="#a")]))
        done, parser_state, state = driver.process_command(ParserState(pos=7), init_state)
        assert not done
        assert parser_state.pos == 12
        assert state.cmd_pos == 7
        assert elaborator.calls == [("#a", 7)]

    @pytest.mark.parametrize("terminator", [EndOfInput(pos=0), ExitDirective(pos=0)])
    def test_terminators_do_not_elaborate(self, ctx, init_state, terminator):
        elaborator = _RecordingElaborator()
        driver = CommandDriver(ctx, elaborator, parse=_scripted_parser([terminator]))
        done, _, state = driver.process_command(ParserState(pos=3), init_state)
        assert done
        assert elaborator.calls == []
        assert state.cmd_pos == 3
        assert driver.command_count == 0

    def test_failure_keeps_environment(self, ctx, init_state):
        def failing(stx, cctx, state):
            raise error_at(cctx, None, "nope")

        driver = CommandDriver(ctx, _RecordingElaborator(failing), parse=_scripted_parser([HashCommand(0, "#a")]))
        done, _, state = driver.process_command(ParserState(), init_state)
        assert not done
        assert state.env is init_state.env
        assert [m.text for m in state.messages.messages] == ["nope"]

    def test_silent_failure_adds_nothing(self, ctx, init_state):
        def silent(stx, cctx, state):
            raise Silent()

        driver = CommandDriver(ctx, _RecordingElaborator(silent), parse=_scripted_parser([HashCommand(0, "#a")]))
        _, _, state = driver.process_command(ParserState(), init_state)
        assert state.messages.messages == ()

    def test_observer_notified(self, ctx, init_state):
        def fail_b(stx, cctx, state):
            if stx.kind == "#b":
                raise error_at(cctx, None, "b failed")
            return state

        observer = _Observer()
        script = [HashCommand(0, "#a"), HashCommand(0, "#b"), EndOfInput(0)]
        driver = CommandDriver(ctx, _RecordingElaborator(fail_b), parse=_scripted_parser(script), observer=observer)
        driver.process_commands(ParserState(), init_state)
        assert observer.commands == [
            {"kind": "#a", "position": 0, "ok": True, "diagnostics_added": 0},
            {"kind": "#b", "position": 5, "ok": False, "diagnostics_added": 1},
        ]


class TestProcessCommands:
    def test_runs_until_end_of_input(self, ctx, init_state):
        script = [HashCommand(0, "#a"), HashCommand(0, "#b"), HashCommand(0, "#c"), EndOfInput(0)]
        elaborator = _RecordingElaborator()
        driver = CommandDriver(ctx, elaborator, parse=_scripted_parser(script))
        state = driver.process_commands(ParserState(), init_state)
        assert [o.text for o in state.outputs] == ["#a", "#b", "#c"]
        assert [pos for _, pos in elaborator.calls] == [0, 5, 10]
        assert state.cmd_pos == 15
        assert driver.command_count == 3

    def test_exit_stops_the_loop(self, ctx, init_state):
        script = [HashCommand(0, "#a"), ExitDirective(0), HashCommand(0, "#never")]
        elaborator = _RecordingElaborator()
        driver = CommandDriver(ctx, elaborator, parse=_scripted_parser(script))
        driver.process_commands(ParserState(), init_state)
        assert [kind for kind, _ in elaborator.calls] == ["#a"]

    def test_cmd_pos_is_non_decreasing(self, parser_ctx, init_state):
        source = "def a := 1\ndef := 2\n#check zz\n  def b := a\n#eval b\n"
        positions: list[int] = []

        def recording_parse(ctx, state, log):
            positions.append(state.pos)
            return parse_command(ctx, state, log)

        driver = CommandDriver(parser_ctx(source), Elaborator(), parse=recording_parse)
        driver.process_commands(ParserState(), init_state)
        assert positions == sorted(positions)
        assert len(positions) == 6


class TestRunCommandElab:
    def test_context_derived_from_state(self, ctx, init_state):
        driver = CommandDriver(ctx, Elaborator(), max_rec_depth=9)
        state = init_state.model_copy(update={"cmd_pos": 42})
        seen: list[CommandContext] = []

        def action(cctx, st):
            seen.append(cctx)
            return st

        assert driver.run_command_elab(action, state) is state
        assert seen[0] == get_cmd_context(ctx, state, 9)
        assert seen[0].cmd_pos == 42
        assert seen[0].env is state.env

    def test_elab_command_at_frontend_recovers(self, parser_ctx, init_state):
        driver = CommandDriver(parser_ctx("#nope"), Elaborator())
        state = driver.elab_command_at_frontend(HashCommand(0, "#nope"), init_state)
        assert [m.text for m in state.messages.messages] == ["unexpected syntax"]
