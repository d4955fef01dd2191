"""Frontend entry point: build the environment, process the header, run the loop.

INVARIANT: Setup failures never raise out of :func:`run`. They come back as
``FrontendResult(ok=False)`` and the command loop is never started.
"""

from __future__ import annotations

import logging

import structlog

from elabfront.config.models import FrontendConfig
from elabfront.domain.environment import MAX_TRUST_LEVEL, mk_empty_environment
from elabfront.domain.exceptions import FatalError
from elabfront.domain.messages import MessageLog
from elabfront.domain.state import ElaborationState, ParserState
from elabfront.domain.types import Severity
from elabfront.elab import Elaborator, process_header
from elabfront.frontend.driver import CommandDriver
from elabfront.frontend.result import FrontendError, FrontendResult
from elabfront.frontend.telemetry import trace_span, traced
from elabfront.parser import is_eoi, is_exit_command, mk_parser_context, parse_command, parse_header
from elabfront.plugins.manager import PluginManager, default_plugin_manager

logger = logging.getLogger(__name__)

DEFAULT_MODULE_NAME = "<input>"


def _fatal(op: str, exc: FatalError) -> FrontendResult:
    logger.debug("Setup failed with %s: %s", exc.code, exc.message)
    return FrontendResult(
        ok=False,
        op=op,
        messages=exc.messages or MessageLog(),
        error=FrontendError(code=exc.code, message=exc.message, detail=exc.detail),
    )


@traced
def run(
    source: str,
    module_name: str | None = None,
    options: FrontendConfig | None = None,
    *,
    plugins: PluginManager | None = None,
) -> FrontendResult:
    """Elaborate every command of *source*.

    Args:
        source: Full module text, header first.
        module_name: File/module name used in diagnostics. Falls back to
            ``options.module_name``, then ``"<input>"``.
        options: Frontend settings (trust level, implicit prelude, recursion limit).
        plugins: Source of command elaborators, importable modules, and
            lifecycle hooks. Defaults to the core plugin only.

    Returns:
        ``ok=True`` with the final environment, messages, and outputs, or
        ``ok=False`` with a structured error if setup failed.
    """
    options = options or FrontendConfig()
    plugins = plugins or default_plugin_manager()
    file_name = module_name or options.module_name or DEFAULT_MODULE_NAME

    with structlog.contextvars.bound_contextvars(module=file_name):
        return _elaborate_module(source, file_name, options, plugins)


def _elaborate_module(
    source: str,
    file_name: str,
    options: FrontendConfig,
    plugins: PluginManager,
) -> FrontendResult:
    try:
        env = mk_empty_environment(MAX_TRUST_LEVEL)
    except FatalError as exc:
        return _fatal("run", exc)

    ctx = mk_parser_context(env, source, file_name)
    header, parser_state, log = parse_header(ctx)
    try:
        env, log = process_header(
            header,
            log,
            ctx,
            options.trust_level,
            plugins.modules(),
            implicit_prelude=options.prelude,
        )
    except FatalError as exc:
        return _fatal("run", exc)

    driver = CommandDriver(
        ctx,
        Elaborator.from_plugins(plugins),
        observer=plugins,
        max_rec_depth=options.max_rec_depth,
    )
    with trace_span("process_commands") as span:
        state = driver.process_commands(parser_state, ElaborationState(env=env, messages=log))
        if span is not None:
            span.annotate("commands", driver.command_count)

    errors = sum(1 for m in state.messages.messages if m.severity == Severity.ERROR)
    plugins.notify_run(module_name=file_name, commands=driver.command_count, errors=errors)

    return FrontendResult(
        ok=True,
        op="run",
        environment=state.env,
        messages=state.messages,
        outputs=state.outputs,
        data={
            "module_name": file_name,
            "imports": list(state.env.header.imports),
            "commands": driver.command_count,
            "errors": errors,
            "declarations": sorted(
                name for name, info in state.env.constants.items() if info.module == file_name
            ),
        },
    )


def scan_commands(source: str, module_name: str | None = None) -> FrontendResult:
    """Parse *source* without elaborating it.

    Lists the header and each command's kind, position, and text. Parse
    errors are reported in ``messages``; the scan stops at ``#exit``.
    """
    file_name = module_name or DEFAULT_MODULE_NAME
    try:
        env = mk_empty_environment(MAX_TRUST_LEVEL)
    except FatalError as exc:
        return _fatal("parse", exc)

    ctx = mk_parser_context(env, source, file_name)
    header, parser_state, log = parse_header(ctx)

    commands: list[dict[str, object]] = []
    state: ParserState = parser_state
    while True:
        start = state.pos
        stx, state, log = parse_command(ctx, state, log)
        if is_eoi(stx) or is_exit_command(stx):
            break
        commands.append(
            {
                "kind": stx.kind,
                "position": str(ctx.file_map.to_position(start)),
                "text": source[start : state.pos].strip(),
                "ok": not state.recovering,
            }
        )

    return FrontendResult(
        ok=True,
        op="parse",
        messages=log,
        data={
            "module_name": file_name,
            "prelude": header.prelude,
            "imports": [decl.module for decl in header.imports],
            "count": len(commands),
            "commands": commands,
        },
    )
