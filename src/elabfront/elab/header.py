"""Header processing: resolve imports and build the initial environment."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from elabfront.domain.environment import ConstantInfo, Environment, EnvironmentHeader, mk_empty_environment
from elabfront.domain.exceptions import EnvironmentCreationFailed, HeaderImportFailed
from elabfront.domain.messages import Diagnostic, MessageLog
from elabfront.domain.state import ParserContext
from elabfront.domain.syntax import Header
from elabfront.domain.types import Severity
from elabfront.elab.prelude import INIT_MODULE

logger = logging.getLogger(__name__)

ModuleTable = Mapping[str, Sequence[ConstantInfo]]


def _import_error(ctx: ParserContext, log: MessageLog, pos: int, text: str, **detail: object) -> HeaderImportFailed:
    diagnostic = Diagnostic(
        file_name=ctx.file_name,
        pos=ctx.file_map.to_position(pos),
        severity=Severity.ERROR,
        text=text,
    )
    return HeaderImportFailed(text, detail=dict(detail), messages=log.add(diagnostic))


def process_header(
    header: Header,
    log: MessageLog,
    ctx: ParserContext,
    trust_level: int,
    modules: ModuleTable,
    *,
    implicit_prelude: bool = True,
) -> tuple[Environment, MessageLog]:
    """Import the header's modules into a fresh environment.

    ``Init`` is imported first unless the header says ``prelude`` or
    *implicit_prelude* is off.

    Raises:
        HeaderImportFailed: On an unknown module or a clashing declaration.
            The exception's ``messages`` carry *log* plus the import error.
    """
    requested: list[tuple[str, int]] = []
    if implicit_prelude and not header.prelude:
        requested.append((INIT_MODULE, header.pos))
    requested.extend((decl.module, decl.pos) for decl in header.imports)

    try:
        env = mk_empty_environment(trust_level)
    except EnvironmentCreationFailed as exc:
        raise _import_error(ctx, log, header.pos, exc.message, trust_level=trust_level) from exc

    imported: list[str] = []
    for module, pos in requested:
        if module in imported:
            continue
        decls = modules.get(module)
        if decls is None:
            raise _import_error(ctx, log, pos, f"unknown module '{module}'", module=module)
        for info in decls:
            if env.contains(info.name):
                raise _import_error(
                    ctx,
                    log,
                    pos,
                    f"import failed, environment already contains '{info.name}' from {module}",
                    module=module,
                    constant=info.name,
                )
            env = env.add_decl(info)
        imported.append(module)
        logger.debug("Imported module %s (%d declarations)", module, len(decls))

    env = env.model_copy(
        update={"header": EnvironmentHeader(module_name=ctx.file_name, imports=tuple(imported))}
    )
    return env, log
