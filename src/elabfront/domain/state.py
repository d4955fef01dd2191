"""State threaded through the command loop.

ParserContext is built once and shared read-only. ParserState and
ElaborationState are owned by exactly one loop iteration at a time and
replaced, never aliased or mutated. CommandContext is rebuilt for every
elaboration call.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, Field

from elabfront.domain.environment import Environment
from elabfront.domain.messages import FileMap, MessageLog, Position
from elabfront.domain.types import ScopeKind


class Scope(BaseModel):
    """One entry of the namespace/section stack."""

    model_config = {"frozen": True}

    kind: ScopeKind
    header: str
    namespace: str = ""
    opens: tuple[str, ...] = ()


ROOT_SCOPE = Scope(kind=ScopeKind.ROOT, header="root")


class OutputEntry(BaseModel):
    """Result printed by an informational command (``#check``, ``#eval``...)."""

    model_config = {"frozen": True}

    pos: Position
    text: str


class ElaborationState(BaseModel):
    """Environment, log, command position, and scope stack for one run."""

    model_config = {"frozen": True}

    env: Environment
    messages: MessageLog = Field(default_factory=MessageLog)
    cmd_pos: int = 0
    scopes: tuple[Scope, ...] = (ROOT_SCOPE,)
    outputs: tuple[OutputEntry, ...] = ()

    @property
    def scope(self) -> Scope:
        return self.scopes[-1]

    @property
    def namespace(self) -> str:
        return self.scope.namespace


@dataclass(frozen=True)
class ParserContext:
    """Immutable parse configuration shared by every parse of one run."""

    env: Environment
    source: str
    file_name: str
    file_map: FileMap


@dataclass(frozen=True)
class ParserState:
    """Parse cursor: source offset plus whether we are recovering from an error."""

    pos: int = 0
    recovering: bool = False


@dataclass(frozen=True)
class CommandContext:
    """Read-only view handed to one elaboration call."""

    file_name: str
    file_map: FileMap
    cmd_pos: int
    env: Environment
    max_rec_depth: int = 512

    def position(self, offset: int | None = None) -> Position:
        return self.file_map.to_position(self.cmd_pos if offset is None else offset)
