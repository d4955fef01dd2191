"""Diagnostics and the append-only message log.

INVARIANT: A MessageLog is never mutated. ``add`` returns a new log whose
prefix is the old log, so ordering is exactly emission order.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass

from pydantic import BaseModel, Field

from elabfront.domain.types import Severity


class Position(BaseModel):
    """1-based line, 0-based column."""

    model_config = {"frozen": True}

    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class FileMap:
    """Offset → (line, column) lookup for one source buffer."""

    line_starts: tuple[int, ...]

    @classmethod
    def of_source(cls, source: str) -> FileMap:
        starts = [0]
        for idx, ch in enumerate(source):
            if ch == "\n":
                starts.append(idx + 1)
        return cls(line_starts=tuple(starts))

    def to_position(self, offset: int) -> Position:
        line_idx = bisect.bisect_right(self.line_starts, offset) - 1
        line_idx = max(line_idx, 0)
        return Position(line=line_idx + 1, column=offset - self.line_starts[line_idx])


class Diagnostic(BaseModel):
    """One reported issue."""

    model_config = {"frozen": True}

    file_name: str
    pos: Position
    severity: Severity = Severity.ERROR
    text: str

    def __str__(self) -> str:
        return f"{self.file_name}:{self.pos}: {self.severity}: {self.text}"


class MessageLog(BaseModel):
    """Ordered, append-only collection of diagnostics for one run."""

    model_config = {"frozen": True}

    messages: tuple[Diagnostic, ...] = Field(default_factory=tuple)

    def add(self, diagnostic: Diagnostic) -> MessageLog:
        return MessageLog(messages=(*self.messages, diagnostic))

    def has_errors(self) -> bool:
        return any(m.severity == Severity.ERROR for m in self.messages)
