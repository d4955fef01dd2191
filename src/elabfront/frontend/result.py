"""FrontendResult and FrontendError — what a run hands back to its caller.

INVARIANT: ``run`` never raises for setup failures. A fatal error comes back
as ``ok=False`` with a structured :class:`FrontendError`; the CLI and any
other adapter consume this type.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from elabfront.domain.environment import Environment
from elabfront.domain.messages import MessageLog
from elabfront.domain.state import OutputEntry


class FrontendError(BaseModel):
    """Structured fatal error payload within a FrontendResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class FrontendResult(BaseModel):
    """Outcome of one frontend operation.

    Attributes:
        ok: False only when setup failed and the command loop never ran.
        op: Name of the operation (``"run"`` or ``"parse"``).
        environment: Final environment, None on fatal error.
        messages: Every diagnostic emitted, in emission order.
        outputs: Results of informational commands.
        data: Operation-specific payload (command counts, parsed commands...).
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (telemetry spans).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    environment: Environment | None = None
    messages: MessageLog = Field(default_factory=MessageLog)
    outputs: tuple[OutputEntry, ...] = ()
    data: dict[str, Any] = Field(default_factory=dict)
    error: FrontendError | None = None
    meta: dict[str, Any] | None = None

    @property
    def has_errors(self) -> bool:
        return not self.ok or self.messages.has_errors()
