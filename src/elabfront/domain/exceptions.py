"""Exception hierarchy for setup and elaboration.

Two disjoint families:

- :class:`FatalError` — raised only while building the initial environment
  or processing the header. Aborts the whole run.
- :class:`ElabException` — raised by command elaboration. Always recoverable:
  the driver turns it into at most one diagnostic and moves on.

The elaboration family is a closed sum type. The classifier in
:mod:`elabfront.frontend.classifier` handles every variant explicitly.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from elabfront.domain.messages import Diagnostic, MessageLog

# ---------------------------------------------------------------------------
# Fatal (setup) errors
# ---------------------------------------------------------------------------


class FatalError(Exception):
    """Setup failure that prevents the command loop from starting."""

    code: ClassVar[str] = "FATAL"

    def __init__(
        self,
        message: str,
        *,
        detail: dict[str, Any] | None = None,
        messages: MessageLog | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail or {}
        self.messages = messages


class EnvironmentCreationFailed(FatalError):
    code = "ENV_CREATION_FAILED"


class HeaderImportFailed(FatalError):
    code = "HEADER_IMPORT_FAILED"


# ---------------------------------------------------------------------------
# Meta-level failures (wrapped by InternalFailure)
# ---------------------------------------------------------------------------


class MetaError(Exception):
    """Failure inside term elaboration machinery rather than in user code."""

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    def to_message_data(self) -> str:
        """Renderable content for a diagnostic."""
        if self.cause is None:
            return self.message
        return f"{self.message}: {type(self.cause).__name__}: {self.cause}"


# ---------------------------------------------------------------------------
# Recoverable elaboration exceptions
# ---------------------------------------------------------------------------


class ElabException(Exception):
    """Base of all recoverable elaboration failures."""


class DirectMessage(ElabException):
    """Carries a fully built diagnostic, logged verbatim."""

    def __init__(self, diagnostic: Diagnostic) -> None:
        super().__init__(diagnostic.text)
        self.diagnostic = diagnostic


class UnresolvedReferenceLike(ElabException):
    """Elaboration hit a syntax node it could not resolve."""

    def __init__(self, node: object) -> None:
        super().__init__(repr(node))
        self.node = node


class InternalFailure(ElabException):
    """Wraps a :class:`MetaError`."""

    def __init__(self, error: MetaError) -> None:
        super().__init__(error.message)
        self.error = error


class Silent(ElabException):
    """Abort the current command without reporting anything.

    Used when the problem was already reported, e.g. a parse error marker.
    """


class Unclassified(ElabException):
    """Anything else. Renders *detail* if given, else a default template."""

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or "")
        self.detail = detail
