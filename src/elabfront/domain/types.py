"""Classification enums shared by the parser, elaborator, and driver."""

from __future__ import annotations

from enum import StrEnum


class Severity(StrEnum):
    """Diagnostic severities, lowest to highest."""

    INFORMATION = "information"
    WARNING = "warning"
    ERROR = "error"


class CommandKind(StrEnum):
    """Top-level tag of a parsed command.

    The driver only distinguishes the two terminators from everything else.
    """

    END_OF_INPUT = "end_of_input"
    EXIT = "exit"
    REGULAR = "regular"


class ScopeKind(StrEnum):
    """Kinds of entries on the elaboration scope stack."""

    ROOT = "root"
    NAMESPACE = "namespace"
    SECTION = "section"
