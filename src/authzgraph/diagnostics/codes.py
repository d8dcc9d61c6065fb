"""Diagnostic codes and data structures.

Defines error codes, source spans, and diagnostic messages.
Python 3.13+. Zero external dependencies.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Literal

__all__ = [
    "Diagnostic",
    "DiagnosticCode",
    "SourceSpan",
]


class DiagnosticCode(Enum):
    """Error codes with unique identifiers.

    Organized by category:
        1000-1999: Lookup errors (unknown types and relations)
        2000-2999: Rewrite errors (unsupported variants, depth limits)
        3000-3999: Syntax errors (DSL and JSON model sources)
        4000-4999: Render errors (DOT serialization)
    """

    # Lookup errors (1000-1999)
    TYPE_NOT_FOUND = 1001
    RELATION_NOT_FOUND = 1002

    # Rewrite errors (2000-2999)
    UNSUPPORTED_REWRITE = 2001
    REWRITE_DEPTH_EXCEEDED = 2002

    # Syntax errors (3000-3999)
    UNEXPECTED_EOF = 3001
    UNEXPECTED_TOKEN = 3002
    MIXED_OPERATORS = 3003
    DUPLICATE_DEFINITION = 3004
    UNSUPPORTED_SCHEMA = 3005
    SOURCE_TOO_LARGE = 3006
    INVALID_JSON_MODEL = 3007

    # Render errors (4000-4999)
    INVALID_GRAPH_ATTRIBUTE = 4001
    DANGLING_EDGE = 4002


@dataclass(frozen=True, slots=True)
class SourceSpan:
    """Source code location for error reporting.

    Attributes:
        start: Starting character offset (0-indexed)
        end: Ending character offset (exclusive)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """

    start: int
    end: int
    line: int
    column: int

    def __post_init__(self) -> None:
        """Validate SourceSpan invariants.

        Raises:
            ValueError: If start is negative, end precedes start, or
                line/column is less than 1 (both are 1-indexed).
        """
        if self.start < 0:
            msg = f"SourceSpan.start must be >= 0, got {self.start}"
            raise ValueError(msg)
        if self.end < self.start:
            msg = f"SourceSpan.end ({self.end}) must be >= start ({self.start})"
            raise ValueError(msg)
        if self.line < 1:
            msg = f"SourceSpan.line must be >= 1 (1-indexed), got {self.line}"
            raise ValueError(msg)
        if self.column < 1:
            msg = f"SourceSpan.column must be >= 1 (1-indexed), got {self.column}"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """Structured diagnostic message.

    Inspired by Rust compiler diagnostics. Carries enough context
    (type name, relation name, source position) to diagnose a failure
    without re-running the pipeline.

    Attributes:
        code: Unique error code
        message: Human-readable error description
        span: Source location (None for errors raised after parsing)
        hint: Suggestion for fixing the error
        help_url: Documentation URL for this error
        type_name: Object type involved in the error
        relation: Relation involved in the error
        severity: Error severity level
    """

    code: DiagnosticCode
    message: str
    span: SourceSpan | None = None
    hint: str | None = None
    help_url: str | None = None
    type_name: str | None = None
    relation: str | None = None
    severity: Literal["error", "warning"] = "error"

    def __str__(self) -> str:
        """Return human-readable error description."""
        return self.message
