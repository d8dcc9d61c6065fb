"""Diagnostic formatting service.

Centralizes diagnostic output formatting with configurable options.
Python 3.13+. Zero external dependencies.
"""

import json
from dataclasses import dataclass
from enum import StrEnum

from .codes import Diagnostic

__all__ = [
    "DiagnosticFormatter",
    "OutputFormat",
]


class OutputFormat(StrEnum):
    """Output format options for diagnostic formatting."""

    RUST = "rust"  # Rust compiler-style output (default)
    SIMPLE = "simple"  # Single-line format
    JSON = "json"  # JSON format for tooling integration


def _escape_control_chars(text: str) -> str:
    """Escape newlines and other control characters (log injection prevention)."""
    return "".join(
        repr(char)[1:-1] if ord(char) < 0x20 or ord(char) == 0x7F else char
        for char in text
    )


@dataclass(frozen=True, slots=True)
class DiagnosticFormatter:
    """Diagnostic formatting service.

    Attributes:
        output_format: Output style (rust, simple, json)

    Example:
        >>> formatter = DiagnosticFormatter()
        >>> diagnostic = ErrorTemplate.relation_not_found("document", "editor")
        >>> print(formatter.format(diagnostic))
        error[RELATION_NOT_FOUND]: Relation 'editor' not found on type 'document'
          --> type document, relation editor
          = help: Define the relation on the type or fix the reference

        >>> formatter = DiagnosticFormatter(output_format=OutputFormat.SIMPLE)
        >>> print(formatter.format(diagnostic))
        RELATION_NOT_FOUND: Relation 'editor' not found on type 'document'
    """

    output_format: OutputFormat = OutputFormat.RUST

    def format(self, diagnostic: Diagnostic) -> str:
        """Format a single diagnostic.

        Args:
            diagnostic: Diagnostic to format

        Returns:
            Formatted diagnostic string
        """
        match self.output_format:
            case OutputFormat.RUST:
                return self._format_rust(diagnostic)
            case OutputFormat.SIMPLE:
                return self._format_simple(diagnostic)
            case OutputFormat.JSON:
                return self._format_json(diagnostic)

    def _format_rust(self, diagnostic: Diagnostic) -> str:
        lines = [
            f"{diagnostic.severity}[{diagnostic.code.name}]: "
            f"{_escape_control_chars(diagnostic.message)}"
        ]

        if diagnostic.span is not None:
            lines.append(
                f"  --> line {diagnostic.span.line}, column {diagnostic.span.column}"
            )
        elif diagnostic.type_name is not None:
            location = f"type {diagnostic.type_name}"
            if diagnostic.relation is not None:
                location += f", relation {diagnostic.relation}"
            lines.append(f"  --> {location}")

        if diagnostic.hint:
            lines.append(f"  = help: {_escape_control_chars(diagnostic.hint)}")
        if diagnostic.help_url:
            lines.append(f"  = note: see {diagnostic.help_url}")

        return "\n".join(lines)

    def _format_simple(self, diagnostic: Diagnostic) -> str:
        return f"{diagnostic.code.name}: {_escape_control_chars(diagnostic.message)}"

    def _format_json(self, diagnostic: Diagnostic) -> str:
        data: dict[str, object] = {
            "code": diagnostic.code.name,
            "message": diagnostic.message,
            "severity": diagnostic.severity,
        }
        if diagnostic.span is not None:
            data["line"] = diagnostic.span.line
            data["column"] = diagnostic.span.column
        if diagnostic.type_name is not None:
            data["type"] = diagnostic.type_name
        if diagnostic.relation is not None:
            data["relation"] = diagnostic.relation
        if diagnostic.hint:
            data["hint"] = diagnostic.hint
        return json.dumps(data, ensure_ascii=False)
