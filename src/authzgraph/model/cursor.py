"""Immutable cursor infrastructure for type-safe parsing.

Implements the immutable cursor pattern for zero-`None` parsing.
Python 3.13+. Zero external dependencies.

Design Philosophy:
    - Cursor is immutable (frozen dataclass)
    - EOF is a state (is_eof), not a return value
    - Every advance() returns NEW cursor (prevents infinite loops)
    - Line:column computed on-demand (O(n) only for errors)
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

from authzgraph.diagnostics import SourceSpan

__all__ = ["Cursor", "ParseResult", "is_identifier_char", "is_identifier_start"]


def is_identifier_start(char: str) -> bool:
    """Check if character can start a type, relation or condition name."""
    return char.isascii() and (char.isalpha() or char == "_")


def is_identifier_char(char: str) -> bool:
    """Check if character can continue a type, relation or condition name."""
    return char.isascii() and (char.isalnum() or char in "_-")


@dataclass(frozen=True, slots=True)
class Cursor:
    """Immutable source position tracker.

    Example:
        >>> cursor = Cursor("type user", 0)
        >>> cursor.current
        't'
        >>> cursor.advance(5).current
        'u'
        >>> cursor.current  # Original unchanged (immutability)
        't'
    """

    source: str
    pos: int

    @property
    def is_eof(self) -> bool:
        """Check if at end of input."""
        return self.pos >= len(self.source)

    @property
    def current(self) -> str:
        """Get current character.

        Raises:
            EOFError: If at end of input
        """
        if self.is_eof:
            msg = f"Unexpected EOF at position {self.pos}"
            raise EOFError(msg)
        return self.source[self.pos]

    def peek(self, offset: int = 0) -> str | None:
        """Peek at character with offset without advancing.

        Returns:
            Character at position + offset, or None if beyond EOF
        """
        target_pos = self.pos + offset
        if target_pos >= len(self.source):
            return None
        return self.source[target_pos]

    def advance(self, count: int = 1) -> "Cursor":
        """Return new cursor advanced by count positions."""
        new_pos = min(self.pos + count, len(self.source))
        return Cursor(self.source, new_pos)

    def slice_to(self, end_pos: int) -> str:
        """Extract source slice from current position to end_pos."""
        return self.source[self.pos : end_pos]

    def slice_ahead(self, n: int) -> str:
        """Get next n characters without advancing cursor."""
        return self.source[self.pos : self.pos + n]

    def expect(self, char: str) -> "Cursor | None":
        """Consume character if it matches expected, return None otherwise."""
        if not self.is_eof and self.current == char:
            return self.advance()
        return None

    def skip_spaces(self) -> "Cursor":
        """Skip inline whitespace (spaces and tabs)."""
        c = self
        while not c.is_eof and c.current in (" ", "\t"):
            c = c.advance()
        return c

    def skip_to_line_end(self) -> "Cursor":
        """Advance to the next newline (not past it)."""
        end = self.source.find("\n", self.pos)
        return Cursor(self.source, len(self.source) if end < 0 else end)

    def skip_blank(self) -> "Cursor":
        """Skip whitespace, newlines and `#` comments.

        A `#` only starts a comment here, between tokens. Inside a
        userset reference (group#member) the parser consumes it directly.
        """
        c = self
        while not c.is_eof:
            if c.current in (" ", "\t", "\n", "\r"):
                c = c.advance()
            elif c.current == "#":
                c = c.skip_to_line_end()
            else:
                break
        return c

    def compute_line_col(self) -> tuple[int, int]:
        """Compute line and column for current position (1-indexed).

        Performance:
            O(n) where n = current position. Only call for error reporting.
        """
        line = self.source.count("\n", 0, self.pos) + 1
        last_newline = self.source.rfind("\n", 0, self.pos)
        col = self.pos - last_newline if last_newline >= 0 else self.pos + 1
        return (line, col)

    def span(self, end: int | None = None) -> SourceSpan:
        """SourceSpan from the current position to end (default: one character)."""
        line, column = self.compute_line_col()
        if end is None:
            end = min(self.pos + 1, len(self.source))
        return SourceSpan(start=self.pos, end=max(end, self.pos), line=line, column=column)


T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class ParseResult(Generic[T]):
    """Parser result containing parsed value and new cursor position.

    Every sub-parser has the signature:
        def parse_foo(cursor: Cursor, ...) -> ParseResult[Foo]

    and raises ModelSyntaxError on failure.
    """

    value: T
    cursor: Cursor
