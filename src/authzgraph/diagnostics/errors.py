"""authzgraph exception hierarchy with structured diagnostics.

All exceptions optionally store a Diagnostic for rich error information.

Hierarchy:
    AuthzGraphError (base)
    ├─ ModelError (the model cannot be turned into a graph)
    │  ├─ ModelLookupError (unknown type or relation)
    │  ├─ UnsupportedRewriteVariantError (variant outside the closed set)
    │  ├─ RewriteDepthExceededError (rewrite tree too deep)
    │  └─ ModelSyntaxError (DSL or JSON source could not be read)
    └─ RenderError (graph could not be serialized)

Python 3.13+. Zero external dependencies.
"""

from .codes import Diagnostic
from .formatter import DiagnosticFormatter, OutputFormat


class AuthzGraphError(Exception):
    """Base exception for all authzgraph errors.

    Attributes:
        diagnostic: Structured diagnostic information (optional)
    """

    def __init__(self, message: str | Diagnostic) -> None:
        """Initialize AuthzGraphError.

        Args:
            message: Error message string OR Diagnostic object
        """
        if isinstance(message, Diagnostic):
            self.diagnostic: Diagnostic | None = message
            super().__init__(message.message)
        else:
            self.diagnostic = None
            super().__init__(message)

    def format(self, output_format: OutputFormat = OutputFormat.RUST) -> str:
        """Render the diagnostic in the given style, or the plain message."""
        if self.diagnostic is not None:
            return DiagnosticFormatter(output_format=output_format).format(self.diagnostic)
        return str(self)


class ModelError(AuthzGraphError):
    """The authorization model cannot be turned into a graph."""


class ModelLookupError(ModelError):
    """A rewrite references a type or relation the type system cannot resolve.

    Fatal: aborts the build.

    Example:
        type document
          relations
            define viewer: editor   ← 'editor' is not defined

    Attributes:
        type_name: Type that was searched
        relation: Relation that was searched (None for type lookups)
    """

    def __init__(
        self,
        message: str | Diagnostic,
        *,
        type_name: str = "",
        relation: str | None = None,
    ) -> None:
        super().__init__(message)
        self.type_name = type_name
        self.relation = relation


class UnsupportedRewriteVariantError(ModelError):
    """A rewrite node carries a variant outside the closed set.

    Unreachable for models built by this package; signals a version
    mismatch between the model producer and the graph builder.
    """


class RewriteDepthExceededError(ModelError):
    """Rewrite tree nesting exceeds the configured depth limit."""


class ModelSyntaxError(ModelError):
    """Model source (DSL or JSON) could not be read.

    Attributes:
        line: Line number of the failure (1-indexed, None if unknown)
        column: Column number of the failure (1-indexed, None if unknown)
    """

    def __init__(self, message: str | Diagnostic) -> None:
        super().__init__(message)
        span = self.diagnostic.span if self.diagnostic is not None else None
        self.line: int | None = span.line if span is not None else None
        self.column: int | None = span.column if span is not None else None


class RenderError(AuthzGraphError):
    """Graph could not be serialized to DOT.

    Surfaced unchanged to the caller.
    """
