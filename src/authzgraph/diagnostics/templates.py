"""Error message templates.

Centralized error message templates for testable, consistent error messages.
Python 3.13+. Zero external dependencies.
"""

from .codes import Diagnostic, DiagnosticCode, SourceSpan


class ErrorTemplate:
    """Centralized error message templates.

    All error messages are created here. NO f-strings in exception constructors!
    """

    _DOCS_BASE = "https://openfga.dev/docs/configuration-language"

    # ------------------------------------------------------------------
    # Lookup errors
    # ------------------------------------------------------------------

    @staticmethod
    def type_not_found(type_name: str, relation: str | None = None) -> Diagnostic:
        """Type referenced by a rewrite or lookup is not defined.

        Args:
            type_name: The type that was not found
            relation: Relation being resolved when the lookup failed

        Returns:
            Diagnostic for TYPE_NOT_FOUND
        """
        msg = f"Type '{type_name}' not found"
        if relation is not None:
            msg += f" (while resolving relation '{relation}')"
        return Diagnostic(
            code=DiagnosticCode.TYPE_NOT_FOUND,
            message=msg,
            hint="Check that the type is declared in the model",
            help_url=f"{ErrorTemplate._DOCS_BASE}#type-definitions",
            type_name=type_name,
            relation=relation,
        )

    @staticmethod
    def relation_not_found(type_name: str, relation: str) -> Diagnostic:
        """Relation referenced by a rewrite is not defined on its type.

        Args:
            type_name: The type that should define the relation
            relation: The relation name that was not found

        Returns:
            Diagnostic for RELATION_NOT_FOUND
        """
        msg = f"Relation '{relation}' not found on type '{type_name}'"
        return Diagnostic(
            code=DiagnosticCode.RELATION_NOT_FOUND,
            message=msg,
            hint="Define the relation on the type or fix the reference",
            help_url=f"{ErrorTemplate._DOCS_BASE}#relation-definitions",
            type_name=type_name,
            relation=relation,
        )

    # ------------------------------------------------------------------
    # Rewrite errors
    # ------------------------------------------------------------------

    @staticmethod
    def unsupported_rewrite(type_name: str, relation: str, variant: str) -> Diagnostic:
        """Rewrite node outside the closed variant set.

        Args:
            type_name: Type owning the relation
            relation: Relation whose rewrite contains the node
            variant: Name of the offending variant (class name or JSON key)

        Returns:
            Diagnostic for UNSUPPORTED_REWRITE
        """
        msg = (
            f"Unsupported rewrite variant '{variant}' "
            f"in '{type_name}#{relation}'"
        )
        return Diagnostic(
            code=DiagnosticCode.UNSUPPORTED_REWRITE,
            message=msg,
            hint="The model was produced by a newer schema than this builder supports",
            type_name=type_name,
            relation=relation,
        )

    @staticmethod
    def rewrite_depth_exceeded(max_depth: int) -> Diagnostic:
        """Rewrite tree nesting exceeds the configured depth limit.

        Args:
            max_depth: The depth limit that was exceeded

        Returns:
            Diagnostic for REWRITE_DEPTH_EXCEEDED
        """
        msg = f"Maximum rewrite nesting depth ({max_depth}) exceeded"
        return Diagnostic(
            code=DiagnosticCode.REWRITE_DEPTH_EXCEEDED,
            message=msg,
            hint="Flatten nested parentheses or split the relation into helper relations",
        )

    # ------------------------------------------------------------------
    # Syntax errors
    # ------------------------------------------------------------------

    @staticmethod
    def unexpected_eof(expected: str, span: SourceSpan | None = None) -> Diagnostic:
        """Model source ended while more input was expected.

        Args:
            expected: Description of the expected construct
            span: Position of the end of input

        Returns:
            Diagnostic for UNEXPECTED_EOF
        """
        return Diagnostic(
            code=DiagnosticCode.UNEXPECTED_EOF,
            message=f"Unexpected end of input, expected {expected}",
            span=span,
        )

    @staticmethod
    def unexpected_token(found: str, expected: str, span: SourceSpan | None = None) -> Diagnostic:
        """Model source contains an unexpected token.

        Args:
            found: The token text that was found
            expected: Description of the expected construct
            span: Position of the token

        Returns:
            Diagnostic for UNEXPECTED_TOKEN
        """
        return Diagnostic(
            code=DiagnosticCode.UNEXPECTED_TOKEN,
            message=f"Expected {expected} but found {found!r}",
            span=span,
            help_url=ErrorTemplate._DOCS_BASE,
        )

    @staticmethod
    def mixed_operators(first: str, second: str, span: SourceSpan | None = None) -> Diagnostic:
        """Different set operators combined without parentheses.

        Args:
            first: Operator that started the expression
            second: Operator that followed it

        Returns:
            Diagnostic for MIXED_OPERATORS
        """
        return Diagnostic(
            code=DiagnosticCode.MIXED_OPERATORS,
            message=f"Cannot mix '{first}' and '{second}' without parentheses",
            span=span,
            hint=f"Wrap one side in parentheses, e.g. (a {first} b) {second} c",
        )

    @staticmethod
    def duplicate_definition(kind: str, name: str, span: SourceSpan | None = None) -> Diagnostic:
        """Type, relation or condition declared twice.

        Args:
            kind: "type", "relation" or "condition"
            name: The duplicated name

        Returns:
            Diagnostic for DUPLICATE_DEFINITION
        """
        return Diagnostic(
            code=DiagnosticCode.DUPLICATE_DEFINITION,
            message=f"Duplicate {kind} '{name}'",
            span=span,
        )

    @staticmethod
    def unsupported_schema(version: str, span: SourceSpan | None = None) -> Diagnostic:
        """Model declares a schema version this tool cannot read.

        Args:
            version: The declared schema version

        Returns:
            Diagnostic for UNSUPPORTED_SCHEMA
        """
        return Diagnostic(
            code=DiagnosticCode.UNSUPPORTED_SCHEMA,
            message=f"Unsupported schema version '{version}'",
            span=span,
            hint="Migrate the model to schema 1.1",
        )

    @staticmethod
    def source_too_large(size: int, limit: int) -> Diagnostic:
        """Model source exceeds the configured size limit."""
        return Diagnostic(
            code=DiagnosticCode.SOURCE_TOO_LARGE,
            message=f"Model source is {size} characters, limit is {limit}",
        )

    @staticmethod
    def invalid_json_model(detail: str) -> Diagnostic:
        """JSON model is malformed or misses required keys.

        Args:
            detail: Description of what was wrong

        Returns:
            Diagnostic for INVALID_JSON_MODEL
        """
        return Diagnostic(
            code=DiagnosticCode.INVALID_JSON_MODEL,
            message=f"Invalid JSON authorization model: {detail}",
        )

    # ------------------------------------------------------------------
    # Render errors
    # ------------------------------------------------------------------

    @staticmethod
    def invalid_graph_attribute(key: str, value: str, allowed: frozenset[str]) -> Diagnostic:
        """Graph-level DOT attribute has an unsupported value."""
        return Diagnostic(
            code=DiagnosticCode.INVALID_GRAPH_ATTRIBUTE,
            message=f"Invalid graph attribute {key}={value!r}",
            hint=f"Use one of: {', '.join(sorted(allowed))}",
        )

    @staticmethod
    def dangling_edge(sequence: int, node_id: int) -> Diagnostic:
        """Edge references a node that is not part of the rendered graph."""
        return Diagnostic(
            code=DiagnosticCode.DANGLING_EDGE,
            message=f"Edge {sequence} references unknown node {node_id}",
        )
