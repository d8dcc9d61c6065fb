"""Parser for the authorization modeling language (schema 1.1).

Converts model source into an AuthorizationModel:

    model
      schema 1.1

    type user

    type document
      relations
        define parent: [folder]
        define editor: [user, group#member, user with non_expired]
        define viewer: [user, user:*] or editor or viewer from parent
        define auditor: (viewer and editor) but not blocked

    condition non_expired(current_time: timestamp, expires: timestamp) {
      current_time < expires
    }

Grammar (whitespace and `#` comments allowed between tokens):

    model       := header? (type | condition)*
    header      := "model" "schema" VERSION
    type        := "type" NAME ("relations" define*)?
    define      := "define" NAME ":" rewrite
    rewrite     := term (("or" term)+ | ("and" term)+ | "but not" term)?
    term        := direct | "(" rewrite ")" | NAME "from" NAME | NAME
    direct      := "[" related ("," related)* "]"
    related     := NAME (":*" | "#" NAME)? ("with" NAME)?
    condition   := "condition" NAME "(" params ")" "{" expression "}"

Different operators cannot be mixed at one level without parentheses.
The parser checks syntax only; references are resolved later by the
type system. Any failure raises ModelSyntaxError with line and column.

Python 3.13+.
"""

import logging
from dataclasses import dataclass, field

from authzgraph.constants import MAX_DEPTH, MAX_SOURCE_SIZE, SUPPORTED_SCHEMA_VERSIONS
from authzgraph.core.depth_guard import DepthGuard
from authzgraph.diagnostics import ErrorTemplate, ModelSyntaxError

from .ast import (
    AuthorizationModel,
    ComputedReference,
    Condition,
    Difference,
    Direct,
    Intersection,
    RelatedTypeRef,
    RewriteExpression,
    TuplesetReference,
    TypeDefinition,
    Union,
)
from .cursor import Cursor, ParseResult, is_identifier_char, is_identifier_start

__all__ = ["ModelParser", "ParseContext", "parse_model", "parse_rewrite"]

logger = logging.getLogger(__name__)

_DEFAULT_SCHEMA_VERSION = "1.1"


@dataclass(slots=True)
class ParseContext:
    """State shared while parsing one relation definition.

    Attributes:
        depth_guard: Limits parenthesis nesting
        related_types: Assignable user types collected from direct terms
    """

    depth_guard: DepthGuard = field(default_factory=DepthGuard)
    related_types: list[RelatedTypeRef] = field(default_factory=list)


# ============================================================================
# PRIMITIVES
# ============================================================================


def _token_at(cursor: Cursor) -> str:
    """Text of the token starting at cursor, for error messages."""
    if not is_identifier_char(cursor.current):
        return cursor.current
    end = cursor.pos
    while end < len(cursor.source) and is_identifier_char(cursor.source[end]):
        end += 1
    return cursor.slice_to(end)


def _unexpected(cursor: Cursor, expected: str) -> ModelSyntaxError:
    if cursor.is_eof:
        return ModelSyntaxError(ErrorTemplate.unexpected_eof(expected, cursor.span()))
    found = _token_at(cursor)
    return ModelSyntaxError(
        ErrorTemplate.unexpected_token(found, expected, cursor.span(cursor.pos + len(found)))
    )


def parse_identifier(cursor: Cursor) -> ParseResult[str]:
    """Parse a type, relation or condition name."""
    if cursor.is_eof or not is_identifier_start(cursor.current):
        raise _unexpected(cursor, "an identifier")
    start = cursor
    cursor = cursor.advance()
    while not cursor.is_eof and is_identifier_char(cursor.current):
        cursor = cursor.advance()
    return ParseResult(start.slice_to(cursor.pos), cursor)


def match_keyword(cursor: Cursor, keyword: str) -> Cursor | None:
    """Consume keyword if present as a whole word, return None otherwise."""
    if cursor.slice_ahead(len(keyword)) != keyword:
        return None
    after = cursor.advance(len(keyword))
    if not after.is_eof and is_identifier_char(after.current):
        return None
    return after


def _expect_keyword(cursor: Cursor, keyword: str) -> Cursor:
    after = match_keyword(cursor, keyword)
    if after is None:
        raise _unexpected(cursor, f"'{keyword}'")
    return after


def _expect_char(cursor: Cursor, char: str) -> Cursor:
    after = cursor.expect(char)
    if after is None:
        raise _unexpected(cursor, f"'{char}'")
    return after


def _match_operator(cursor: Cursor) -> tuple[str, Cursor] | None:
    """Match a set operator ("or", "and", "but not") at cursor."""
    for keyword in ("or", "and"):
        after = match_keyword(cursor, keyword)
        if after is not None:
            return keyword, after
    after = match_keyword(cursor, "but")
    if after is None:
        return None
    not_cursor = after.skip_spaces()
    after = match_keyword(not_cursor, "not")
    if after is None:
        raise _unexpected(not_cursor, "'not' after 'but'")
    return "but not", after


def _find_closing(cursor: Cursor, opening: str, closing: str, expected: str) -> int:
    """Position of the bracket closing the one just consumed."""
    depth = 1
    for pos in range(cursor.pos, len(cursor.source)):
        char = cursor.source[pos]
        if char == opening:
            depth += 1
        elif char == closing:
            depth -= 1
            if depth == 0:
                return pos
    raise _unexpected(Cursor(cursor.source, len(cursor.source)), expected)


# ============================================================================
# REWRITE EXPRESSIONS
# ============================================================================


def parse_related_type(cursor: Cursor) -> ParseResult[RelatedTypeRef]:
    """Parse one entry of a direct assignment list.

    Examples:
        user                → RelatedTypeRef("user")
        user:*              → RelatedTypeRef("user", wildcard=True)
        group#member        → RelatedTypeRef("group", relation="member")
        user with expiring  → RelatedTypeRef("user", condition="expiring")
    """
    type_name = parse_identifier(cursor)
    cursor = type_name.cursor
    relation: str | None = None
    wildcard = False

    if cursor.slice_ahead(2) == ":*":
        wildcard = True
        cursor = cursor.advance(2)
    elif (after_hash := cursor.expect("#")) is not None:
        relation_name = parse_identifier(after_hash)
        relation = relation_name.value
        cursor = relation_name.cursor

    condition: str | None = None
    with_cursor = match_keyword(cursor.skip_spaces(), "with")
    if with_cursor is not None:
        condition_name = parse_identifier(with_cursor.skip_spaces())
        condition = condition_name.value
        cursor = condition_name.cursor

    return ParseResult(
        RelatedTypeRef(type_name.value, relation=relation, wildcard=wildcard, condition=condition),
        cursor,
    )


def parse_direct(cursor: Cursor, context: ParseContext) -> ParseResult[Direct]:
    """Parse `[related, related, ...]` and record the assignable types."""
    cursor = _expect_char(cursor, "[").skip_blank()
    while True:
        ref = parse_related_type(cursor)
        if ref.value not in context.related_types:
            context.related_types.append(ref.value)
        cursor = ref.cursor.skip_blank()
        after_comma = cursor.expect(",")
        if after_comma is None:
            break
        cursor = after_comma.skip_blank()
    cursor = _expect_char(cursor, "]")
    return ParseResult(Direct(), cursor)


def parse_term(cursor: Cursor, context: ParseContext) -> ParseResult[RewriteExpression]:
    """Parse a direct list, a parenthesized rewrite or a relation reference."""
    if cursor.is_eof:
        raise _unexpected(cursor, "a relation expression")

    match cursor.current:
        case "[":
            direct = parse_direct(cursor, context)
            return ParseResult(direct.value, direct.cursor)
        case "(":
            with context.depth_guard:
                inner = parse_rewrite(cursor.advance().skip_blank(), context)
            cursor = _expect_char(inner.cursor.skip_blank(), ")")
            return ParseResult(inner.value, cursor)
        case _:
            name = parse_identifier(cursor)
            from_cursor = match_keyword(name.cursor.skip_spaces(), "from")
            if from_cursor is None:
                return ParseResult(ComputedReference(name.value), name.cursor)
            tupleset = parse_identifier(from_cursor.skip_spaces())
            return ParseResult(
                TuplesetReference(tupleset=tupleset.value, relation=name.value),
                tupleset.cursor,
            )


def _reject_trailing_operator(cursor: Cursor, operator: str) -> None:
    after = cursor.skip_blank()
    matched = _match_operator(after)
    if matched is not None:
        raise ModelSyntaxError(ErrorTemplate.mixed_operators(operator, matched[0], after.span()))


def parse_rewrite(cursor: Cursor, context: ParseContext) -> ParseResult[RewriteExpression]:
    """Parse a rewrite: one term, optionally combined by a single operator kind."""
    first = parse_term(cursor, context)
    matched = _match_operator(first.cursor.skip_blank())
    if matched is None:
        return first

    operator, cursor = matched
    if operator == "but not":
        subtract = parse_term(cursor.skip_blank(), context)
        _reject_trailing_operator(subtract.cursor, operator)
        return ParseResult(Difference(first.value, subtract.value), subtract.cursor)

    children = [first.value]
    while True:
        term = parse_term(cursor.skip_blank(), context)
        children.append(term.value)
        operator_cursor = term.cursor.skip_blank()
        matched = _match_operator(operator_cursor)
        if matched is None:
            break
        if matched[0] != operator:
            raise ModelSyntaxError(
                ErrorTemplate.mixed_operators(operator, matched[0], operator_cursor.span())
            )
        cursor = matched[1]

    node: RewriteExpression = (
        Union(tuple(children)) if operator == "or" else Intersection(tuple(children))
    )
    return ParseResult(node, term.cursor)


# ============================================================================
# TOP-LEVEL ENTRIES
# ============================================================================


def parse_header(cursor: Cursor) -> ParseResult[str]:
    """Parse `model schema X.Y`, returning the schema version."""
    cursor = _expect_keyword(cursor, "model").skip_blank()
    cursor = _expect_keyword(cursor, "schema").skip_spaces()
    start = cursor
    while not cursor.is_eof and (cursor.current.isdigit() or cursor.current == "."):
        cursor = cursor.advance()
    version = start.slice_to(cursor.pos)
    if not version:
        raise _unexpected(start, "a schema version")
    if version not in SUPPORTED_SCHEMA_VERSIONS:
        raise ModelSyntaxError(ErrorTemplate.unsupported_schema(version, start.span(cursor.pos)))
    return ParseResult(version, cursor)


def parse_type_definition(
    cursor: Cursor, max_depth: int = MAX_DEPTH
) -> ParseResult[TypeDefinition]:
    """Parse a type block and all of its relation definitions."""
    cursor = _expect_keyword(cursor, "type").skip_spaces()
    type_name = parse_identifier(cursor)
    cursor = type_name.cursor.skip_blank()

    relations: dict[str, RewriteExpression] = {}
    related_types: dict[str, tuple[RelatedTypeRef, ...]] = {}

    relations_cursor = match_keyword(cursor, "relations")
    if relations_cursor is not None:
        cursor = relations_cursor.skip_blank()
        while (define_cursor := match_keyword(cursor, "define")) is not None:
            relation = parse_identifier(define_cursor.skip_spaces())
            if relation.value in relations:
                raise ModelSyntaxError(
                    ErrorTemplate.duplicate_definition(
                        "relation",
                        f"{type_name.value}#{relation.value}",
                        cursor.span(relation.cursor.pos),
                    )
                )
            body = _expect_char(relation.cursor.skip_spaces(), ":").skip_blank()
            context = ParseContext(depth_guard=DepthGuard(max_depth))
            rewrite = parse_rewrite(body, context)
            relations[relation.value] = rewrite.value
            if context.related_types:
                related_types[relation.value] = tuple(context.related_types)
            cursor = rewrite.cursor.skip_blank()

    return ParseResult(
        TypeDefinition(
            type=type_name.value,
            relations=relations,
            directly_related_user_types=related_types,
        ),
        cursor,
    )


def _parse_parameters(text: str, span_cursor: Cursor) -> dict[str, str]:
    """Split `a: int, b: map<string>` into {"a": "int", "b": "map<string>"}."""
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for char in text:
        if char == "<":
            depth += 1
        elif char == ">":
            depth -= 1
        if char == "," and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    parts.append("".join(current))

    parameters: dict[str, str] = {}
    for part in parts:
        if not part.strip():
            continue
        name, sep, type_text = part.partition(":")
        if not sep or not name.strip() or not type_text.strip():
            raise ModelSyntaxError(
                ErrorTemplate.unexpected_token(part.strip(), "'name: type'", span_cursor.span())
            )
        parameters[name.strip()] = type_text.strip()
    return parameters


def parse_condition(cursor: Cursor) -> ParseResult[Condition]:
    """Parse a condition declaration. The body is kept as raw text."""
    cursor = _expect_keyword(cursor, "condition").skip_spaces()
    name = parse_identifier(cursor)

    params_start = _expect_char(name.cursor.skip_spaces(), "(")
    params_end = _find_closing(params_start, "(", ")", "')'")
    parameters = _parse_parameters(params_start.slice_to(params_end), params_start)

    body_start = _expect_char(Cursor(cursor.source, params_end + 1).skip_blank(), "{")
    body_end = _find_closing(body_start, "{", "}", "'}'")
    expression = body_start.slice_to(body_end).strip()

    return ParseResult(
        Condition(name=name.value, expression=expression, parameters=parameters),
        Cursor(cursor.source, body_end + 1),
    )


class ModelParser:
    """Model source → AuthorizationModel.

    Usage:
        >>> parser = ModelParser()
        >>> model = parser.parse('''
        ... model
        ...   schema 1.1
        ... type user
        ... type document
        ...   relations
        ...     define viewer: [user]
        ... ''')
        >>> model.type_names()
        ('user', 'document')

    Thread Safety:
        Stateless between calls; all state lives in local cursors.
    """

    __slots__ = ("_max_depth", "_max_source_size")

    def __init__(
        self,
        *,
        max_depth: int = MAX_DEPTH,
        max_source_size: int = MAX_SOURCE_SIZE,
    ) -> None:
        """Initialize parser.

        Args:
            max_depth: Maximum parenthesis nesting in a rewrite
            max_source_size: Maximum source length in characters
        """
        self._max_depth = max_depth
        self._max_source_size = max_source_size

    def parse(self, source: str) -> AuthorizationModel:
        """Parse model source.

        Raises:
            ModelSyntaxError: On any syntax error or duplicate declaration
            RewriteDepthExceededError: If parentheses nest deeper than max_depth
        """
        if len(source) > self._max_source_size:
            raise ModelSyntaxError(
                ErrorTemplate.source_too_large(len(source), self._max_source_size)
            )

        schema_version = _DEFAULT_SCHEMA_VERSION
        types: dict[str, TypeDefinition] = {}
        conditions: dict[str, Condition] = {}
        cursor = Cursor(source, 0).skip_blank()

        if match_keyword(cursor, "model") is not None:
            header = parse_header(cursor)
            schema_version = header.value
            cursor = header.cursor.skip_blank()

        while not cursor.is_eof:
            if match_keyword(cursor, "type") is not None:
                typedef = parse_type_definition(cursor, self._max_depth)
                if typedef.value.type in types:
                    raise ModelSyntaxError(
                        ErrorTemplate.duplicate_definition(
                            "type", typedef.value.type, cursor.span()
                        )
                    )
                types[typedef.value.type] = typedef.value
                cursor = typedef.cursor.skip_blank()
            elif match_keyword(cursor, "condition") is not None:
                condition = parse_condition(cursor)
                if condition.value.name in conditions:
                    raise ModelSyntaxError(
                        ErrorTemplate.duplicate_definition(
                            "condition", condition.value.name, cursor.span()
                        )
                    )
                conditions[condition.value.name] = condition.value
                cursor = condition.cursor.skip_blank()
            else:
                raise _unexpected(cursor, "'type' or 'condition'")

        logger.debug(
            "Parsed model (schema %s): %d types, %d conditions",
            schema_version,
            len(types),
            len(conditions),
        )
        return AuthorizationModel(
            type_definitions=tuple(types.values()),
            schema_version=schema_version,
            conditions=tuple(conditions.values()),
        )


def parse_model(source: str) -> AuthorizationModel:
    """Parse model source with default limits.

    Convenience wrapper around ModelParser().parse().
    """
    return ModelParser().parse(source)
