"""Tests for the modeling-language parser.

Covers headers, type blocks, every rewrite form, direct assignment
lists, condition blocks, and the error paths with their positions.
"""

import pytest

from authzgraph.core.depth_guard import DepthGuard
from authzgraph.diagnostics import DiagnosticCode, ModelSyntaxError, RewriteDepthExceededError
from authzgraph.model import (
    ComputedReference,
    Difference,
    Direct,
    Intersection,
    ModelParser,
    RelatedTypeRef,
    TuplesetReference,
    Union,
    parse_model,
)
from authzgraph.model.cursor import Cursor
from authzgraph.model.parser import ParseContext, parse_rewrite


def _rewrite(text: str) -> object:
    return parse_rewrite(Cursor(text, 0), ParseContext()).value


# ============================================================================
# HEADER AND TYPES
# ============================================================================


class TestHeader:
    """Tests for the `model schema X.Y` header."""

    def test_schema_version_recorded(self) -> None:
        """Declared schema version is carried on the model."""
        model = parse_model("model\n  schema 1.2\ntype user\n")
        assert model.schema_version == "1.2"

    def test_header_is_optional(self) -> None:
        """Sources without a header default to schema 1.1."""
        model = parse_model("type user\n")
        assert model.schema_version == "1.1"
        assert model.type_names() == ("user",)

    def test_unsupported_schema_rejected(self) -> None:
        """Schema 1.0 cannot be read."""
        with pytest.raises(ModelSyntaxError) as exc_info:
            parse_model("model\n  schema 1.0\ntype user\n")
        assert exc_info.value.diagnostic is not None
        assert exc_info.value.diagnostic.code == DiagnosticCode.UNSUPPORTED_SCHEMA
        assert exc_info.value.line == 2

    def test_missing_version_rejected(self) -> None:
        """`schema` without a version is a syntax error."""
        with pytest.raises(ModelSyntaxError):
            parse_model("model\n  schema\ntype user\n")


class TestTypeDefinitions:
    """Tests for type blocks."""

    def test_types_keep_declaration_order(self) -> None:
        """type_definitions follow source order, not sorted order."""
        model = parse_model("type zebra\ntype apple\ntype mango\n")
        assert model.type_names() == ("zebra", "apple", "mango")

    def test_type_without_relations(self) -> None:
        """A bare type has no relations."""
        model = parse_model("type user\n")
        assert dict(model.type_definitions[0].relations) == {}

    def test_relations_parsed(self) -> None:
        """Each define becomes one relation."""
        model = parse_model(
            "type document\n  relations\n    define owner: [user]\n    define viewer: owner\n"
        )
        typedef = model.type_definitions[0]
        assert list(typedef.relations) == ["owner", "viewer"]
        assert typedef.relations["viewer"] == ComputedReference("owner")

    def test_comments_ignored(self) -> None:
        """`#` comments between tokens are skipped."""
        model = parse_model(
            "# users\ntype user\n\ntype doc # documents\n  relations\n"
            "    # who can see\n    define viewer: [user]\n"
        )
        assert model.type_names() == ("user", "doc")

    def test_duplicate_type_rejected(self) -> None:
        """Declaring a type twice is an error."""
        with pytest.raises(ModelSyntaxError) as exc_info:
            parse_model("type user\ntype user\n")
        assert exc_info.value.diagnostic is not None
        assert exc_info.value.diagnostic.code == DiagnosticCode.DUPLICATE_DEFINITION
        assert exc_info.value.line == 2

    def test_duplicate_relation_rejected(self) -> None:
        """Defining a relation twice on one type is an error."""
        source = "type doc\n  relations\n    define a: [user]\n    define a: [user]\n"
        with pytest.raises(ModelSyntaxError, match="Duplicate relation 'doc#a'"):
            parse_model(source)

    def test_unknown_top_level_token(self) -> None:
        """Only `type` and `condition` may start a top-level block."""
        with pytest.raises(ModelSyntaxError) as exc_info:
            parse_model("type user\nbogus thing\n")
        assert exc_info.value.line == 2
        assert exc_info.value.column == 1


# ============================================================================
# REWRITE EXPRESSIONS
# ============================================================================


class TestRewriteForms:
    """Tests for each rewrite form."""

    def test_direct(self) -> None:
        assert _rewrite("[user]") == Direct()

    def test_computed(self) -> None:
        assert _rewrite("editor") == ComputedReference("editor")

    def test_tupleset(self) -> None:
        """`viewer from parent` reads relation viewer through parent."""
        assert _rewrite("viewer from parent") == TuplesetReference(
            tupleset="parent", relation="viewer"
        )

    def test_union(self) -> None:
        assert _rewrite("[user] or editor or viewer from parent") == Union(
            (Direct(), ComputedReference("editor"), TuplesetReference("parent", "viewer"))
        )

    def test_intersection(self) -> None:
        assert _rewrite("a and b") == Intersection(
            (ComputedReference("a"), ComputedReference("b"))
        )

    def test_difference(self) -> None:
        assert _rewrite("a but not b") == Difference(
            ComputedReference("a"), ComputedReference("b")
        )

    def test_parentheses_nest(self) -> None:
        """Parentheses allow mixing operators."""
        assert _rewrite("(a or b) but not c") == Difference(
            Union((ComputedReference("a"), ComputedReference("b"))),
            ComputedReference("c"),
        )

    def test_mixed_operators_rejected(self) -> None:
        """`or` and `and` at one level need parentheses."""
        with pytest.raises(ModelSyntaxError) as exc_info:
            _rewrite("a or b and c")
        assert exc_info.value.diagnostic is not None
        assert exc_info.value.diagnostic.code == DiagnosticCode.MIXED_OPERATORS

    def test_operator_after_difference_rejected(self) -> None:
        """`but not` takes exactly one subtrahend."""
        with pytest.raises(ModelSyntaxError):
            _rewrite("a but not b or c")

    def test_but_without_not_rejected(self) -> None:
        with pytest.raises(ModelSyntaxError, match="'not' after 'but'"):
            _rewrite("a but b")

    def test_unclosed_parenthesis(self) -> None:
        with pytest.raises(ModelSyntaxError) as exc_info:
            _rewrite("(a or b")
        assert exc_info.value.diagnostic is not None
        assert exc_info.value.diagnostic.code == DiagnosticCode.UNEXPECTED_EOF

    def test_keyword_prefix_is_identifier(self) -> None:
        """`order` is a relation name, not the `or` operator."""
        assert _rewrite("order") == ComputedReference("order")

    def test_parenthesis_depth_limited(self) -> None:
        """Nesting beyond the guard raises RewriteDepthExceededError."""
        context = ParseContext(depth_guard=DepthGuard(max_depth=3))
        with pytest.raises(RewriteDepthExceededError):
            parse_rewrite(Cursor("((((a))))", 0), context)

    def test_parser_max_depth_option(self) -> None:
        """ModelParser passes max_depth to every relation."""
        source = "type doc\n  relations\n    define a: ((((b))))\n    define b: [user]\n"
        with pytest.raises(RewriteDepthExceededError):
            ModelParser(max_depth=2).parse(source)
        assert ModelParser(max_depth=10).parse(source).type_names() == ("doc",)


# ============================================================================
# DIRECT ASSIGNMENT LISTS
# ============================================================================


class TestDirectlyRelatedTypes:
    """Tests for `[...]` entries recorded on the type definition."""

    def _related(self, rewrite: str) -> tuple[RelatedTypeRef, ...]:
        model = parse_model(f"type doc\n  relations\n    define r: {rewrite}\n")
        return model.type_definitions[0].directly_related_user_types["r"]

    def test_all_shapes(self) -> None:
        """Plain, wildcard, userset and conditioned entries."""
        assert self._related("[user, user:*, group#member, user with non_expired]") == (
            RelatedTypeRef("user"),
            RelatedTypeRef("user", wildcard=True),
            RelatedTypeRef("group", relation="member"),
            RelatedTypeRef("user", condition="non_expired"),
        )

    def test_conditioned_wildcard(self) -> None:
        assert self._related("[user:* with c3]") == (
            RelatedTypeRef("user", wildcard=True, condition="c3"),
        )

    def test_multiline_list(self) -> None:
        """Entries may be spread over several lines."""
        assert self._related("[\n      user,\n      group#member\n    ]") == (
            RelatedTypeRef("user"),
            RelatedTypeRef("group", relation="member"),
        )

    def test_entries_collected_across_terms(self) -> None:
        """Direct lists anywhere in the rewrite contribute, without duplicates."""
        assert self._related("[user] or ([user, team#member] and editor)") == (
            RelatedTypeRef("user"),
            RelatedTypeRef("team", relation="member"),
        )

    def test_relation_without_direct_list_absent(self) -> None:
        """Relations with no `[...]` have no metadata entry."""
        model = parse_model("type doc\n  relations\n    define a: [user]\n    define b: a\n")
        assert "b" not in model.type_definitions[0].directly_related_user_types

    def test_unclosed_list(self) -> None:
        with pytest.raises(ModelSyntaxError):
            parse_model("type doc\n  relations\n    define r: [user, group\n")


# ============================================================================
# CONDITIONS
# ============================================================================


class TestConditions:
    """Tests for condition blocks."""

    def test_condition_parsed(self) -> None:
        """Name, parameter types and raw expression are kept."""
        model = parse_model(
            "type user\n"
            "condition non_expired(current_time: timestamp, grants: map<string>) {\n"
            "  current_time < expires\n"
            "}\n"
        )
        (condition,) = model.conditions
        assert condition.name == "non_expired"
        assert dict(condition.parameters) == {
            "current_time": "timestamp",
            "grants": "map<string>",
        }
        assert condition.expression == "current_time < expires"

    def test_condition_between_types(self) -> None:
        """Conditions and types may be interleaved."""
        model = parse_model("type a\ncondition c(x: int) { x < 1 }\ntype b\n")
        assert model.type_names() == ("a", "b")
        assert [c.name for c in model.conditions] == ["c"]

    def test_duplicate_condition_rejected(self) -> None:
        source = "condition c(x: int) { x }\ncondition c(x: int) { x }\n"
        with pytest.raises(ModelSyntaxError, match="Duplicate condition 'c'"):
            parse_model(source)

    def test_malformed_parameter_rejected(self) -> None:
        with pytest.raises(ModelSyntaxError):
            parse_model("condition c(x) { x }\n")


# ============================================================================
# LIMITS
# ============================================================================


class TestSourceLimits:
    """Tests for the source size limit."""

    def test_oversized_source_rejected(self) -> None:
        parser = ModelParser(max_source_size=10)
        with pytest.raises(ModelSyntaxError) as exc_info:
            parser.parse("type user\ntype group\n")
        assert exc_info.value.diagnostic is not None
        assert exc_info.value.diagnostic.code == DiagnosticCode.SOURCE_TOO_LARGE

    def test_empty_source_is_empty_model(self) -> None:
        assert parse_model("").type_definitions == ()
