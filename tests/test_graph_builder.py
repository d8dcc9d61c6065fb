"""Tests for GraphBuilder: edge rules per rewrite variant, ordering, errors."""

import pytest
from hypothesis import given, settings

from authzgraph.diagnostics import (
    ModelLookupError,
    RewriteDepthExceededError,
    UnsupportedRewriteVariantError,
)
from authzgraph.graph import GraphBuilder, RelationGraph, build_graph, relation_label, source_label
from authzgraph.model import (
    AuthorizationModel,
    ComputedReference,
    Direct,
    RelatedTypeRef,
    TypeDefinition,
    Union,
    parse_model,
)
from tests.strategies import authorization_models


def _edges(graph: RelationGraph) -> list[tuple[str, str, int, str, bool]]:
    """Edges as (from label, to label, sequence, context, computed)."""
    return [
        (graph.label(e.source), graph.label(e.target), e.sequence, e.context, e.computed)
        for e in graph.edges
    ]


# ============================================================================
# LABELS
# ============================================================================


class TestLabels:
    """Tests for node label construction."""

    def test_relation_label(self) -> None:
        assert relation_label("document", "viewer") == "document#viewer"

    @pytest.mark.parametrize(
        ("ref", "expected"),
        [
            (RelatedTypeRef("user"), "user"),
            (RelatedTypeRef("user", wildcard=True), "user:*"),
            (RelatedTypeRef("group", relation="member"), "group#member"),
            (RelatedTypeRef("user", condition="c1"), " user[with c1]"),
            (RelatedTypeRef("user", wildcard=True, condition="c3"), " user[with c3]:*"),
            (RelatedTypeRef("group", relation="member", condition="c"), " group[with c]#member"),
        ],
    )
    def test_source_label(self, ref: RelatedTypeRef, expected: str) -> None:
        assert source_label(ref) == expected


# ============================================================================
# EDGE RULES
# ============================================================================


class TestEdgeRules:
    """Tests for the edges each rewrite variant contributes."""

    def test_direct_edges(self) -> None:
        """Each assignable type becomes one non-computed edge without context."""
        graph = build_graph(
            parse_model("type doc\n  relations\n    define r: [user, user:*, group#member]\n")
        )
        assert _edges(graph) == [
            ("user", "doc#r", 1, "", False),
            ("user:*", "doc#r", 2, "", False),
            ("group#member", "doc#r", 3, "", False),
        ]

    def test_computed_edge(self) -> None:
        graph = build_graph(
            parse_model("type doc\n  relations\n    define a: [user]\n    define b: a\n")
        )
        assert ("doc#a", "doc#b", 2, "", True) in _edges(graph)

    def test_tupleset_edge_per_related_type(self) -> None:
        """One edge per type assignable to the tupleset, with context."""
        graph = build_graph(
            parse_model(
                "type doc\n  relations\n"
                "    define parent: [folder, drive]\n"
                "    define viewer: viewer from parent\n"
            )
        )
        assert _edges(graph)[-2:] == [
            ("folder#viewer", "doc#viewer", 3, "(doc#parent)", False),
            ("drive#viewer", "doc#viewer", 4, "(doc#parent)", False),
        ]

    def test_tupleset_source_ignores_condition(self) -> None:
        """The tupleset source is the related type's relation node."""
        graph = build_graph(
            parse_model(
                "type doc\n  relations\n"
                "    define parent: [folder with c]\n"
                "    define viewer: viewer from parent\n"
            )
        )
        assert ("folder#viewer", "doc#viewer", 2, "(doc#parent)", False) in _edges(graph)

    def test_conditioned_sources_are_distinct_nodes(self) -> None:
        graph = build_graph(
            parse_model("type doc\n  relations\n    define r: [user, user with c]\n")
        )
        assert [e[0] for e in _edges(graph)] == ["user", " user[with c]"]

    def test_union_is_transparent(self) -> None:
        graph = build_graph(
            parse_model(
                "type doc\n  relations\n    define a: [user]\n    define b: [user] or a\n"
            )
        )
        assert _edges(graph) == [
            ("user", "doc#a", 1, "", False),
            ("user", "doc#b", 2, "", False),
            ("doc#a", "doc#b", 3, "", True),
        ]

    def test_intersection_only_computed_children(self) -> None:
        """Direct and tupleset children of an intersection add no edge.

        Intersection never grants through one child alone; only the
        computed children are drawn.
        """
        graph = build_graph(
            parse_model(
                "type doc\n  relations\n"
                "    define parent: [folder]\n"
                "    define a: [user]\n"
                "    define c: [user] and a and viewer from parent\n"
            )
        )
        into_c = [e for e in _edges(graph) if e[1] == "doc#c"]
        assert into_c == [("doc#a", "doc#c", 2, "", True)]

    def test_difference_only_computed_children(self) -> None:
        graph = build_graph(
            parse_model(
                "type doc\n  relations\n"
                "    define a: [user]\n"
                "    define b: [user]\n"
                "    define c: a but not b\n"
                "    define d: [user] but not b\n"
            )
        )
        into = {(e[0], e[1]): e[4] for e in _edges(graph) if e[1] in ("doc#c", "doc#d")}
        assert into == {
            ("doc#a", "doc#c"): True,
            ("doc#b", "doc#c"): True,
            ("doc#b", "doc#d"): True,
        }

    def test_nested_union_under_intersection_contributes_nothing(self) -> None:
        graph = build_graph(
            parse_model(
                "type doc\n  relations\n"
                "    define a: [user]\n"
                "    define c: (a or [user]) and a\n"
            )
        )
        into_c = [e for e in _edges(graph) if e[1] == "doc#c"]
        assert into_c == [("doc#a", "doc#c", 2, "", True)]

    def test_duplicate_reference_single_edge(self) -> None:
        """Referencing the same relation twice yields one edge."""
        graph = build_graph(
            parse_model("type doc\n  relations\n    define a: [user]\n    define b: a or a\n")
        )
        assert graph.edge_count == 2


# ============================================================================
# ORDERING AND NODE SET
# ============================================================================


class TestOrdering:
    """Tests for deterministic node ids and sequence numbers."""

    def test_types_then_relations_sorted(self) -> None:
        """Nodes are created type, type:*, then relations alphabetically."""
        graph = build_graph(
            parse_model(
                "type zeta\n  relations\n    define b: [user]\n    define a: [user]\n"
                "type alpha\n"
            )
        )
        assert [n.label for n in graph.nodes] == [
            "alpha",
            "alpha:*",
            "zeta",
            "zeta:*",
            "zeta#a",
            "user",
            "zeta#b",
        ]

    def test_each_build_starts_fresh(self) -> None:
        builder = GraphBuilder()
        model = parse_model("type doc\n  relations\n    define a: [user]\n")
        first = builder.build(model)
        second = builder.build(model)
        assert first.edges == second.edges
        assert first.edges[0].sequence == 1


# ============================================================================
# ERRORS
# ============================================================================


class TestBuildErrors:
    """Tests for failures that abort the build."""

    def test_unknown_computed_relation(self) -> None:
        model = parse_model("type doc\n  relations\n    define viewer: editor\n")
        with pytest.raises(ModelLookupError) as exc_info:
            build_graph(model)
        assert exc_info.value.type_name == "doc"
        assert exc_info.value.relation == "editor"

    def test_unknown_tupleset(self) -> None:
        model = parse_model("type doc\n  relations\n    define viewer: viewer from parent\n")
        with pytest.raises(ModelLookupError, match="'parent' not found on type 'doc'"):
            build_graph(model)

    def test_unsupported_variant(self) -> None:
        model = AuthorizationModel(
            type_definitions=(
                TypeDefinition(type="doc", relations={"r": "this"}),  # type: ignore[dict-item]
            )
        )
        with pytest.raises(UnsupportedRewriteVariantError, match="'str' in 'doc#r'"):
            build_graph(model)

    def test_depth_exceeded(self) -> None:
        """A rewrite tree nested beyond max_depth is rejected."""
        rewrite: object = ComputedReference("a")
        for _ in range(10):
            rewrite = Union((rewrite, Direct()))
        model = AuthorizationModel(
            type_definitions=(
                TypeDefinition(type="doc", relations={"a": rewrite}),  # type: ignore[dict-item]
            )
        )
        with pytest.raises(RewriteDepthExceededError):
            GraphBuilder(max_depth=5).build(model)
        assert GraphBuilder(max_depth=20).build(model).edge_count == 1


# ============================================================================
# PROPERTIES
# ============================================================================


class TestBuilderProperties:
    """Property-based tests over generated models."""

    @given(authorization_models())
    @settings(max_examples=100)
    def test_sequences_contiguous(self, model: AuthorizationModel) -> None:
        """PROPERTY: sequence numbers are exactly 1..E."""
        graph = build_graph(model)
        assert [e.sequence for e in graph.edges] == list(range(1, graph.edge_count + 1))

    @given(authorization_models())
    @settings(max_examples=100)
    def test_deterministic(self, model: AuthorizationModel) -> None:
        """PROPERTY: two builds of one model are identical."""
        first = build_graph(model)
        second = build_graph(model)
        assert first.nodes == second.nodes
        assert first.edges == second.edges

    @given(authorization_models())
    @settings(max_examples=100)
    def test_node_set(self, model: AuthorizationModel) -> None:
        """PROPERTY: nodes are types, wildcards, relations and edge sources only."""
        graph = build_graph(model)
        declared = set()
        for typedef in model.type_definitions:
            declared |= {typedef.type, f"{typedef.type}:*"}
            declared |= {relation_label(typedef.type, r) for r in typedef.relations}
        sources = {graph.label(e.source) for e in graph.edges}
        targets = {graph.label(e.target) for e in graph.edges}
        assert {n.label for n in graph.nodes} == declared | sources
        assert targets <= declared

    @given(authorization_models())
    @settings(max_examples=100)
    def test_unique_edge_keys(self, model: AuthorizationModel) -> None:
        """PROPERTY: no two edges share (from, to, context)."""
        graph = build_graph(model)
        keys = [(e.source, e.target, e.context) for e in graph.edges]
        assert len(keys) == len(set(keys))
