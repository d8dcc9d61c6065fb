"""Authorization model → relation graph.

Walks every relation's rewrite tree and emits one edge per way a user
can reach the relation:

    Direct               assignable type/userset/wildcard → relation
    ComputedReference    same-object relation → relation     (computed)
    TuplesetReference    related-type relation → relation    ("(T#ts)" context)
    Union                transparent, children in order
    Intersection         computed children only
    Difference           computed children only

Edges always point at the relation being defined. Intersection and
Difference never grant through a single child, so only their computed
children are drawn; direct and tupleset children contribute nothing.

Types and relations are visited in sorted order, so node ids and edge
sequence numbers are stable for a given model.

Python 3.13+.
"""

import logging
import time

from authzgraph.constants import (
    CONDITION_LABEL_FORMAT,
    MAX_DEPTH,
    RELATION_SEPARATOR,
    TUPLESET_CONTEXT_FORMAT,
    WILDCARD_SUFFIX,
)
from authzgraph.core.depth_guard import DepthGuard
from authzgraph.diagnostics import ErrorTemplate, UnsupportedRewriteVariantError
from authzgraph.model.ast import (
    AuthorizationModel,
    ComputedReference,
    Difference,
    Direct,
    Intersection,
    RelatedTypeRef,
    RewriteExpression,
    TuplesetReference,
    Union,
)
from authzgraph.model.typesystem import TypeSystem

from .multigraph import RelationGraph

__all__ = ["GraphBuilder", "build_graph", "relation_label", "source_label"]

logger = logging.getLogger(__name__)


def relation_label(type_name: str, relation: str) -> str:
    """Node label of a relation: ("document", "viewer") → "document#viewer"."""
    return f"{type_name}{RELATION_SEPARATOR}{relation}"


def source_label(ref: RelatedTypeRef) -> str:
    """Label of the node a directly assignable user type is drawn as.

    Examples:
        RelatedTypeRef("user")                          → "user"
        RelatedTypeRef("user", wildcard=True)           → "user:*"
        RelatedTypeRef("group", relation="member")      → "group#member"
        RelatedTypeRef("user", condition="expiring")    → " user[with expiring]"
    """
    type_part = ref.type
    if ref.condition:
        type_part = CONDITION_LABEL_FORMAT.format(type=ref.type, condition=ref.condition)
    if ref.relation is not None:
        return relation_label(type_part, ref.relation)
    if ref.wildcard:
        return f"{type_part}{WILDCARD_SUFFIX}"
    return type_part


class GraphBuilder:
    """Builds a RelationGraph from an AuthorizationModel.

    Each call to build() starts from an empty graph with its own node
    table and sequence counter.

    Usage:
        >>> graph = GraphBuilder().build(model)
        >>> graph.label(0)
        'document'
    """

    __slots__ = ("_max_depth",)

    def __init__(self, *, max_depth: int = MAX_DEPTH) -> None:
        self._max_depth = max_depth

    def build(self, model: AuthorizationModel) -> RelationGraph:
        """Translate every relation of every type into nodes and edges.

        Raises:
            ModelLookupError: A rewrite references an unknown type or relation
            UnsupportedRewriteVariantError: A rewrite node is not one of the six variants
            RewriteDepthExceededError: A rewrite tree nests deeper than max_depth
        """
        started = time.perf_counter()
        typesys = TypeSystem(model)
        graph = RelationGraph()
        depth_guard = DepthGuard(max_depth=self._max_depth)

        for typedef in sorted(typesys, key=lambda t: t.type):
            graph.add_or_get_node(typedef.type)
            graph.add_or_get_node(f"{typedef.type}{WILDCARD_SUFFIX}")

            for relation in sorted(typedef.relations):
                graph.add_or_get_node(relation_label(typedef.type, relation))
                walk = _RewriteWalk(typesys, graph, depth_guard, typedef.type, relation)
                walk.visit(typedef.relations[relation])

        logger.debug(
            "Built relation graph: %d types, %d nodes, %d edges in %.3f ms",
            len(model.type_definitions),
            graph.node_count,
            graph.edge_count,
            (time.perf_counter() - started) * 1000,
        )
        return graph


class _RewriteWalk:
    """Emits the edges of one relation's rewrite tree."""

    __slots__ = ("_depth_guard", "_graph", "_relation", "_target", "_type_name", "_typesys")

    def __init__(
        self,
        typesys: TypeSystem,
        graph: RelationGraph,
        depth_guard: DepthGuard,
        type_name: str,
        relation: str,
    ) -> None:
        self._typesys = typesys
        self._graph = graph
        self._depth_guard = depth_guard
        self._type_name = type_name
        self._relation = relation
        self._target = relation_label(type_name, relation)

    def visit(self, node: RewriteExpression) -> None:
        with self._depth_guard:
            match node:
                case Direct():
                    self._visit_direct()
                case ComputedReference(relation=relation):
                    self._add_computed(relation)
                case TuplesetReference(tupleset=tupleset, relation=relation):
                    self._visit_tupleset(tupleset, relation)
                case Union(children=children):
                    for child in children:
                        self.visit(child)
                case Intersection() | Difference():
                    for child in node.children:
                        if ComputedReference.guard(child):
                            self._add_computed(child.relation)
                case _:
                    raise UnsupportedRewriteVariantError(
                        ErrorTemplate.unsupported_rewrite(
                            self._type_name, self._relation, type(node).__name__
                        )
                    )

    def _visit_direct(self) -> None:
        refs = self._typesys.get_directly_related_user_types(self._type_name, self._relation)
        for ref in refs:
            self._graph.add_edge(source_label(ref), self._target)

    def _add_computed(self, relation: str) -> None:
        self._typesys.get_relation(self._type_name, relation)
        self._graph.add_edge(
            relation_label(self._type_name, relation), self._target, computed=True
        )

    def _visit_tupleset(self, tupleset: str, relation: str) -> None:
        context = TUPLESET_CONTEXT_FORMAT.format(type=self._type_name, relation=tupleset)
        for ref in self._typesys.get_directly_related_user_types(self._type_name, tupleset):
            self._graph.add_edge(relation_label(ref.type, relation), self._target, context)


def build_graph(model: AuthorizationModel, *, max_depth: int = MAX_DEPTH) -> RelationGraph:
    """Build a relation graph with default settings.

    Convenience wrapper around GraphBuilder().build().
    """
    return GraphBuilder(max_depth=max_depth).build(model)
