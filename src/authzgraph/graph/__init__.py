"""Relation graph: multigraph storage, model-to-graph builder and DOT output.

Python 3.13+.
"""

from .builder import GraphBuilder, build_graph, relation_label, source_label
from .dot import DotRenderer, quote_id, render_dot
from .multigraph import Edge, Node, RelationGraph

__all__ = [
    "DotRenderer",
    "Edge",
    "GraphBuilder",
    "Node",
    "RelationGraph",
    "build_graph",
    "quote_id",
    "relation_label",
    "render_dot",
    "source_label",
]
