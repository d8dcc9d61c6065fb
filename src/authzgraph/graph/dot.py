"""Serialize a RelationGraph to Graphviz DOT.

Output layout:

    digraph {
    graph [
    rankdir=BT
    ];

    // Node definitions.
    2 [label="document#editor"];
    3 [label=user];

    // Edge definitions.
    2 -> 6 [
    label=6
    headlabel=""
    style=dashed
    ];
    }

Nodes are written in ascending id order, edges sorted by
(source, target, sequence). `headlabel` is always written, empty when
the edge has no tupleset context. `style=dashed` marks computed edges.
A section is omitted when it has no entries.

Python 3.13+. Zero external dependencies.
"""

import re

from authzgraph.constants import DEFAULT_RANKDIR, VALID_RANKDIRS
from authzgraph.diagnostics import ErrorTemplate, RenderError

from .multigraph import Edge, RelationGraph

__all__ = ["DotRenderer", "quote_id", "render_dot"]

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_NUMERAL = re.compile(r"-?(\.[0-9]+|[0-9]+(\.[0-9]*)?)")

# Reserved words cannot appear as bare IDs (DOT keywords are case-insensitive).
_KEYWORDS = frozenset({"node", "edge", "graph", "digraph", "subgraph", "strict"})


def quote_id(value: str) -> str:
    """Render a DOT ID, quoting unless it is a plain identifier or numeral.

    Examples:
        >>> quote_id("user")
        'user'
        >>> quote_id("document#viewer")
        '"document#viewer"'
    """
    if (
        _IDENTIFIER.fullmatch(value) or _NUMERAL.fullmatch(value)
    ) and value.lower() not in _KEYWORDS:
        return value
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class DotRenderer:
    """RelationGraph → DOT text.

    Stateless: all output is built locally in render().

    Usage:
        >>> renderer = DotRenderer(rankdir="LR")
        >>> text = renderer.render(graph)
    """

    __slots__ = ("_rankdir",)

    def __init__(self, rankdir: str = DEFAULT_RANKDIR) -> None:
        """Initialize renderer.

        Raises:
            RenderError: If rankdir is not one of BT, TB, LR, RL
        """
        if rankdir not in VALID_RANKDIRS:
            raise RenderError(
                ErrorTemplate.invalid_graph_attribute("rankdir", rankdir, VALID_RANKDIRS)
            )
        self._rankdir = rankdir

    @property
    def rankdir(self) -> str:
        return self._rankdir

    def render(self, graph: RelationGraph) -> str:
        """Render the graph.

        Raises:
            RenderError: If an edge references a node that is not in the graph
        """
        output: list[str] = []
        output.append("digraph {")
        output.append("graph [")
        output.append(f"rankdir={quote_id(self._rankdir)}")
        output.append("];")

        nodes = graph.nodes
        if nodes:
            output.append("")
            output.append("// Node definitions.")
            for node in nodes:
                output.append(f"{node.id} [label={quote_id(node.label)}];")

        edges = sorted(graph.edges, key=lambda e: (e.source, e.target, e.sequence))
        if edges:
            output.append("")
            output.append("// Edge definitions.")
            for edge in edges:
                self._check_endpoints(graph, edge)
                self._serialize_edge(edge, output)

        output.append("}")
        return "\n".join(output)

    @staticmethod
    def _check_endpoints(graph: RelationGraph, edge: Edge) -> None:
        for node_id in (edge.source, edge.target):
            if not graph.has_node_id(node_id):
                raise RenderError(ErrorTemplate.dangling_edge(edge.sequence, node_id))

    @staticmethod
    def _serialize_edge(edge: Edge, output: list[str]) -> None:
        output.append(f"{edge.source} -> {edge.target} [")
        output.append(f"label={edge.sequence}")
        output.append(f"headlabel={quote_id(edge.context)}")
        if edge.computed:
            output.append("style=dashed")
        output.append("];")


def render_dot(graph: RelationGraph, *, rankdir: str = DEFAULT_RANKDIR) -> str:
    """Render a graph with a one-off DotRenderer."""
    return DotRenderer(rankdir).render(graph)
