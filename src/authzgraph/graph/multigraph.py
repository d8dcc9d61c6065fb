"""Deterministic directed multigraph of relations.

Nodes are interned by label and receive dense ids in creation order.
Edges are explicit records, not endpoint pairs: two relations can be
connected more than once under different contexts (one direct edge and
one tupleset edge, for example), and each connection keeps its own
sequence number and computed flag.

    (from, to, context) is the identity of an edge.
    Adding it again is a no-op: no new sequence number, no update.

Sequence numbers come from a counter owned by the graph instance and
start at 1, so two graphs built from the same model are identical.

Python 3.13+. Zero external dependencies.
"""

from collections.abc import Iterator
from dataclasses import dataclass

__all__ = ["Edge", "Node", "RelationGraph"]


@dataclass(frozen=True, slots=True)
class Node:
    """Interned graph node.

    Attributes:
        id: Dense id, assigned in creation order starting at 0
        label: "document", "user:*", "document#viewer" or " user[with cond]"
    """

    id: int
    label: str


@dataclass(frozen=True, slots=True)
class Edge:
    """Directed edge from an assignable source to a relation.

    Attributes:
        source: Node id of the user / userset side
        target: Node id of the relation that grants through this edge
        sequence: Creation order, unique per graph, starting at 1
        context: Tupleset label "(document#parent)", or "" for none
        computed: True when the relation is defined as another relation
            on the same object
    """

    source: int
    target: int
    sequence: int
    context: str = ""
    computed: bool = False


class RelationGraph:
    """Node table plus ordered edge list.

    Example:
        >>> graph = RelationGraph()
        >>> graph.add_edge("document#editor", "document#viewer", computed=True)
        Edge(source=0, target=1, sequence=1, context='', computed=True)
        >>> graph.add_edge("document#editor", "document#viewer", computed=True) is None
        True
    """

    __slots__ = ("_edge_keys", "_edges", "_ids", "_labels", "_next_id", "_next_sequence")

    def __init__(self) -> None:
        self._labels: dict[int, str] = {}
        self._ids: dict[str, int] = {}
        self._edges: list[Edge] = []
        self._edge_keys: set[tuple[int, int, str]] = set()
        self._next_id = 0
        self._next_sequence = 1

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def add_or_get_node(self, label: str) -> int:
        """Return the id of label, creating the node on first use."""
        node_id = self._ids.get(label)
        if node_id is None:
            node_id = self._next_id
            self._next_id += 1
            self._ids[label] = node_id
            self._labels[node_id] = label
        return node_id

    def add_edge(
        self,
        from_label: str,
        to_label: str,
        context: str = "",
        *,
        computed: bool = False,
    ) -> Edge | None:
        """Connect two labels, creating missing nodes.

        Returns:
            The new Edge, or None when (from, to, context) already exists.
            An existing edge is never updated.
        """
        source = self.add_or_get_node(from_label)
        target = self.add_or_get_node(to_label)
        key = (source, target, context)
        if key in self._edge_keys:
            return None
        edge = Edge(
            source=source,
            target=target,
            sequence=self._next_sequence,
            context=context,
            computed=computed,
        )
        self._next_sequence += 1
        self._edge_keys.add(key)
        self._edges.append(edge)
        return edge

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def nodes(self) -> tuple[Node, ...]:
        """All nodes in ascending id order."""
        return tuple(Node(node_id, label) for node_id, label in sorted(self._labels.items()))

    @property
    def edges(self) -> tuple[Edge, ...]:
        """All edges in creation (sequence) order."""
        return tuple(self._edges)

    @property
    def node_count(self) -> int:
        return len(self._labels)

    @property
    def edge_count(self) -> int:
        return len(self._edges)

    def __contains__(self, label: object) -> bool:
        return label in self._ids

    def __len__(self) -> int:
        return len(self._labels)

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes)

    def has_node_id(self, node_id: int) -> bool:
        return node_id in self._labels

    def label(self, node_id: int) -> str:
        """Label of a node id.

        Raises:
            KeyError: If the id is not part of this graph
        """
        return self._labels[node_id]

    def node_id(self, label: str) -> int:
        """Id of a label.

        Raises:
            KeyError: If no node carries the label
        """
        return self._ids[label]

    # ------------------------------------------------------------------
    # Derived graphs
    # ------------------------------------------------------------------

    def without_isolated_nodes(self) -> "RelationGraph":
        """Copy without zero-degree nodes.

        Surviving nodes keep their ids, so ids may have gaps afterwards.
        Edges and the sequence counter are carried over unchanged.
        """
        connected = {e.source for e in self._edges} | {e.target for e in self._edges}
        pruned = RelationGraph()
        pruned._labels = {
            node_id: label for node_id, label in self._labels.items() if node_id in connected
        }
        pruned._ids = {label: node_id for node_id, label in pruned._labels.items()}
        pruned._edges = list(self._edges)
        pruned._edge_keys = set(self._edge_keys)
        pruned._next_sequence = self._next_sequence
        pruned._next_id = self._next_id
        return pruned

    def __repr__(self) -> str:
        return f"RelationGraph(nodes={self.node_count}, edges={self.edge_count})"
