"""Cycle enumeration and classification for relation graphs.

Every elementary directed cycle is found (Johnson's algorithm) and
classified by the edges it traverses:

    definitive  every hop is a computed edge (define a: b, define b: a).
                The relations can never resolve; reject the model.
    possible    at least one direct or tupleset hop. Loops only if the
                relationship tuples loop; evaluators need a recursion guard.

A hop between two consecutive cycle nodes may be backed by several
parallel edges (different tupleset contexts). The hop counts as computed
when any of them is computed; computed edges always have an empty
context, so there is at most one such candidate.

Complexity:
    Johnson's algorithm is O((V + E) * (C + 1)) for C cycles. C itself
    can grow exponentially with the graph (a complete graph on n nodes
    has more than (n - 1)! cycles). Nothing is truncated: densely
    interconnected unions of many relations are slow to analyze.

Both the SCC decomposition (Tarjan) and the circuit search use explicit
stacks, so deep graphs never hit the interpreter recursion limit.

Python 3.13+.
"""

import logging
import time
from collections import defaultdict
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass

from authzgraph.enums import CycleKind
from authzgraph.graph.multigraph import RelationGraph

__all__ = [
    "Cycle",
    "CycleReport",
    "classify",
    "simple_cycles",
    "strongly_connected_components",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Cycle:
    """One elementary cycle.

    Attributes:
        nodes: Node ids in traversal order, starting at the smallest id.
            A self-loop has a single node.
        kind: DEFINITIVE or POSSIBLE
        labels: Node labels, parallel to nodes
    """

    nodes: tuple[int, ...]
    kind: CycleKind
    labels: tuple[str, ...]

    @property
    def path(self) -> str:
        """Closed path text: "resource#a -> resource#b -> resource#a"."""
        return " -> ".join((*self.labels, self.labels[0]))

    @property
    def is_definitive(self) -> bool:
        return self.kind is CycleKind.DEFINITIVE

    def __len__(self) -> int:
        return len(self.nodes)


@dataclass(frozen=True, slots=True)
class CycleReport:
    """Outcome of cycle analysis over one graph.

    Counts are derived from the cycle list, so
    definitive_count + possible_count == total always holds.
    """

    cycles: tuple[Cycle, ...] = ()

    @property
    def total(self) -> int:
        return len(self.cycles)

    @property
    def definitive_count(self) -> int:
        return sum(1 for c in self.cycles if c.kind is CycleKind.DEFINITIVE)

    @property
    def possible_count(self) -> int:
        return sum(1 for c in self.cycles if c.kind is CycleKind.POSSIBLE)

    @property
    def has_cycles(self) -> bool:
        return bool(self.cycles)

    @property
    def has_definitive_cycles(self) -> bool:
        return any(c.kind is CycleKind.DEFINITIVE for c in self.cycles)

    @property
    def definitive(self) -> tuple[Cycle, ...]:
        return tuple(c for c in self.cycles if c.kind is CycleKind.DEFINITIVE)

    @property
    def possible(self) -> tuple[Cycle, ...]:
        return tuple(c for c in self.cycles if c.kind is CycleKind.POSSIBLE)

    def format(self) -> str:
        """Human-readable summary, one line per cycle."""
        if not self.cycles:
            return "no cycles"
        lines = [
            f"{self.total} cycle(s): {self.definitive_count} definitive, "
            f"{self.possible_count} possible"
        ]
        lines.extend(f"  [{cycle.kind}] {cycle.path}" for cycle in self.cycles)
        return "\n".join(lines)


# ============================================================================
# GRAPH ALGORITHMS
# ============================================================================


def strongly_connected_components(
    nodes: Sequence[int], successors: Mapping[int, Sequence[int]]
) -> list[set[int]]:
    """Tarjan's SCC decomposition with an explicit work stack.

    Args:
        nodes: Vertices to decompose, visited in the given order
        successors: Outgoing neighbors per vertex; neighbors outside
            `nodes` must not appear

    Returns:
        Components in reverse topological order (Tarjan's natural order)
    """
    index: dict[int, int] = {}
    lowlink: dict[int, int] = {}
    on_stack: set[int] = set()
    stack: list[int] = []
    components: list[set[int]] = []
    counter = 0

    for root in nodes:
        if root in index:
            continue

        index[root] = lowlink[root] = counter
        counter += 1
        stack.append(root)
        on_stack.add(root)
        work: list[tuple[int, Iterator[int]]] = [(root, iter(successors.get(root, ())))]

        while work:
            node, neighbors = work[-1]
            descended = False
            for neighbor in neighbors:
                if neighbor not in index:
                    index[neighbor] = lowlink[neighbor] = counter
                    counter += 1
                    stack.append(neighbor)
                    on_stack.add(neighbor)
                    work.append((neighbor, iter(successors.get(neighbor, ()))))
                    descended = True
                    break
                if neighbor in on_stack:
                    lowlink[node] = min(lowlink[node], index[neighbor])
            if descended:
                continue

            work.pop()
            if work:
                parent = work[-1][0]
                lowlink[parent] = min(lowlink[parent], lowlink[node])

            if lowlink[node] == index[node]:
                component: set[int] = set()
                while True:
                    member = stack.pop()
                    on_stack.discard(member)
                    component.add(member)
                    if member == node:
                        break
                components.append(component)

    return components


def _unblock(node: int, blocked: set[int], blocked_by: dict[int, set[int]]) -> None:
    pending = {node}
    while pending:
        current = pending.pop()
        if current in blocked:
            blocked.remove(current)
            pending.update(blocked_by[current])
            blocked_by[current].clear()


def _circuits_from(
    start: int, successors: Mapping[int, Sequence[int]]
) -> Iterator[tuple[int, ...]]:
    """Elementary circuits through start inside one strongly connected component."""
    path = [start]
    blocked = {start}
    closed: set[int] = set()
    blocked_by: dict[int, set[int]] = defaultdict(set)
    # Reversed so pop() yields neighbors in ascending order.
    stack: list[tuple[int, list[int]]] = [(start, list(reversed(successors[start])))]

    while stack:
        node, neighbors = stack[-1]
        if neighbors:
            neighbor = neighbors.pop()
            if neighbor == start:
                yield tuple(path)
                closed.update(path)
            elif neighbor not in blocked:
                path.append(neighbor)
                stack.append((neighbor, list(reversed(successors[neighbor]))))
                closed.discard(neighbor)
                blocked.add(neighbor)
                continue

        if not neighbors:
            if node in closed:
                _unblock(node, blocked, blocked_by)
            else:
                for neighbor in successors[node]:
                    blocked_by[neighbor].add(node)
            stack.pop()
            path.pop()


def simple_cycles(
    nodes: Sequence[int], successors: Mapping[int, Sequence[int]]
) -> Iterator[tuple[int, ...]]:
    """Enumerate elementary cycles (Johnson, 1975).

    For each vertex s in ascending order, the cycles whose smallest
    vertex is s are the circuits through s in its strongly connected
    component of the subgraph induced by the vertices >= s.

    Args:
        nodes: All vertices
        successors: Distinct outgoing neighbors per vertex

    Yields:
        Vertex tuples starting at their smallest vertex. A self-loop
        yields a one-element tuple.
    """
    ordered = sorted(nodes)
    for position, start in enumerate(ordered):
        allowed = set(ordered[position:])
        induced = {
            node: [n for n in successors.get(node, ()) if n in allowed] for node in allowed
        }
        component = next(
            c for c in strongly_connected_components(ordered[position:], induced) if start in c
        )
        if len(component) == 1 and start not in induced[start]:
            continue
        restricted = {
            node: [n for n in induced[node] if n in component] for node in sorted(component)
        }
        yield from _circuits_from(start, restricted)


# ============================================================================
# CLASSIFICATION
# ============================================================================


def classify(graph: RelationGraph) -> CycleReport:
    """Enumerate and classify every cycle of a relation graph.

    Pure: the graph is not modified. Isolated nodes have no influence,
    so the result is the same before and after pruning.
    """
    started = time.perf_counter()
    successors: dict[int, list[int]] = {node.id: [] for node in graph.nodes}
    computed_hops: set[tuple[int, int]] = set()
    for edge in graph.edges:
        if edge.target not in successors[edge.source]:
            successors[edge.source].append(edge.target)
        if edge.computed:
            computed_hops.add((edge.source, edge.target))
    for targets in successors.values():
        targets.sort()

    cycles: list[Cycle] = []
    for nodes in simple_cycles(list(successors), successors):
        hops = zip(nodes, (*nodes[1:], nodes[0]), strict=True)
        kind = (
            CycleKind.DEFINITIVE
            if all(hop in computed_hops for hop in hops)
            else CycleKind.POSSIBLE
        )
        cycles.append(Cycle(nodes=nodes, kind=kind, labels=tuple(graph.label(n) for n in nodes)))

    report = CycleReport(cycles=tuple(cycles))
    logger.debug(
        "Classified %d cycles (%d definitive, %d possible) in %.3f ms",
        report.total,
        report.definitive_count,
        report.possible_count,
        (time.perf_counter() - started) * 1000,
    )
    return report
