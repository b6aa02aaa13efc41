from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Set, Tuple, TYPE_CHECKING

import networkx as nx

from .builder import build_connection_graph
from .schema import CycleDetectionResult, TopologicalOrder

if TYPE_CHECKING:
    from core.models import NodeConnection

# DFS colours
UNVISITED, IN_PROGRESS, DONE = 0, 1, 2


def find_cycle(g: nx.DiGraph) -> CycleDetectionResult:
    """Three-colour depth-first search; the first back edge found is reported.

    The explicit stack always holds the in-progress path, so the cycle is the
    stack suffix starting at the revisited node.
    """
    color: Dict[str, int] = {n: UNVISITED for n in g.nodes()}

    for start in g.nodes():
        if color[start] != UNVISITED:
            continue
        color[start] = IN_PROGRESS
        stack: List[Tuple[str, Iterator[str]]] = [(start, iter(g.successors(start)))]

        while stack:
            cur, successors = stack[-1]
            descended = False
            for nb in successors:
                if color[nb] == IN_PROGRESS:
                    path = [n for n, _ in stack]
                    return CycleDetectionResult(has_cycle=True, cycle=path[path.index(nb):] + [nb])
                if color[nb] == UNVISITED:
                    color[nb] = IN_PROGRESS
                    stack.append((nb, iter(g.successors(nb))))
                    descended = True
                    break
            if not descended:
                color[cur] = DONE
                stack.pop()

    return CycleDetectionResult(has_cycle=False)


def detect_cycle(connections: Iterable["NodeConnection"]) -> CycleDetectionResult:
    return find_cycle(build_connection_graph(connections))


def topological_order(g: nx.DiGraph) -> TopologicalOrder:
    """Order the acyclic part of ``g``; nodes on or below a cycle are reported instead.

    Start nodes have successors but no predecessors, end nodes the reverse;
    unconnected nodes are neither.
    """
    starts = [n for n in g if g.in_degree(n) == 0 and g.out_degree(n) > 0]
    ends = [n for n in g if g.out_degree(n) == 0 and g.in_degree(n) > 0]

    blocked: Set[str] = set()
    for component in nx.strongly_connected_components(g):
        if len(component) > 1 or any(g.has_edge(n, n) for n in component):
            blocked.update(component)
    for n in list(blocked):
        blocked.update(nx.descendants(g, n))

    order = list(nx.topological_sort(g.subgraph(n for n in g if n not in blocked)))
    return TopologicalOrder(
        success=not blocked,
        order=order,
        cyclic_nodes=[n for n in g if n in blocked],
        start_nodes=starts,
        end_nodes=ends,
    )
