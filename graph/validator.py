from __future__ import annotations

from collections import Counter
from typing import List, Set, TYPE_CHECKING

from .builder import build_nx_graph
from .cycles import find_cycle, topological_order
from .schema import ValidationReport

if TYPE_CHECKING:
    from core.models import RuleChain


def validate_rule_chain(chain: "RuleChain") -> ValidationReport:
    """Structural checks on a lowered chain.

    Errors: empty chain, duplicate node ids, connections naming unknown
    nodes, cycles. Warnings: nodes that are neither connected nor listed in
    any container's ``NodeIdList``.
    """
    warnings: List[str] = []
    errors: List[str] = []

    nodes = chain.metadata.nodes
    if not nodes:
        errors.append("Chain has no nodes; there is no entry point at index 0.")

    counts = Counter(node.id for node in nodes)
    duplicates = sorted(node_id for node_id, n in counts.items() if n > 1)
    if duplicates:
        errors.append(f"Duplicate node ids: {duplicates}")

    known: Set[str] = set(counts)
    dangling: List[str] = []
    for conn in chain.metadata.connections:
        for endpoint in (conn.from_id, conn.to_id):
            if endpoint not in known and endpoint not in dangling:
                dangling.append(endpoint)
    if dangling:
        errors.append(f"Connections reference unknown nodes: {dangling}")

    g = build_nx_graph(chain)
    cycle = find_cycle(g)
    if cycle.has_cycle:
        errors.append(f"Cycle detected: {' -> '.join(cycle.cycle)}")

    topo = topological_order(g)

    members: Set[str] = set()
    for node in nodes:
        members.update(node.configuration.get("NodeIdList") or [])
    root_id = nodes[0].id if nodes else None
    isolated = [
        n for n in g.nodes()
        if g.in_degree(n) == 0 and g.out_degree(n) == 0 and n not in members and n != root_id
    ]
    if isolated:
        warnings.append(f"Isolated nodes: {sorted(isolated)}")

    return ValidationReport(
        ok=not errors,
        warnings=warnings,
        errors=errors,
        order=topo.order,
        start_nodes=topo.start_nodes,
        end_nodes=topo.end_nodes,
        isolated_nodes=isolated,
        duplicate_ids=duplicates,
        dangling_ids=dangling,
    )
