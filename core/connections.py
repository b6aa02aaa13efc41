from __future__ import annotations

from typing import List, Tuple

from graph.schema import Graph, GraphEdge
from .models import CONNECTION_TRUE, NodeConnection


def container_connections(edges: List[GraphEdge]) -> List[NodeConnection]:
    return [NodeConnection(from_id=edge.source, to_id=edge.target, type=CONNECTION_TRUE) for edge in edges]


def handle_anchor(edge: GraphEdge) -> str:
    """Logical block id encoded in a source handle: "<block>_<suffix>"."""
    if not edge.source_handle:
        return edge.source
    return edge.source_handle.split("_", 1)[0]


def build_connections(graph: Graph) -> Tuple[List[NodeConnection], List[NodeConnection]]:
    """Derive connections from the top-level edges.

    Returns ``(connections, extra)``. Single flows (numeric id) connect
    source to target directly. Branches of a multi-chain structure connect the
    block named by the source handle instead, and keep the raw source/target
    pair in ``extra``.
    """
    connections: List[NodeConnection] = []
    extra: List[NodeConnection] = []

    numeric = graph.has_numeric_id
    for edge in graph.edges:
        if numeric:
            connections.append(NodeConnection(from_id=edge.source, to_id=edge.target, type=CONNECTION_TRUE))
            continue
        connections.append(NodeConnection(from_id=handle_anchor(edge), to_id=edge.target, type=CONNECTION_TRUE))
        extra.append(NodeConnection(from_id=edge.source, to_id=edge.target, type=CONNECTION_TRUE))

    return connections, extra
