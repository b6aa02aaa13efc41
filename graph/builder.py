from __future__ import annotations

from typing import Any, Dict, Iterable, TYPE_CHECKING

import networkx as nx

if TYPE_CHECKING:
    from core.models import NodeConnection, RuleChain


def build_connection_graph(connections: Iterable["NodeConnection"]) -> nx.DiGraph:
    """Adjacency over node ids; endpoints are added as they are referenced."""
    g: nx.DiGraph = nx.DiGraph()
    for conn in connections:
        g.add_edge(conn.from_id, conn.to_id, type=conn.type)
    return g


def build_nx_graph(chain: "RuleChain") -> nx.DiGraph:
    g: nx.DiGraph = nx.DiGraph()

    # add nodes
    for index, node in enumerate(chain.metadata.nodes):
        attrs: Dict[str, Any] = {
            "type": node.type,
            "name": node.name,
            "index": index,
            "members": list(node.configuration.get("NodeIdList") or []),
        }
        g.add_node(node.id, **attrs)

    # add edges
    for conn in chain.metadata.connections:
        g.add_edge(conn.from_id, conn.to_id, type=conn.type)

    return g
