from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, TYPE_CHECKING

import networkx as nx

from .builder import build_nx_graph
from .cycles import find_cycle, topological_order
from .schema import ValidationReport
from .validator import validate_rule_chain
from .visualize import draw_with_legend

if TYPE_CHECKING:
    from core.models import RuleChain

logger = logging.getLogger(__name__)


class RuleChainGraph:
    """Networkx view over a lowered rule chain for inspection and reporting"""

    def __init__(self, chain: "RuleChain") -> None:
        self.chain = chain
        self.graph: nx.DiGraph = build_nx_graph(chain)
        self.report: Optional[ValidationReport] = None

    @property
    def root_id(self) -> Optional[str]:
        nodes = self.chain.metadata.nodes
        return nodes[0].id if nodes else None

    def validate(self) -> ValidationReport:
        self.report = validate_rule_chain(self.chain)
        for w in self.report.warnings:
            logger.warning(f"[{self.chain.id}] {w}")
        for e in self.report.errors:
            logger.error(f"[{self.chain.id}] {e}")
        return self.report

    def detect_cycles(self) -> Dict[str, Any]:
        topo = topological_order(self.graph)
        cycle = find_cycle(self.graph)
        if cycle.has_cycle:
            logger.error(f"Chain {self.chain.id!r} is not a DAG: {' -> '.join(cycle.cycle)}")
        else:
            logger.debug(f"Chain {self.chain.id!r} is a DAG; order: {topo.order}")
        return {
            "success": topo.success,
            "order": topo.order,
            "cyclic_nodes": topo.cyclic_nodes,
            "cycle": cycle.cycle,
        }

    def export_graph_info(self) -> Dict[str, Any]:
        """Summary used by the CLI and the demo: nodes, edges, stats and type groups"""
        type_groups: Dict[str, List[str]] = {}
        for node in self.chain.metadata.nodes:
            type_groups.setdefault(node.type or "unknown", []).append(node.id)

        return {
            "chain_id": self.chain.id,
            "root": self.root_id,
            "nodes": [{"id": n, **attrs} for n, attrs in self.graph.nodes(data=True)],
            "edges": [{"from": u, "to": v, **attrs} for u, v, attrs in self.graph.edges(data=True)],
            "graph_stats": {
                "nodes": self.graph.number_of_nodes(),
                "edges": self.graph.number_of_edges(),
                "is_dag": nx.is_directed_acyclic_graph(self.graph),
            },
            "type_groups": type_groups,
        }

    def visualize_graph(self, save_path: str) -> bool:
        return draw_with_legend(self.graph, save_path)

    def get_members(self, node_id: str) -> List[str]:
        """Ids listed in a container's ``NodeIdList``"""
        if node_id not in self.graph:
            return []
        return list(self.graph.nodes[node_id].get("members") or [])

    def get_predecessors(self, node_id: str) -> List[str]:
        return list(self.graph.predecessors(node_id)) if node_id in self.graph else []

    def get_successors(self, node_id: str) -> List[str]:
        return list(self.graph.successors(node_id)) if node_id in self.graph else []
