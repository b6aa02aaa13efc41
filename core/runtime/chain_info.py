from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from graph.graph_builder import RuleChainGraph
from graph.preprocess import load_json, normalize_raw_to_graph
from graph.schema import Graph, ValidationReport
from core.converter import convert_flow_to_rule_chain
from core.models import RuleChain


@dataclass
class ChainInfo:
    graph: Graph
    chain: RuleChain
    report: ValidationReport
    graph_info: Dict[str, Any]


def convert_and_validate(raw: Any, tenant_id: str) -> ChainInfo:
    """Convert an editor graph (dict or Graph), then validate the resulting chain structure.

    Conversion errors (cycles, malformed input) propagate; structural findings
    are returned in the report.
    """
    graph = normalize_raw_to_graph(raw)
    chain = convert_flow_to_rule_chain(graph, tenant_id)
    chain_graph = RuleChainGraph(chain)
    report = chain_graph.validate()
    return ChainInfo(
        graph=graph,
        chain=chain,
        report=report,
        graph_info=chain_graph.export_graph_info(),
    )


def load_and_convert(json_path: str, tenant_id: str) -> ChainInfo:
    return convert_and_validate(load_json(json_path), tenant_id)
