"""
Graph package: editor flow-graph schema and structural tooling for lowered rule chains
"""

from .schema import (
    FlowModel, Metadata, ValidateFields, NodeData, GraphNode, BlockNode, EdgeData, GraphEdge, Graph,
    CycleDetectionResult, TopologicalOrder, ValidationReport, format_graph_id, is_numeric_id,
)
from .preprocess import load_json, normalize_raw_to_graph
from .builder import build_connection_graph, build_nx_graph
from .cycles import detect_cycle, find_cycle, topological_order
from .validator import validate_rule_chain
from .visualize import draw_with_legend
from .graph_builder import RuleChainGraph

__all__ = [
    'FlowModel', 'Metadata', 'ValidateFields', 'NodeData', 'GraphNode', 'BlockNode', 'EdgeData',
    'GraphEdge', 'Graph', 'format_graph_id', 'is_numeric_id',
    'CycleDetectionResult', 'TopologicalOrder', 'ValidationReport',
    'load_json', 'normalize_raw_to_graph',
    'build_connection_graph', 'build_nx_graph',
    'detect_cycle', 'find_cycle', 'topological_order',
    'validate_rule_chain',
    'draw_with_legend',
    'RuleChainGraph',
]
