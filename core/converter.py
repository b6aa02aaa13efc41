from __future__ import annotations

import logging
from typing import Any, List

from graph.cycles import detect_cycle
from graph.preprocess import normalize_raw_to_graph
from graph.schema import Graph
from .connections import build_connections
from .errors import CycleDetectedError
from .flattener import flatten_graph
from .models import NodeConnection, RuleChain, RuleChainBaseInfo, RuleMetadata
from .root import synthesize_root

logger = logging.getLogger(__name__)

DEFAULT_CHAIN_NAME = "test"
CHAIN_DESCRIPTION = "Converted from Graph"
# Chains with this id fold the raw branch edges into the cycle check too
MULTIPLE_CHAIN_ID = "multiple"


def convert_flow_to_rule_chain(graph: Any, tenant_id: str, name: str = DEFAULT_CHAIN_NAME) -> RuleChain:
    """Lower an editor flow graph into a rule chain.

    ``graph`` may be a ``Graph`` or its raw JSON dict. Raises
    ``CycleDetectedError`` (carrying the partially built chain) when the
    resulting connections contain a cycle.
    """
    if not isinstance(graph, Graph):
        graph = normalize_raw_to_graph(graph)

    logger.info(f"Converting flow graph {graph.chain_id!r} to a rule chain")

    state = flatten_graph(graph, tenant_id)
    top_level, extra = build_connections(graph)
    connections: List[NodeConnection] = state.connections + top_level
    nodes = synthesize_root(graph, state)

    chain = RuleChain(
        rule_chain=RuleChainBaseInfo(
            id=graph.chain_id,
            name=name,
            root=True,
            debug_mode=False,
            tenant_id=tenant_id,
            additional_info={"description": CHAIN_DESCRIPTION},
        ),
        metadata=RuleMetadata(
            first_node_index=0,
            nodes=nodes,
            connections=connections,
        ),
    )

    checked = list(connections)
    if chain.id == MULTIPLE_CHAIN_ID:
        checked.extend(extra)

    result = detect_cycle(checked)
    if result.has_cycle:
        logger.error(f"Cycle detected in graph {chain.id!r}: {' -> '.join(result.cycle)}")
        raise CycleDetectedError(chain, result.cycle)

    logger.info(f"Converted graph {chain.id!r}: {len(nodes)} nodes, {len(connections)} connections")
    return chain
