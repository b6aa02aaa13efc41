from __future__ import annotations

import logging
from typing import List

from graph.schema import Graph
from .flattener import FlattenState
from .models import RuleNode
from .transformer import SINGLE_BLOCK, edge_triples

logger = logging.getLogger(__name__)

START_BLOCK_NAME = "Start Single Block"


def synthesize_root(graph: Graph, state: FlattenState) -> List[RuleNode]:
    """Return the flat node list with the chain's entry node at index 0.

    1. single flow without a default container: a virtual ``singleBlock``
       listing every top-level node is prepended;
    2. a default container was seen: it is prepended under the chain id;
    3. otherwise the first conditional-family container is moved to the front.
    """
    nodes = list(state.nodes)

    if graph.has_numeric_id and not state.default_seen:
        root = RuleNode(
            id=graph.chain_id,
            type=SINGLE_BLOCK,
            name=START_BLOCK_NAME,
            configuration={
                "NodeIdList": list(state.parent_ids),
                "edges": edge_triples(graph.edges),
            },
        )
        return [root] + nodes

    if state.default_seen and state.default_node is not None:
        root = state.default_node.model_copy(update={"id": graph.chain_id})
        return [root] + nodes

    if state.anchor is None:
        logger.warning(f"Graph {graph.chain_id!r} has no default or conditional container; keeping node order")
        return nodes

    for index, node in enumerate(nodes):
        if node.id == state.anchor.id:
            return [node] + nodes[:index] + nodes[index + 1:]

    logger.warning(f"Anchor {state.anchor.id!r} not found among lowered nodes; keeping node order")
    return nodes
